"""
Seismos: Multiscale Acoustic Wave Models

File: forms.py
Description: Assembly of the fine-scale bilinear forms on Cartesian grids.
             Discontinuous Galerkin mass and symmetric interior penalty (SIPG)
             stiffness, continuous Galerkin mass and stiffness.

             All element and face matrices are tensor products of the 1D
             reference matrices so assembly is a vectorized COO -> CSR pass.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np
import scipy.sparse as sp

from Seismos.fem.reference import kron_axes
from Seismos.errors import ConfigurationError, ConsistencyError

# Order of the boundary sides in a boundary condition dictionary
SIDE_NAMES = (("left", "right"), ("bottom", "top"), ("front", "back"))
BOUNDARY_KINDS = ("free", "rigid")


def element_mass(ref, h):
    """Element mass matrix of a cell with spacings h."""
    return kron_axes([ref.mass * ha for ha in h])


def element_stiffness(ref, h):
    """Element stiffness (Laplacian) matrix of a cell with spacings h."""
    dim = len(h)
    K = 0.0
    for a in range(dim):
        K = K + kron_axes([ref.stiffness / h[b] if b == a else ref.mass * h[b]
                           for b in range(dim)])
    return K


def _coo_blocks(row_dofs, col_dofs, values):
    """
    Flatten per-entity dense blocks into COO triplets.
      row_dofs: (n, r), col_dofs: (n, c), values: (n, r, c)
    """
    n, r = row_dofs.shape
    c = col_dofs.shape[1]
    rows = np.broadcast_to(row_dofs[:, :, None], (n, r, c)).ravel()
    cols = np.broadcast_to(col_dofs[:, None, :], (n, r, c)).ravel()
    return rows, cols, values.ravel()


def _to_csr(rows, cols, vals, n, row_mask=None):
    if row_mask is not None:
        keep = row_mask[rows]
        rows, cols, vals = rows[keep], cols[keep], vals[keep]
    A = sp.coo_matrix((vals, (rows, cols)), shape=(n, n)).tocsr()
    A.sum_duplicates()
    return A


def _check_coefficient(coef, n_cells, name):
    coef = np.asarray(coef, dtype=np.float64)
    if coef.shape != (n_cells,):
        raise ConsistencyError(f"Coefficient {name} has shape {coef.shape}, expected ({n_cells},)")
    return coef


def dg_mass(space, coef, cells=None):
    """
    DG mass matrix weighted by a per-cell coefficient.
    Only the rows of `cells` are assembled when given (owned rows).
    """
    grid = space.grid
    coef = _check_coefficient(coef, grid.n_cells, "mass")
    if cells is None:
        cells = np.arange(grid.n_cells)

    E = element_mass(space.ref, grid.h)
    dofs = space.cell_dofs[cells]
    rows, cols, vals = _coo_blocks(dofs, dofs, coef[cells, None, None] * E[None])
    return _to_csr(rows, cols, vals, space.ndofs)


def _face_factors(ref, h, axis, X):
    """
    Expand a 1D face matrix X (acting along `axis`) to the full tensor space
    using mass matrices along the tangential axes.
    """
    return kron_axes([X if b == axis else ref.mass * h[b] for b in range(len(h))])


def _interior_face_blocks(ref, h, axis, sigma):
    """
    Per-face matrices of the SIPG interior face terms normal to `axis`.

    Returns (F_L, F_R, F_P), each (2nd x 2nd), such that the face contribution is
        Q_L*F_L + Q_R*F_R + penalty*F_P
    with [L dofs, R dofs] ordering.
    """
    m = ref.n
    ha = h[axis]
    tL, tR = ref.trace[1], ref.trace[0]
    dL, dR = ref.dtrace[1] / ha, ref.dtrace[0] / ha

    jump = np.concatenate((tL, -tR))
    fL = np.concatenate((0.5 * dL, np.zeros(m)))
    fR = np.concatenate((np.zeros(m), 0.5 * dR))

    XL = -np.outer(jump, fL) + sigma * np.outer(fL, jump)
    XR = -np.outer(jump, fR) + sigma * np.outer(fR, jump)
    XP = np.outer(jump, jump)

    def expand(X):
        return np.block([[_face_factors(ref, h, axis, X[i*m:(i+1)*m, j*m:(j+1)*m])
                          for j in range(2)] for i in range(2)])

    return expand(XL), expand(XR), expand(XP)


def _boundary_face_blocks(ref, h, axis, side, sigma):
    """
    Per-face matrices (F_A, F_P) of a boundary face: contribution Q*F_A + penalty*F_P.
    """
    ha = h[axis]
    if side == 0:
        t, d = ref.trace[0], -ref.dtrace[0] / ha
    else:
        t, d = ref.trace[1], ref.dtrace[1] / ha

    XA = -np.outer(t, d) + sigma * np.outer(d, t)
    XP = np.outer(t, t)
    return _face_factors(ref, h, axis, XA), _face_factors(ref, h, axis, XP)


def check_boundary(boundary, dim):
    """Normalize a boundary condition dictionary to {side name: kind}."""
    bc = {}
    for axis in range(dim):
        for name in SIDE_NAMES[axis]:
            kind = boundary.get(name, "free") if boundary is not None else "free"
            if kind not in BOUNDARY_KINDS:
                raise ConfigurationError(f"Unknown boundary condition '{kind}' on side '{name}'")
            bc[name] = kind
    return bc


def dg_stiffness(space, coef, sigma=-1.0, kappa=1.0, boundary=None, cells=None):
    """
    SIPG stiffness matrix for -div(coef grad u) on a DG space.

    sigma: symmetry parameter (-1 gives the symmetric interior penalty method)
    kappa: penalty scale, penalty = kappa*(p+1)^2 * {coef/h}
    boundary: {side: "free" | "rigid"}; "free" sides carry weakly imposed
              homogeneous Dirichlet terms, "rigid" sides are natural.
    cells: when given, only the rows of these cells are assembled.
    """
    grid = space.grid
    ref = space.ref
    h = grid.h
    p = space.order
    coef = _check_coefficient(coef, grid.n_cells, "stiffness")
    bc = check_boundary(boundary, grid.dim)

    row_mask = None if cells is None else space.dof_mask(cells)
    if cells is None:
        cells = np.arange(grid.n_cells)

    # Volume terms
    E = element_stiffness(ref, h)
    dofs = space.cell_dofs[cells]
    parts = [_coo_blocks(dofs, dofs, coef[cells, None, None] * E[None])]

    pen_scale = kappa * (p + 1) ** 2
    for axis in range(grid.dim):
        # Interior faces
        lower, upper = grid.interior_faces(axis)
        if len(lower) > 0:
            FL, FR, FP = _interior_face_blocks(ref, h, axis, sigma)
            QL, QR = coef[lower], coef[upper]
            pen = pen_scale * 0.5 * (QL + QR) / h[axis]
            vals = (QL[:, None, None] * FL[None] + QR[:, None, None] * FR[None]
                    + pen[:, None, None] * FP[None])
            pair = np.hstack((space.cell_dofs[lower], space.cell_dofs[upper]))
            parts.append(_coo_blocks(pair, pair, vals))

        # Boundary faces
        for side in (0, 1):
            if bc[SIDE_NAMES[axis][side]] != "free":
                continue
            bcells = grid.boundary_cells(axis, side)
            FA, FP = _boundary_face_blocks(ref, h, axis, side, sigma)
            Q = coef[bcells]
            vals = Q[:, None, None] * (FA[None] + (pen_scale / h[axis]) * FP[None])
            bdofs = space.cell_dofs[bcells]
            parts.append(_coo_blocks(bdofs, bdofs, vals))

    rows, cols, vals = (np.concatenate(x) for x in zip(*parts))
    return _to_csr(rows, cols, vals, space.ndofs, row_mask)


def cg_mass(space, coef):
    grid = space.grid
    coef = _check_coefficient(coef, grid.n_cells, "mass")
    E = element_mass(space.ref, grid.h)
    conn = space.connectivity
    rows, cols, vals = _coo_blocks(conn, conn, coef[:, None, None] * E[None])
    return _to_csr(rows, cols, vals, space.ndofs)


def cg_stiffness(space, coef):
    grid = space.grid
    coef = _check_coefficient(coef, grid.n_cells, "stiffness")
    E = element_stiffness(space.ref, grid.h)
    conn = space.connectivity
    rows, cols, vals = _coo_blocks(conn, conn, coef[:, None, None] * E[None])
    return _to_csr(rows, cols, vals, space.ndofs)
