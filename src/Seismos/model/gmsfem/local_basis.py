"""
Seismos: Multiscale Acoustic Wave Models

File: local_basis.py
Description: Construction of the local multiscale basis of one coarse block.

             The basis of a block consists of
               - boundary modes: dominant modes of the space of local
                 harmonic extensions of boundary data,
               - interior modes: lowest eigenmodes of the block with
                 homogeneous Dirichlet conditions on its boundary,
             expressed in the fine DG space of the block.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np
import scipy.linalg as sla

from Seismos.grid.cartesian import CartesianGrid
from Seismos.fem.spaces import CGSpace, DGSpace
from Seismos.fem.forms import SIDE_NAMES, cg_mass, cg_stiffness, dg_mass, dg_stiffness
from Seismos.errors import ConfigurationError, ConsistencyError
from Seismos.logging import get_logger

logger = get_logger(__name__)

BASIS_VARIANTS = ("cg", "dg")


def available_modes(shape, order, variant="cg"):
    """
    Number of (boundary, interior) modes a block of `shape` fine cells
    can provide.

    cg: boundary and interior nodes of the local continuous space.
    dg: DG nodes on and strictly inside the block boundary.
    """
    if variant not in BASIS_VARIANTS:
        raise ConfigurationError(f"Unknown basis variant '{variant}'")
    if any(n <= 0 for n in shape):
        raise ConsistencyError(f"Degenerate coarse block {shape}")

    if variant == "cg":
        per_axis = [n * order + 1 for n in shape]
    else:
        per_axis = [n * (order + 1) for n in shape]
    total = int(np.prod(per_axis))
    interior = int(np.prod([max(m - 2, 0) for m in per_axis]))
    return total - interior, interior


def _lowest_modes(A, B, k):
    """
    Lowest k eigenvectors of A z = lambda B z (B-orthonormal columns).
    """
    if k == 0:
        return np.zeros((A.shape[0], 0))
    _, Z = sla.eigh(A, B, subset_by_index=[0, k - 1])
    return Z


def check_full_rank(R_block, block_index):
    """
    Columns of a local basis must be linearly independent.
    """
    if R_block.shape[1] == 0:
        raise ConsistencyError(f"Block {block_index}: empty local basis")
    sv = np.linalg.svd(R_block, compute_uv=False)
    tol = sv[0] * max(R_block.shape) * np.finfo(np.float64).eps
    rank = int(np.sum(sv > tol))
    if rank < R_block.shape[1]:
        raise ConsistencyError(f"Block {block_index}: local basis has rank {rank} "
                               f"< {R_block.shape[1]} columns")


def check_local_map(local2global, R_block, block_index):
    """
    The local-to-global map must be resolved and match the basis height.
    """
    if local2global.shape[0] != R_block.shape[0]:
        raise ConsistencyError(f"Block {block_index}: map has {local2global.shape[0]} entries "
                               f"but the basis has {R_block.shape[0]} rows")
    if np.any(local2global < 0):
        raise ConsistencyError(f"Block {block_index}: unresolved entries in the local-to-global map")


class LocalBasisBuilder:
    """
    Builds R_block, (local fine DG DOFs) x (n_boundary + n_interior), for
    every coarse block.

    media: MediaProperties of the whole fine grid
    order: polynomial order of the fine space
    n_boundary, n_interior: requested number of boundary / interior modes
    variant: "cg" (harmonic extensions, default) or "dg" (local SIPG eigenmodes)
    sigma, kappa: SIPG parameters, used by the "dg" variant
    """
    def __init__(self, media, order, n_boundary, n_interior, variant="cg",
                 sigma=-1.0, kappa=1.0):
        if variant not in BASIS_VARIANTS:
            raise ConfigurationError(f"Unknown basis variant '{variant}'")
        self.media = media
        self.order = int(order)
        self.n_boundary = int(n_boundary)
        self.n_interior = int(n_interior)
        self.variant = variant
        self.sigma = float(sigma)
        self.kappa = float(kappa)

    @property
    def width(self):
        return self.n_boundary + self.n_interior

    def build(self, block, cells):
        """
        block: CoarseBlock
        cells: global fine cell ids of the block in block-local order
        """
        if block.size == 0 or len(cells) != block.size:
            raise ConsistencyError(f"Block {block.index}: {len(cells)} cells for shape {block.n_cells}")

        n_bdr, n_int = available_modes(block.n_cells, self.order, self.variant)
        if self.n_boundary > n_bdr or self.n_interior > n_int:
            raise ConfigurationError(f"Block {block.index} {block.n_cells} provides "
                                     f"{n_bdr} boundary and {n_int} interior modes, "
                                     f"requested {self.n_boundary} and {self.n_interior}")

        grid = CartesianGrid(block.n_cells, block.extent, block.origin)
        one_over_rho = self.media.one_over_rho[cells]
        one_over_K = self.media.one_over_K[cells]

        if self.variant == "cg":
            R_block = self._build_cg(grid, one_over_rho, one_over_K)
        else:
            R_block = self._build_dg(grid, one_over_rho, one_over_K)

        check_full_rank(R_block, block.index)
        return R_block

    def _build_cg(self, grid, one_over_rho, one_over_K):
        space = CGSpace(grid, self.order)
        A = cg_stiffness(space, one_over_rho).toarray()
        M = cg_mass(space, one_over_K).toarray()

        bdr = np.flatnonzero(space.boundary_mask())
        inn = np.flatnonzero(~space.boundary_mask())
        Phi = np.zeros((space.ndofs, self.width))

        # Harmonic extensions of unit boundary values, Psi = [I; -A_II^-1 A_IB]
        if self.n_boundary > 0:
            Psi = np.zeros((space.ndofs, bdr.shape[0]))
            Psi[bdr, np.arange(bdr.shape[0])] = 1.0
            if inn.shape[0] > 0:
                Psi[inn] = -sla.solve(A[np.ix_(inn, inn)], A[np.ix_(inn, bdr)], assume_a="pos")
            Z = _lowest_modes(Psi.T @ A @ Psi, Psi.T @ M @ Psi, self.n_boundary)
            Phi[:, :self.n_boundary] = Psi @ Z

        # Dirichlet eigenmodes, zero on the block boundary
        if self.n_interior > 0:
            Z = _lowest_modes(A[np.ix_(inn, inn)], M[np.ix_(inn, inn)], self.n_interior)
            Phi[inn, self.n_boundary:] = Z

        # Nodal interpolation into the DG space: DG DOF (c, k) sits on CG node conn[c, k]
        return Phi[space.connectivity.ravel()]

    def _build_dg(self, grid, one_over_rho, one_over_K):
        space = DGSpace(grid, self.order)
        M = dg_mass(space, one_over_K).toarray()

        sides = [name for pair in SIDE_NAMES[:grid.dim] for name in pair]
        neumann = dg_stiffness(space, one_over_rho, self.sigma, self.kappa,
                               {side: "rigid" for side in sides}).toarray()
        penalized = dg_stiffness(space, one_over_rho, self.sigma, self.kappa,
                                 {side: "free" for side in sides}).toarray()

        # Non-symmetric penalty variants are symmetrized for the eigenproblems
        neumann = 0.5 * (neumann + neumann.T)
        penalized = 0.5 * (penalized + penalized.T)

        Phi = np.hstack((_lowest_modes(neumann, M, self.n_boundary),
                         _lowest_modes(penalized, M, self.n_interior)))

        # Mass-orthonormalize the combined columns
        G = Phi.T @ M @ Phi
        lam, V = np.linalg.eigh(0.5 * (G + G.T))
        if lam[0] <= lam[-1] * 1e-12:
            raise ConsistencyError("Boundary and interior DG modes are linearly dependent")
        return Phi @ V / np.sqrt(lam)
