"""
Seismos: Multiscale Acoustic Wave Models

File: source.py
Description: Ricker source wavelet and spatial source load vectors on a DG space.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np

from Seismos.fem.reference import gauss_rule, kron_axes, tensor_points
from Seismos.grid.cartesian import VERTICAL_AXIS
from Seismos.errors import ConfigurationError


def ricker(frequency, t):
    """
    Ricker wavelet (1 - 2a^2) exp(-a^2), a = pi f (t - 1/f).
    Peaks at t = 1/f.
    """
    a = np.pi * frequency * (np.asarray(t, dtype=np.float64) - 1.0 / frequency)
    a2 = a * a
    return (1.0 - 2.0 * a2) * np.exp(-a2)


def source_time_series(frequency, dt, n_steps):
    """
    Source value of every time step: entry k-1 belongs to step k and is
    evaluated at time (k-1)*dt. The returned array is read-only.
    """
    s = ricker(frequency, np.arange(n_steps) * dt)
    s.flags.writeable = False
    return s


def point_load(space, point, scale=1.0, cells=None):
    """
    Dirac delta at `point`: the basis functions of the containing cell
    evaluated at the point. Returns zeros when the cell is not in `cells`.
    """
    b = np.zeros(space.ndofs)
    cell, xi = space.grid.locate(point)
    if cells is not None and cell not in set(np.asarray(cells).tolist()):
        return b
    b[space.cell_dofs[cell]] = scale * space.ref.eval_tensor(xi)
    return b


def gauss_load(space, center, support, scale=1.0, plane_wave=False, cells=None):
    """
    L2 projection load of scale*exp(-|x - c|^2 / support^2).

    With plane_wave the distance is measured along the vertical (y) axis
    only, which turns the source into a horizontal plane at the depth of
    the center.
    """
    grid = space.grid
    ref = space.ref
    if cells is None:
        cells = np.arange(grid.n_cells)
    cells = np.asarray(cells, dtype=np.int64)

    qx, qw = gauss_rule(space.order + 2)
    Bq = kron_axes([ref.eval(qx)] * grid.dim)                     # (nq, nd)
    Wq = kron_axes([qw] * grid.dim) * grid.cell_volume            # (nq,)
    ref_points = tensor_points([qx] * grid.dim)                   # (nq, dim)

    lower = np.array([grid.cell_multi_index(c) for c in cells], dtype=np.float64)
    lower = lower * np.asarray(grid.h) + np.asarray(grid.origin)
    x = lower[:, None, :] + ref_points[None, :, :] * np.asarray(grid.h)

    center = np.asarray(center, dtype=np.float64)[:grid.dim]
    if plane_wave:
        r2 = (x[:, :, VERTICAL_AXIS] - center[VERTICAL_AXIS]) ** 2
    else:
        r2 = np.sum((x - center) ** 2, axis=2)
    f = scale * np.exp(-r2 / support**2)

    b = np.zeros(space.ndofs)
    np.add.at(b, space.cell_dofs[cells], (f * Wq) @ Bq)
    return b


def source_load(space, source, cells=None):
    """
    Build the spatial load vector from a source parameter namespace
    (spatial_function, x, y, z, scale, gauss_support, plane_wave).
    """
    center = (source.x, source.y, source.z)[:space.dim]
    if source.plane_wave:
        return gauss_load(space, center, source.gauss_support, source.scale, True, cells)
    if source.spatial_function == "delta":
        return point_load(space, center, source.scale, cells)
    if source.spatial_function == "gauss":
        return gauss_load(space, center, source.gauss_support, source.scale, False, cells)
    raise ConfigurationError(f"Unknown source spatial function '{source.spatial_function}'")
