"""
Seismos: Multiscale Acoustic Wave Models

File: cartesian.py
Description: This file implements structured 2D quadrilateral and 3D hexahedral
             meshes with uniform spacing in each dimension.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np

from Seismos.grid.base_grid import BaseGrid
from Seismos.errors import ConfigurationError, ConsistencyError
from Seismos.logging import get_logger
import Seismos.format as fmt

logger = get_logger(__name__)

# Depth runs along y in 2D and 3D, "bottom" is y = 0 and "top" is y = sy
VERTICAL_AXIS = 1


class CartesianGrid(BaseGrid):
    """
    Uniform structured mesh of cells.

    Cells are numbered row-major with x fastest:
        c = iz*nx*ny + iy*nx + ix

    cells: (nx, ny[, nz]) number of cells along each axis
    sizes: (sx, sy[, sz]) physical size of the domain
    origin: physical coordinates of the lower corner (zero by default)
    """
    def __init__(self, cells, sizes, origin=None):
        if len(cells) not in (2, 3) or len(cells) != len(sizes):
            raise ConfigurationError(f"Unsupported mesh dimension: cells={cells}, sizes={sizes}")
        if any(int(n) <= 0 for n in cells):
            raise ConsistencyError(f"Cannot build a mesh with {cells} cells")
        if any(float(s) <= 0.0 for s in sizes):
            raise ConsistencyError(f"Cannot build a mesh of size {sizes}")

        self.dim = len(cells)
        self.cells = tuple(int(n) for n in cells)
        self.sizes = tuple(float(s) for s in sizes)
        self.origin = tuple(float(o) for o in (origin if origin is not None else (0.0,)*self.dim))
        self.h = tuple(s / n for s, n in zip(self.sizes, self.cells))

        # Cell ids laid out as an array indexed [iz, iy, ix]
        self._ids = np.arange(self.n_cells, dtype=np.int64).reshape(self.cells[::-1])

    @classmethod
    def from_context(cls, ctx):
        s, p, o = ctx
        g = p.grid
        cells = (g.nx, g.ny, g.nz)[:p.dimension]
        sizes = (g.sx, g.sy, g.sz)[:p.dimension]
        grid = cls(cells, sizes)
        grid.info()
        return grid

    @property
    def n_cells(self):
        return int(np.prod(self.cells))

    @property
    def cell_volume(self):
        return float(np.prod(self.h))

    def _array_axis(self, axis):
        # Axis 0 (x) is the last (fastest) array axis
        return self.dim - 1 - axis

    def cell_multi_index(self, cell):
        return tuple(int(i) for i in np.unravel_index(cell, self.cells[::-1])[::-1])

    def cell_index(self, multi_index):
        return int(np.ravel_multi_index(tuple(multi_index[::-1]), self.cells[::-1]))

    def cell_centers(self):
        """Array (n_cells, dim) of cell centers."""
        axes = [o + (np.arange(n) + 0.5) * h for o, n, h in zip(self.origin, self.cells, self.h)]
        grids = np.meshgrid(*axes[::-1], indexing="ij")
        return np.stack([g.ravel() for g in grids[::-1]], axis=1)

    def interior_faces(self, axis):
        """
        Pairs of neighbouring cells across the faces normal to `axis`.
        Returns (lower, upper) cell arrays; the face normal points from lower to upper.
        """
        a = self._array_axis(axis)
        lower = np.take(self._ids, np.arange(self.cells[axis] - 1), axis=a)
        upper = np.take(self._ids, np.arange(1, self.cells[axis]), axis=a)
        return lower.ravel(), upper.ravel()

    def boundary_cells(self, axis, side):
        """
        Cells touching the low (side=0) or high (side=1) boundary of `axis`.
        """
        a = self._array_axis(axis)
        index = 0 if side == 0 else self.cells[axis] - 1
        return np.take(self._ids, index, axis=a).ravel()

    def locate(self, point):
        """
        Find the cell containing `point` and the reference coordinates of the
        point inside that cell (each in [0, 1]). Points outside the domain are
        clipped to the closest cell.
        """
        multi = []
        xi = []
        for axis in range(self.dim):
            t = (float(point[axis]) - self.origin[axis]) / self.h[axis]
            i = min(max(int(np.floor(t)), 0), self.cells[axis] - 1)
            multi.append(i)
            xi.append(min(max(t - i, 0.0), 1.0))
        return self.cell_index(multi), np.array(xi)

    def info(self):
        logger.info(10*"-" + " Grid Information " + 10*"-")
        logger.info(f"Cartesian {self.dim}D grid initialized.")
        logger.info(f"Domain size: {fmt.shape2str(self.sizes)} m")
        logger.info(f"Grid size: {fmt.shape2str(self.cells)} cells")
        logger.info("Grid spacing: " + " x ".join(f"{h:.2f}" for h in self.h) + " m")
        logger.info(f"Total cells: {self.n_cells}")
        logger.info(38*"-")
