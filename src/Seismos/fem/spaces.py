"""
Seismos: Multiscale Acoustic Wave Models

File: spaces.py
Description: Degree-of-freedom tables of discontinuous and continuous
             tensor-product finite element spaces on Cartesian grids.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np

from Seismos.fem.reference import ReferenceElement
from Seismos.errors import ConsistencyError


def element_local_indices(order, dim):
    """
    Multi-indices (dim, nd) of the nodes of one element, x fastest.
    """
    m = order + 1
    idx = np.indices((m,)*dim).reshape(dim, -1)
    # np.indices is ordered [iz, iy, ix]; flip so row 0 is x
    return idx[::-1]


class DGSpace:
    """
    Discontinuous nodal space: every cell owns (order+1)^dim DOFs.

    cell_dofs is the (n_cells, nd) table of global DOF indices. By default the
    serial numbering cell*nd + k is used; a reconciled table can be passed for
    distributed runs.
    """
    def __init__(self, grid, order, cell_dofs=None):
        self.grid = grid
        self.order = int(order)
        self.dim = grid.dim
        self.ref = ReferenceElement(self.order)
        self.nd = (self.order + 1) ** self.dim

        if cell_dofs is None:
            cell_dofs = serial_cell_dofs(grid.n_cells, self.nd)
        cell_dofs = np.asarray(cell_dofs, dtype=np.int64)
        if cell_dofs.shape != (grid.n_cells, self.nd):
            raise ConsistencyError(f"DOF table shape {cell_dofs.shape} does not match "
                                   f"({grid.n_cells}, {self.nd})")
        if np.any(cell_dofs < 0):
            raise ConsistencyError("DOF table contains unresolved entries")
        self.cell_dofs = cell_dofs

    @property
    def ndofs(self):
        return self.grid.n_cells * self.nd

    def dof_mask(self, cells=None):
        """Boolean mask over global DOFs belonging to `cells` (all if None)."""
        mask = np.zeros(self.ndofs, dtype=bool)
        if cells is None:
            mask[:] = True
        else:
            mask[self.cell_dofs[cells].ravel()] = True
        return mask


class CGSpace:
    """
    Continuous nodal space of the same order on the same grid.
    Node (gx, gy[, gz]) with gx in [0, order*nx] is numbered x fastest.
    """
    def __init__(self, grid, order):
        self.grid = grid
        self.order = int(order)
        self.dim = grid.dim
        self.ref = ReferenceElement(self.order)
        self.nd = (self.order + 1) ** self.dim
        self.nodes_per_axis = tuple(self.order * n + 1 for n in grid.cells)

        # Global node multi-index of every (cell, local node) pair
        cells = np.arange(grid.n_cells)
        cell_multi = np.unravel_index(cells, grid.cells[::-1])[::-1]
        local = element_local_indices(self.order, self.dim)
        self._node_multi = [self.order * cell_multi[a][:, None] + local[a][None, :]
                            for a in range(self.dim)]

        self.connectivity = np.ravel_multi_index(tuple(self._node_multi[::-1]),
                                                 self.nodes_per_axis[::-1]).astype(np.int64)

    @property
    def ndofs(self):
        return int(np.prod(self.nodes_per_axis))

    def boundary_mask(self):
        """Boolean mask of nodes on the boundary of the grid."""
        multi = np.unravel_index(np.arange(self.ndofs), self.nodes_per_axis[::-1])[::-1]
        mask = np.zeros(self.ndofs, dtype=bool)
        for a in range(self.dim):
            mask |= (multi[a] == 0) | (multi[a] == self.nodes_per_axis[a] - 1)
        return mask


def serial_cell_dofs(n_cells, nd):
    return np.arange(n_cells * nd, dtype=np.int64).reshape(n_cells, nd)
