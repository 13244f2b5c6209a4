"""
Seismos: Multiscale Acoustic Wave Models

File: dof_map.py
Description: Global DOF reconciler for distributed runs. Fine cells are owned
             in contiguous ranges; each worker numbers the DOFs of its cells
             locally and the full cell -> DOF table is agreed on collectively.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np

from Seismos.fem.spaces import serial_cell_dofs
from Seismos.parallel.collectives import allgather_records, digest, exclusive_offset
from Seismos.partition import split_range
from Seismos.errors import ConsistencyError
from Seismos.logging import get_logger

logger = get_logger(__name__)


def build_cell_table(records, n_cells, nd):
    """
    Assemble the (n_cells, nd) DOF table from (cell, dofs) records.
    Every cell must appear exactly once with exactly nd DOFs.
    """
    table = np.full((n_cells, nd), -1, dtype=np.int64)
    seen = np.zeros(n_cells, dtype=bool)
    for cell, dofs in records:
        if cell < 0 or cell >= n_cells:
            raise ConsistencyError(f"Record for unknown cell {cell}")
        if seen[cell]:
            raise ConsistencyError(f"Duplicate DOF record for cell {cell}")
        if dofs.shape[0] != nd:
            raise ConsistencyError(f"Cell {cell} has {dofs.shape[0]} DOFs, expected {nd}")
        table[cell] = dofs
        seen[cell] = True

    if not np.all(seen):
        missing = np.flatnonzero(~seen)
        raise ConsistencyError(f"{missing.shape[0]} cells have no DOF record "
                               f"(first missing cell: {missing[0]})")
    return table


class DofMapReconciler:
    """
    Agree on the global fine DOF numbering across workers.

    mpi: MpiContext
    n_cells: number of fine cells
    nd: DOFs per cell
    """
    def __init__(self, mpi, n_cells, nd):
        self.mpi = mpi
        self.n_cells = int(n_cells)
        self.nd = int(nd)
        self.cell_range = split_range(self.n_cells, mpi.size, mpi.rank)

    @property
    def owned_cells(self):
        return np.arange(*self.cell_range, dtype=np.int64)

    def local_records(self):
        """(cell, global dofs) of the owned cells."""
        start, stop = self.cell_range
        n_local = (stop - start) * self.nd
        offset, total = exclusive_offset(self.mpi.comm, n_local)
        if total != self.n_cells * self.nd:
            raise ConsistencyError(f"Workers own {total} DOFs, expected {self.n_cells * self.nd}")

        return [(c, offset + (c - start) * self.nd + np.arange(self.nd, dtype=np.int64))
                for c in range(start, stop)]

    def reconcile(self, verify_serial=False):
        """
        Returns the full (n_cells, nd) table, identical on every worker.
        verify_serial additionally compares it to the serial numbering.
        """
        records = allgather_records(self.mpi.comm, self.local_records())
        table = build_cell_table(records, self.n_cells, self.nd)

        # Identical table everywhere
        if self.mpi.comm is not None:
            digests = self.mpi.comm.allgather(digest(table))
            if len(set(digests)) != 1:
                raise ConsistencyError("Workers disagree on the global DOF table")

        if verify_serial and not np.array_equal(table, serial_cell_dofs(self.n_cells, self.nd)):
            raise ConsistencyError("Reconciled DOF table differs from the serial numbering")

        logger.info(f"DOF map reconciled: {self.n_cells * self.nd} fine DOFs "
                    f"over {self.mpi.size} worker(s)")
        return table
