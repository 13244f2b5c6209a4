"""
Seismos: Multiscale Acoustic Wave Models

File: comm.py
Description: Thin wrapper around the MPI communicator. Runs without mpi4py
             (or on a single process) take the serial code paths.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

from dataclasses import dataclass
from typing import Optional

try:
    from mpi4py import MPI
except ImportError:
    MPI = None


@dataclass
class MpiContext:
    """
    comm is None for serial runs. Any object implementing the mpi4py
    lowercase API (Get_rank, Get_size, gather, bcast, allgather,
    allreduce) can be used as a communicator.
    """
    comm: Optional[object]
    rank: int = 0
    size: int = 1

    @property
    def distributed(self):
        return self.comm is not None and self.size > 1

    @property
    def is_root(self):
        return self.rank == 0


def get_mpi_context(comm=None):
    """
    Wrap `comm`, or COMM_WORLD when mpi4py is available.
    Single-process communicators are reduced to the serial context.
    """
    if comm is None:
        if MPI is None:
            return MpiContext(comm=None)
        comm = MPI.COMM_WORLD

    size = comm.Get_size()
    if size == 1:
        return MpiContext(comm=None)
    return MpiContext(comm=comm, rank=comm.Get_rank(), size=size)
