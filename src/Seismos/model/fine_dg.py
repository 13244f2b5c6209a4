"""
Seismos: Multiscale Acoustic Wave Models

File: fine_dg.py
Description: Fine-scale discontinuous Galerkin acoustic model. Provides the
             fine operators shared with the multiscale model and a reference
             solver that integrates the full fine system.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import scipy.sparse as sp

from Seismos.model.base_model import BaseModel
from Seismos.model.leapfrog import LeapfrogIntegrator
from Seismos.fem.spaces import DGSpace
from Seismos.fem.forms import dg_mass, dg_stiffness
from Seismos.fem.source import source_load
from Seismos.parallel.collectives import allreduce_sum
from Seismos.parallel.dof_map import DofMapReconciler
from Seismos.profiling import timer
from Seismos.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FineOperators:
    """
    Fine DG mass M (1/K), SIPG stiffness S (1/rho) and source load b.
    In distributed runs only the rows of owned_cells are assembled.
    """
    space: DGSpace
    M: sp.csr_matrix
    S: sp.csr_matrix
    b: np.ndarray
    owned_cells: Optional[np.ndarray] = None


@timer.time_function("Setup", "Fine operators")
def assemble_fine_operators(ctx):
    s, p, o = ctx
    grid = s.grid
    media = s.media
    mpi = s.mpi
    m = p.method

    # Distributed runs agree on the global DOF numbering first
    cell_dofs = None
    owned_cells = None
    if mpi.distributed:
        nd = (m.order + 1) ** grid.dim
        reconciler = DofMapReconciler(mpi, grid.n_cells, nd)
        cell_dofs = reconciler.reconcile(verify_serial=o.verify_dof_map)
        owned_cells = reconciler.owned_cells

    space = DGSpace(grid, m.order, cell_dofs)
    M = dg_mass(space, media.one_over_K, owned_cells)
    S = dg_stiffness(space, media.one_over_rho, m.dg_sigma, m.dg_kappa,
                     p.boundary, owned_cells)
    b = source_load(space, p.source, owned_cells)

    logger.info(f"Fine DG space: order {m.order}, {space.ndofs} DOFs, "
                f"{space.nd} DOFs per cell")
    return FineOperators(space, M, S, b, owned_cells)


class FineAcousticDG(BaseModel):
    """
    Leapfrog integration of the full fine DG system.
    Every worker holds the complete fine system.
    """
    name = "DG_"

    def __init__(self, ctx):
        s, p, o = ctx
        self.mpi = s.mpi
        comm = self.mpi.comm

        ops = assemble_fine_operators(ctx)
        self.space = ops.space
        self.M = sp.csr_matrix(allreduce_sum(comm, ops.M))
        self.S = sp.csr_matrix(allreduce_sum(comm, ops.S))
        self.b = allreduce_sum(comm, ops.b)

        self.integrator = LeapfrogIntegrator(self.M, self.S, self.b, p.dt, name="Fine mass")

    def step(self, ctx, source_value):
        self.integrator.step(source_value)

    def fine_field(self):
        return self.integrator.U0

    def fields(self):
        return {'fine_pressure': self.integrator.U0}

    def norms(self):
        return {'u': self.integrator.norm()}

    def solver_stats(self):
        return [self.integrator.stats]

    def write_matrices(self, writer):
        # Every worker holds the full system, root writes it once
        if not self.mpi.is_root:
            return
        writer.write("m_fine_mat", self.M)
        writer.write("s_fine_mat", self.S)
