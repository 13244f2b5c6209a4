"""
Seismos: Multiscale Acoustic Wave Models

File: model.py
Description: Generalized multiscale finite element (GMsFEM) acoustic model.
             Builds the local bases of the coarse blocks, assembles the global
             restriction operator R, reduces the fine DG operators to the
             coarse space and integrates the coarse system with leapfrog.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np
import scipy.sparse as sp

from Seismos.model.base_model import BaseModel
from Seismos.model.leapfrog import LeapfrogIntegrator
from Seismos.model.fine_dg import assemble_fine_operators
from Seismos.model.gmsfem.local_basis import LocalBasisBuilder, check_local_map
from Seismos.model.gmsfem.restriction import RestrictionBuilder, galerkin_reduce, restrict
from Seismos.partition import CoarsePartition
from Seismos.parallel.collectives import allreduce_sum, exclusive_offset
from Seismos.profiling import timer
from Seismos.errors import verify
from Seismos.logging import get_logger
import Seismos.format as fmt

logger = get_logger(__name__)


def _freeze(A):
    """Mark the storage of an operator read-only."""
    data = A.data if sp.issparse(A) else A
    data.flags.writeable = False
    return A


class MultiscaleAcoustic(BaseModel):
    """
    Coarse system
        M_c = R M R^T,  S_c = R S R^T,  b_c = R b
    with R of shape (coarse DOFs, fine DOFs). Fine fields are recovered with
    the prolongation R^T.

    Attributes read by the driver and the tests:
        partition, R, P (= R^T), M_fine, S_fine, b_fine,
        M_coarse, S_coarse, b_coarse, integrator, reference
    """
    name = "GMsFEM_"

    def __init__(self, ctx):
        s, p, o = ctx
        self.mpi = s.mpi
        comm = self.mpi.comm
        m = p.method
        grid = s.grid

        # 1) Fine operators (owned rows only in distributed runs)
        fine = assemble_fine_operators(ctx)
        self.space = fine.space
        self.M_fine, self.S_fine, self.b_fine = fine.M, fine.S, fine.b

        # 2) Coarse partition and the blocks owned by this worker
        coarse = (m.gms_Nx, m.gms_Ny, m.gms_Nz)[:grid.dim]
        self.partition = CoarsePartition(grid.cells, coarse, grid.h)
        self.blocks = self.partition.owned_blocks(self.mpi.rank, self.mpi.size)

        # 3) Local bases and the global restriction operator
        self.builder = LocalBasisBuilder(s.media, m.order,
                                         m.n_boundary_basis, m.n_interior_basis,
                                         m.basis, m.dg_sigma, m.dg_kappa)
        self.local_bases = {}
        self.R = self._assemble_restriction(comm)
        self.P = self.R.T.tocsr()

        # 4) Galerkin reduction, summed over workers
        with timer.time_section("Setup", "Galerkin reduction"):
            self.M_coarse = _freeze(sp.csr_matrix(allreduce_sum(comm, galerkin_reduce(self.R, self.M_fine))))
            self.S_coarse = _freeze(sp.csr_matrix(allreduce_sum(comm, galerkin_reduce(self.R, self.S_fine))))
            self.b_coarse = _freeze(np.asarray(allreduce_sum(comm, restrict(self.R, self.b_fine))))
        _freeze(self.R)

        self.integrator = LeapfrogIntegrator(self.M_coarse, self.S_coarse, self.b_coarse,
                                             p.dt, name="Coarse mass")

        # 5) Optional reference solution of the full fine system
        self.reference = None
        if o.reference_fine:
            with timer.time_section("Setup", "Reference fine system"):
                M = sp.csr_matrix(allreduce_sum(comm, self.M_fine))
                S = sp.csr_matrix(allreduce_sum(comm, self.S_fine))
                b = allreduce_sum(comm, self.b_fine)
                self.reference = LeapfrogIntegrator(M, S, b, p.dt, name="Fine mass")

        self.info()

    @timer.time_function("Setup", "Local bases")
    def _assemble_restriction(self, comm):
        width = self.builder.width
        n_fine = self.space.ndofs

        # Agree on the coarse row offsets of every worker
        offset, n_coarse = exclusive_offset(comm, len(self.blocks) * width)

        rb = RestrictionBuilder(n_fine)
        row = offset
        for block in self.blocks:
            cells = self.partition.block_cells(block)
            R_block = self.builder.build(block, cells)
            local2global = self.space.cell_dofs[cells].ravel()
            check_local_map(local2global, R_block, block.index)

            rb.add(row, local2global, R_block.T)
            self.local_bases[block.index] = R_block
            row += width

        R = sp.csr_matrix(allreduce_sum(comm, rb.build(n_coarse)))
        verify(R.shape == (n_coarse, n_fine),
               f"Restriction operator has shape {R.shape}, expected ({n_coarse}, {n_fine})")
        return R

    def project(self, U):
        """Fine-scale field R^T U of a coarse vector."""
        return self.P @ U

    def step(self, ctx, source_value):
        self.integrator.step(source_value)
        if self.reference is not None:
            self.reference.step(source_value)

    def fine_field(self):
        return self.project(self.integrator.U0)

    def fields(self):
        """
        coarse_pressure: coarse solution prolongated to the fine space
        fine_pressure: reference fine solution, zero when it is disabled
        coarse_coefficients: the coarse vector itself
        """
        U = self.integrator.U0
        if self.reference is not None:
            u_fine = self.reference.U0
        else:
            u_fine = np.zeros(self.P.shape[0])
        return {
            'fine_pressure': u_fine,
            'coarse_pressure': self.project(U),
            'coarse_coefficients': U,
        }

    def norms(self):
        return {
            'U': self.integrator.norm(),
            'u': self.reference.norm() if self.reference is not None else 0.0,
        }

    def solver_stats(self):
        stats = [self.integrator.stats]
        if self.reference is not None:
            stats.append(self.reference.stats)
        return stats

    def write_matrices(self, writer):
        """
        Collective: the fine operators are row-distributed and summed first.
        Local bases are written by their owners, everything else by root.
        """
        M = allreduce_sum(self.mpi.comm, self.M_fine)
        S = allreduce_sum(self.mpi.comm, self.S_fine)

        for index, R_block in self.local_bases.items():
            writer.write(f"r{index}_local_mat", R_block)
        if not self.mpi.is_root:
            return
        writer.write("r_global_mat", self.R)
        writer.write("r_global_mat_t", self.P)
        writer.write("m_fine_mat", M)
        writer.write("s_fine_mat", S)
        writer.write("m_coarse_mat", self.M_coarse)
        writer.write("s_coarse_mat", self.S_coarse)

    def info(self):
        part = self.partition
        logger.info(10*"-" + " Multiscale Information " + 10*"-")
        logger.info(f"Coarse blocks: {fmt.shape2str(part.coarse_counts)} "
                    f"({part.n_blocks} blocks, smallest {fmt.shape2str(part.min_block_shape())} cells)")
        logger.info(f"Basis: {self.builder.variant}, {self.builder.n_boundary} boundary + "
                    f"{self.builder.n_interior} interior modes per block")
        logger.info(f"Coarse DOFs: {self.R.shape[0]}, fine DOFs: {self.R.shape[1]}")
        logger.info(f"R nonzeros: {self.R.nnz}, M_coarse nonzeros: {self.M_coarse.nnz}")
        logger.info(44*"-")
