"""
Seismos: Multiscale Acoustic Wave Models

File: linalg.py
Description: Linear algebra utilities for Seismos. Preconditioned conjugate
             gradients with a symmetric Gauss-Seidel preconditioner for the
             mass systems of the time stepping, and solver statistics.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np
import numba as nb
import scipy.sparse as sp
from scipy.sparse.linalg import LinearOperator, cg

from Seismos.errors import ConsistencyError
from Seismos.logging import get_logger

logger = get_logger(__name__)

# Iterative solver settings of the time stepping
RTOL = 1e-12
MAXITER = 200


@nb.njit(cache=True)
def _sgs_apply(indptr, indices, data, diag, r):
    """
    One symmetric Gauss-Seidel sweep with zero initial guess:
        z = (D + U)^-1 D (D + L)^-1 r
    """
    n = r.shape[0]
    y = np.empty(n)

    # Forward sweep: (D + L) y = r
    for i in range(n):
        acc = r[i]
        for k in range(indptr[i], indptr[i+1]):
            j = indices[k]
            if j < i:
                acc -= data[k] * y[j]
        y[i] = acc / diag[i]

    # Backward sweep: (D + U) z = D y
    z = np.empty(n)
    for i in range(n-1, -1, -1):
        acc = diag[i] * y[i]
        for k in range(indptr[i], indptr[i+1]):
            j = indices[k]
            if j > i:
                acc -= data[k] * z[j]
        z[i] = acc / diag[i]
    return z


def sgs_preconditioner(A):
    """
    Symmetric Gauss-Seidel preconditioner of a sparse SPD matrix
    as a scipy LinearOperator.
    """
    A = sp.csr_matrix(A, copy=True)
    A.sort_indices()
    diag = A.diagonal().astype(np.float64)
    if np.any(diag <= 0.0):
        raise ConsistencyError("Symmetric Gauss-Seidel requires a positive diagonal")

    indptr, indices, data = A.indptr, A.indices, A.data.astype(np.float64)

    def apply(r):
        return _sgs_apply(indptr, indices, data, diag, np.asarray(r, dtype=np.float64).ravel())

    return LinearOperator(A.shape, matvec=apply, dtype=np.float64)


class SolverStats:
    """
    Convergence bookkeeping of repeated solves with the same operator.
    Non-convergence is counted, never raised.
    """
    def __init__(self, name="solver"):
        self.name = name
        self.solves = 0
        self.non_converged = 0
        self.iterations = []

    def record(self, iterations, converged):
        self.solves += 1
        self.iterations.append(iterations)
        if not converged:
            self.non_converged += 1

    @property
    def max_iterations(self):
        return max(self.iterations) if self.iterations else 0

    @property
    def mean_iterations(self):
        return float(np.mean(self.iterations)) if self.iterations else 0.0

    def summary(self):
        logger.info(f"{self.name}: {self.solves} solves, "
                    f"iterations max = {self.max_iterations}, mean = {self.mean_iterations:.1f}")
        if self.non_converged > 0:
            logger.warning(f"{self.name}: {self.non_converged} of {self.solves} solves "
                           f"did not reach the tolerance {RTOL:.0e}")


class PCGSolver:
    """
    Repeated solves of A x = b for a fixed SPD matrix A.
    """
    def __init__(self, A, rtol=RTOL, maxiter=MAXITER, name="PCG"):
        self.A = sp.csr_matrix(A)
        if self.A.shape[0] != self.A.shape[1]:
            raise ConsistencyError(f"PCG requires a square matrix, got {self.A.shape}")
        self.rtol = rtol
        self.maxiter = maxiter
        self.M = sgs_preconditioner(self.A)
        self.stats = SolverStats(name)

    def solve(self, b, x0=None):
        """
        Solve A x = b starting from x0. The best iterate is returned
        even when the tolerance is not reached.
        """
        iterations = 0

        def count(xk):
            nonlocal iterations
            iterations += 1

        x, info = cg(self.A, b, x0=x0, rtol=self.rtol, atol=0.0,
                     maxiter=self.maxiter, M=self.M, callback=count)

        if info < 0:
            raise ConsistencyError(f"{self.stats.name}: illegal input or breakdown (info = {info})")
        converged = info == 0
        if not converged and self.stats.non_converged == 0:
            logger.warning(f"{self.stats.name}: no convergence after {iterations} iterations, "
                           "keeping the last iterate")
        self.stats.record(iterations, converged)
        return x
