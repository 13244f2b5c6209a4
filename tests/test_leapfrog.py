"""Tests for the leapfrog integrator and the preconditioned CG solver."""

import numpy as np
import pytest
import scipy.sparse as sp

from Seismos.linalg import PCGSolver, SolverStats, sgs_preconditioner
from Seismos.model.leapfrog import LeapfrogIntegrator
from Seismos.errors import ConsistencyError


def laplacian(n):
    return sp.diags([-np.ones(n-1), 2.0 * np.ones(n), -np.ones(n-1)], [-1, 0, 1], format="csr")


class TestLeapfrog:
    """Time levels of the three-level scheme."""

    def test_zero_source_stays_at_rest(self, rng):
        n = 12
        b = rng.standard_normal(n)
        lf = LeapfrogIntegrator(sp.identity(n, format="csr"), laplacian(n), b, dt=0.1)
        for _ in range(5):
            lf.step(0.0)
        assert not np.any(lf.U0)
        assert lf.norm() == 0.0

    def test_first_two_steps(self):
        n, dt = 4, 0.01
        lf = LeapfrogIntegrator(sp.identity(n, format="csr"), sp.csr_matrix((n, n)),
                                np.ones(n), dt=dt)

        lf.step(1.0)
        assert np.allclose(lf.U0, dt**2, rtol=1e-12)
        assert np.allclose(lf.U2, 0.0)

        # Free flight: U0 = 2 U1 - U2
        lf.step(0.0)
        assert np.allclose(lf.U0, 2 * dt**2, rtol=1e-12)
        assert np.allclose(lf.U2, dt**2, rtol=1e-12)

    def test_energy_bounded(self, rng):
        # Stable time step for eigenvalues of S up to 4
        n, dt = 20, 0.5
        lf = LeapfrogIntegrator(sp.identity(n, format="csr"), laplacian(n),
                                rng.standard_normal(n), dt=dt)
        lf.step(1.0)
        first = lf.norm()
        for _ in range(500):
            lf.step(0.0)
        assert np.isfinite(lf.norm())
        assert lf.norm() < 1e3 * first

    def test_size_mismatch(self):
        with pytest.raises(ConsistencyError):
            LeapfrogIntegrator(sp.identity(3, format="csr"), sp.identity(4, format="csr"),
                               np.ones(3), dt=0.1)
        with pytest.raises(ConsistencyError):
            LeapfrogIntegrator(sp.identity(3, format="csr"), sp.identity(3, format="csr"),
                               np.ones(2), dt=0.1)

    def test_read_only_operators(self):
        n = 5
        M = sp.identity(n, format="csr")
        M.data.flags.writeable = False
        b = np.ones(n)
        b.flags.writeable = False
        lf = LeapfrogIntegrator(M, laplacian(n), b, dt=0.1)
        lf.step(1.0)
        assert np.all(np.isfinite(lf.U0))


class TestPCG:
    """Solver and convergence bookkeeping."""

    def test_solves_spd_system(self, rng):
        A = laplacian(50) + 0.1 * sp.identity(50)
        x = rng.standard_normal(50)
        solver = PCGSolver(A)
        assert np.allclose(solver.solve(A @ x), x, rtol=1e-8, atol=1e-10)
        assert solver.stats.solves == 1
        assert solver.stats.non_converged == 0
        assert solver.stats.max_iterations > 0

    def test_initial_guess_is_solution(self, rng):
        A = laplacian(10) + sp.identity(10)
        x = rng.standard_normal(10)
        solver = PCGSolver(A)
        assert np.allclose(solver.solve(A @ x, x0=x.copy()), x)
        assert solver.stats.max_iterations == 0

    def test_non_convergence_is_counted(self, rng):
        A = laplacian(100)
        solver = PCGSolver(A, maxiter=1)
        x = solver.solve(rng.standard_normal(100))
        solver.solve(rng.standard_normal(100))
        assert np.all(np.isfinite(x))
        assert solver.stats.solves == 2
        assert solver.stats.non_converged == 2
        assert solver.stats.max_iterations == 1

    def test_preconditioner_of_diagonal(self):
        P = sgs_preconditioner(sp.diags([2.0, 4.0, 8.0]))
        assert np.allclose(P.matvec(np.ones(3)), [0.5, 0.25, 0.125])

    def test_preconditioner_requires_positive_diagonal(self):
        with pytest.raises(ConsistencyError):
            sgs_preconditioner(sp.diags([1.0, 0.0, 1.0]))

    def test_non_square(self):
        with pytest.raises(ConsistencyError):
            PCGSolver(sp.csr_matrix(np.ones((2, 3))))

    def test_stats(self):
        stats = SolverStats("test")
        assert stats.max_iterations == 0
        assert stats.mean_iterations == 0.0
        stats.record(3, True)
        stats.record(5, False)
        assert stats.max_iterations == 5
        assert stats.mean_iterations == 4.0
        assert stats.non_converged == 1
