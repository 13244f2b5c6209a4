"""Full simulations on the small configuration."""

import os

import numpy as np
import toml

from conftest import small_config
from Seismos.main import Seismos
from Seismos.output.snapshots import load_snapshot


def snapshot_dir(config):
    return os.path.join(config["options"]["output_dir"], "snapshots")


class TestMultiscaleSimulation:
    """100 steps of the GMsFEM model."""

    def test_run(self, simulation, config):
        norms = []
        simulation.add_recorder(lambda step, t, field: norms.append((step, np.linalg.norm(field))))
        model = simulation.solve()

        assert simulation.ctx.state.step == 100
        assert np.isclose(simulation.ctx.state.time, 0.01)
        assert np.all(np.isfinite(model.integrator.U0))
        assert model.integrator.stats.solves == 100
        assert model.integrator.stats.non_converged == 0
        # The coarse mass matrix is well conditioned
        assert model.integrator.stats.max_iterations <= 50

        # Recorders every step_seis steps with the prolongated field
        assert [s for s, _ in norms] == list(range(10, 101, 10))
        assert all(n > 0.0 for _, n in norms)

    def test_snapshots(self, simulation, config):
        simulation.solve()
        directory = snapshot_dir(config)

        index = toml.load(os.path.join(directory, "GMsFEM.toml"))
        assert index["name"] == "GMsFEM_"
        assert [s["cycle"] for s in index["snapshots"]] == [0, 25, 50, 75, 100]

        first = load_snapshot(os.path.join(directory, "GMsFEM_000000.npz"))
        assert set(first) == {"cycle", "time", "fine_pressure", "coarse_pressure", "coarse_coefficients"}
        assert first["coarse_pressure"].shape == (256,)
        assert first["coarse_coefficients"].shape == (24,)
        assert not np.any(first["coarse_pressure"])

        mid = load_snapshot(os.path.join(directory, "GMsFEM_000050.npz"))
        assert np.linalg.norm(mid["coarse_pressure"]) > 0.0
        # No reference solution requested
        assert not np.any(mid["fine_pressure"])
        assert np.allclose(mid["coarse_pressure"], simulation.model.P @ mid["coarse_coefficients"])

    def test_extra_string(self, tmp_path):
        config = small_config(tmp_path, options={"extra_string": "run1"})
        Seismos({"config": config}).solve()
        assert os.path.exists(os.path.join(snapshot_dir(config), "GMsFEM_run1_000100.npz"))

    def test_snapshots_disabled(self, tmp_path):
        config = small_config(tmp_path / "out", options={"write_snapshots": False})
        Seismos({"config": config}).solve()
        assert not os.path.exists(snapshot_dir(config))

    def test_print_matrices(self, tmp_path):
        config = small_config(tmp_path)
        Seismos({"config": config, "print_matrices": True}).solve()

        names = {f[:-len(".mtx")] for f in os.listdir(tmp_path / "matrices")}
        assert names == {"r0_local_mat", "r1_local_mat", "r2_local_mat", "r3_local_mat",
                         "r_global_mat", "r_global_mat_t", "m_fine_mat", "s_fine_mat",
                         "m_coarse_mat", "s_coarse_mat"}

    def test_reference_fine(self, tmp_path):
        config = small_config(tmp_path)
        sim = Seismos({"config": config, "reference_fine": True})
        model = sim.solve()

        assert model.reference is not None
        assert model.norms()["u"] > 0.0
        assert len(model.solver_stats()) == 2

        last = load_snapshot(os.path.join(snapshot_dir(config), "GMsFEM_000100.npz"))
        assert np.allclose(last["fine_pressure"], model.reference.U0)

    def test_layered_media(self, tmp_path):
        layers = [{"top": 0.0, "rho": 2000.0, "vp": 3000.0},
                  {"top": 500.0, "rho": 2600.0, "vp": 4500.0}]
        config = small_config(tmp_path,
                              parameters={"media": {"layers": layers}},
                              options={"media": "layered.LayeredMedia"})
        model = Seismos({"config": config}).solve()
        assert np.all(np.isfinite(model.integrator.U0))


class TestMultiscaleSimulation3D:
    """4x4x4 fine cells split into 2x2x2 coarse blocks."""

    def test_run(self, tmp_path):
        config = small_config(tmp_path, parameters={
            "dimension": 3,
            "T": 2e-3,
            "grid": {"sz": 1000.0, "nz": 4},
            "source": {"z": 500.0},
            "method": {"gms_Nz": 2, "n_boundary_basis": 4, "n_interior_basis": 1},
        })
        model = Seismos({"config": config}).solve()

        # 8 blocks with 4 + 1 modes, 64 cells with 8 DOFs
        assert model.R.shape == (40, 512)
        M = model.M_coarse.toarray()
        assert np.allclose(M, M.T, rtol=1e-10, atol=1e-12 * np.abs(M).max())
        assert np.linalg.eigvalsh(M).min() > 0.0

        U = model.integrator.U0
        assert np.all(np.isfinite(U))
        assert np.linalg.norm(U) > 0.0
        assert model.integrator.stats.non_converged == 0


class TestFineSimulation:
    """The full fine DG model as the simulated model."""

    def test_run(self, tmp_path):
        config = small_config(tmp_path, options={"model": "fine_dg.FineAcousticDG"})
        model = Seismos({"config": config}).solve()

        assert model.integrator.U0.shape == (256,)
        assert model.norms()["u"] > 0.0

        last = load_snapshot(os.path.join(snapshot_dir(config), "DG_000100.npz"))
        assert set(last) == {"cycle", "time", "fine_pressure"}
        assert np.allclose(last["fine_pressure"], model.integrator.U0)

    def test_matches_reference_of_multiscale_model(self, tmp_path):
        fine = Seismos({"config": small_config(tmp_path / "a",
                                               options={"model": "fine_dg.FineAcousticDG"})}).solve()
        ms = Seismos({"config": small_config(tmp_path / "b"), "reference_fine": True}).solve()
        assert np.allclose(fine.integrator.U0, ms.reference.U0, rtol=1e-8,
                           atol=1e-8 * np.abs(fine.integrator.U0).max())
