"""Distributed runs compared to the serial run of the same configuration."""

import os

import numpy as np
import pytest

from conftest import small_config
from Seismos.main import Seismos, merge
from Seismos.output.matrices import MatrixWriter

N_STEPS = 10


def short_config(output_dir, **overrides):
    # 10 steps, DOF map checked against the serial numbering
    config = small_config(output_dir,
                          parameters={"T": N_STEPS * 1e-4},
                          options={"verify_dof_map": True})
    return merge(config, overrides)


def run(config, comm=None):
    sim = Seismos({"config": config}, comm=comm)
    m = sim.model
    setup = (m.R.copy(), m.M_coarse.copy(), m.S_coarse.copy(), np.array(m.b_coarse))
    sim.solve()
    return setup, m.integrator.U0.copy()


def assert_same_matrix(A, B):
    scale = abs(B).max()
    assert A.shape == B.shape
    assert np.allclose(A.toarray(), B.toarray(), rtol=1e-10, atol=1e-12 * scale)


@pytest.mark.parametrize("size", [3, 4])
def test_matches_serial(tmp_path, parallel, size):
    (R, M, S, b), U = run(short_config(tmp_path / "serial"))

    config = short_config(tmp_path / "parallel")
    results = parallel(size, lambda comm: run(config, comm))

    for (R_p, M_p, S_p, b_p), U_p in results:
        assert_same_matrix(R_p, R)
        assert_same_matrix(M_p, M)
        assert_same_matrix(S_p, S)
        assert np.allclose(b_p, b, rtol=1e-10, atol=1e-12 * np.abs(b).max())
        assert np.allclose(U_p, U, rtol=1e-7, atol=1e-9 * np.abs(U).max())


def test_only_root_writes_snapshots(tmp_path, parallel):
    config = short_config(tmp_path)
    parallel(2, lambda comm: Seismos({"config": config}, comm=comm).solve())

    files = sorted(p.name for p in (tmp_path / "snapshots").iterdir())
    assert files == ["GMsFEM.toml", "GMsFEM_000000.npz"]


def test_fine_model_matches_serial(tmp_path, parallel):
    def fine(output_dir, comm=None):
        config = small_config(output_dir,
                              parameters={"T": N_STEPS * 1e-4},
                              options={"model": "fine_dg.FineAcousticDG"})
        return Seismos({"config": config}, comm=comm).solve().integrator.U0.copy()

    U = fine(tmp_path / "serial")
    for U_p in parallel(2, lambda comm: fine(tmp_path / "parallel", comm)):
        assert np.allclose(U_p, U, rtol=1e-7, atol=1e-9 * np.abs(U).max())


def test_uneven_partition_matches_serial(tmp_path, parallel):
    # 9x7 cells in 2x3 blocks: blocks of 5/4 by 3/2/2 cells, 6 blocks on 5 workers
    def uneven(output_dir):
        return small_config(output_dir,
                            parameters={"T": N_STEPS * 1e-4,
                                        "grid": {"nx": 9, "ny": 7},
                                        "method": {"gms_Nx": 2, "gms_Ny": 3}},
                            options={"verify_dof_map": True})

    (R, M, S, b), U = run(uneven(tmp_path / "serial"))
    assert R.shape == (36, 63 * 4)

    config = uneven(tmp_path / "parallel")
    for (R_p, M_p, S_p, b_p), U_p in parallel(5, lambda comm: run(config, comm)):
        assert_same_matrix(R_p, R)
        assert_same_matrix(M_p, M)
        assert_same_matrix(S_p, S)
        assert np.allclose(b_p, b, rtol=1e-10, atol=1e-12 * np.abs(b).max())
        assert np.allclose(U_p, U, rtol=1e-7, atol=1e-9 * np.abs(U).max())


@pytest.mark.parametrize("model_name", ["fine_dg.FineAcousticDG", "gmsfem.MultiscaleAcoustic"])
def test_matrices_written_once(tmp_path, parallel, model_name):
    config = short_config(tmp_path, options={"model": model_name})

    def dump(comm):
        sim = Seismos({"config": config}, comm=comm)
        # One directory per worker to see who writes what
        writer = MatrixWriter(str(tmp_path / f"rank{comm.Get_rank()}"), enabled=True)
        sim.model.write_matrices(writer)
        return sorted(os.path.basename(p) for p in writer.written)

    written = parallel(2, dump)
    assert "m_fine_mat.mtx" in written[0]
    assert "s_fine_mat.mtx" in written[0]
    # Other workers only write the local bases of the blocks they own
    assert all(name.endswith("_local_mat.mtx") for name in written[1])
    if model_name == "fine_dg.FineAcousticDG":
        assert written[1] == []
    else:
        assert written[1] == ["r2_local_mat.mtx", "r3_local_mat.mtx"]
