"""Pytest configuration, fixtures and an in-process communicator for distributed tests."""

import functools
import operator
import pickle
import threading

import numpy as np
import pytest

from Seismos.defaults import default_config
from Seismos.main import merge


class ThreadComm:
    """
    Communicator backed by threads of one process, implementing the subset
    of the mpi4py object API used by Seismos. Objects are pickled on the way
    like in a real MPI run, so workers never share mutable state.
    """

    def __init__(self, shared, rank):
        self.shared = shared
        self.rank = rank

    def Get_rank(self):
        return self.rank

    def Get_size(self):
        return self.shared["size"]

    def Barrier(self):
        self.shared["barrier"].wait()

    def _exchange(self, obj):
        slots = self.shared["slots"]
        self.Barrier()
        slots[self.rank] = pickle.dumps(obj)
        self.Barrier()
        out = [pickle.loads(s) for s in slots]
        self.Barrier()
        return out

    def allgather(self, obj):
        return self._exchange(obj)

    def gather(self, obj, root=0):
        out = self._exchange(obj)
        return out if self.rank == root else None

    def bcast(self, obj, root=0):
        return self._exchange(obj)[root]

    def allreduce(self, obj, op=None):
        return functools.reduce(operator.add, self._exchange(obj))


def run_parallel(size, fn, timeout=120.0):
    """
    Run fn(comm) on `size` threads, each with its own ThreadComm.
    Returns the list of results ordered by rank; re-raises the first error.
    """
    shared = {
        "size": size,
        "barrier": threading.Barrier(size, timeout=timeout),
        "slots": [None] * size,
    }
    results = [None] * size
    errors = [None] * size

    def worker(rank):
        try:
            results[rank] = fn(ThreadComm(shared, rank))
        except BaseException as e:  # collected and re-raised in the caller
            errors[rank] = e
            shared["barrier"].abort()

    threads = [threading.Thread(target=worker, args=(r,)) for r in range(size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Report the original failure rather than the broken barrier of the others
    for e in errors:
        if e is not None and not isinstance(e, threading.BrokenBarrierError):
            raise e
    for e in errors:
        if e is not None:
            raise e
    return results


@pytest.fixture
def parallel():
    return run_parallel


def small_config(output_dir, **overrides):
    """
    8x8 fine cells on a 1000 m square split into 2x2 coarse blocks,
    rho = 2500, vp = 3500, delta source in the center.
    """
    config = {
        "parameters": {
            "dimension": 2,
            "T": 0.01,
            "dt": 1e-4,
            "step_snap": 25,
            "step_seis": 10,
            "grid": {"sx": 1000.0, "sy": 1000.0, "nx": 8, "ny": 8},
            "source": {"x": 500.0, "y": 500.0, "frequency": 10.0,
                       "scale": 1e6, "spatial_function": "delta"},
            "media": {"rho": 2500.0, "vp": 3500.0},
            "method": {"order": 1, "gms_Nx": 2, "gms_Ny": 2,
                       "n_boundary_basis": 4, "n_interior_basis": 2},
        },
        "options": {
            "output_dir": str(output_dir),
        },
    }
    return merge(config, overrides)


@pytest.fixture
def config(tmp_path):
    return small_config(tmp_path / "output")


@pytest.fixture
def simulation(config):
    """Serial simulation set up on the small configuration."""
    from Seismos.main import Seismos

    return Seismos({"config": config})


@pytest.fixture
def model(simulation):
    return simulation.model


@pytest.fixture
def defaults():
    return default_config()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
