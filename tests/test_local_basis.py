"""Tests for the local multiscale basis builder."""

import numpy as np
import pytest

from Seismos.grid.cartesian import CartesianGrid
from Seismos.fem.spaces import CGSpace, DGSpace
from Seismos.fem.forms import dg_mass
from Seismos.media.properties import build_media
from Seismos.partition import CoarsePartition
from Seismos.model.gmsfem.local_basis import (LocalBasisBuilder, available_modes,
                                              check_full_rank, check_local_map)
from Seismos.errors import ConfigurationError, ConsistencyError


@pytest.fixture
def partition():
    return CoarsePartition((8, 8), (2, 2), (125.0, 125.0))


@pytest.fixture
def homogeneous():
    return build_media(2500.0, 3500.0, 64)


@pytest.fixture
def heterogeneous(rng):
    return build_media(rng.uniform(1000.0, 3000.0, 64), rng.uniform(1500.0, 4500.0, 64), 64)


def local_mass(block, media, cells, order=1):
    grid = CartesianGrid(block.n_cells, block.extent, block.origin)
    return dg_mass(DGSpace(grid, order), media.one_over_K[cells]).toarray()


class TestAvailableModes:
    """Number of boundary and interior modes of a block."""

    def test_cg(self):
        assert available_modes((4, 4), 1, "cg") == (16, 9)
        assert available_modes((4, 4), 2, "cg") == (32, 49)
        assert available_modes((2, 2, 2), 1, "cg") == (26, 1)
        assert available_modes((1, 1), 1, "cg") == (4, 0)

    def test_dg(self):
        assert available_modes((4, 4), 1, "dg") == (28, 36)

    def test_invalid(self):
        with pytest.raises(ConfigurationError):
            available_modes((4, 4), 1, "fem")
        with pytest.raises(ConsistencyError):
            available_modes((0, 4), 1, "cg")


class TestContinuousBasis:
    """Harmonic extension and Dirichlet eigenmode basis."""

    def test_shape_and_rank(self, partition, homogeneous):
        builder = LocalBasisBuilder(homogeneous, 1, 4, 2)
        block = partition[0]
        R_block = builder.build(block, partition.block_cells(block))
        assert R_block.shape == (16 * 4, 6)
        assert np.linalg.matrix_rank(R_block) == 6

    def test_constant_is_lowest_boundary_mode(self, partition, heterogeneous):
        builder = LocalBasisBuilder(heterogeneous, 1, 3, 0)
        block = partition[3]
        R_block = builder.build(block, partition.block_cells(block))
        assert np.allclose(R_block[:, 0], R_block[0, 0], rtol=1e-8)

    def test_interior_modes_vanish_on_block_boundary(self, partition, heterogeneous):
        builder = LocalBasisBuilder(heterogeneous, 1, 2, 3)
        block = partition[1]
        R_block = builder.build(block, partition.block_cells(block))

        grid = CartesianGrid(block.n_cells, block.extent, block.origin)
        cg = CGSpace(grid, 1)
        on_boundary = cg.boundary_mask()[cg.connectivity.ravel()]
        assert np.all(R_block[on_boundary, 2:] == 0.0)
        assert np.any(R_block[~on_boundary, 2:] != 0.0)

    def test_interior_modes_mass_orthonormal(self, partition, heterogeneous):
        builder = LocalBasisBuilder(heterogeneous, 1, 0, 4)
        block = partition[2]
        cells = partition.block_cells(block)
        R_block = builder.build(block, cells)
        M = local_mass(block, heterogeneous, cells)
        assert np.allclose(R_block.T @ M @ R_block, np.eye(4), atol=1e-8)

    def test_higher_order(self, partition, homogeneous):
        builder = LocalBasisBuilder(homogeneous, 2, 6, 6)
        block = partition[0]
        R_block = builder.build(block, partition.block_cells(block))
        assert R_block.shape == (16 * 9, 12)

    def test_too_many_modes(self, partition, homogeneous):
        builder = LocalBasisBuilder(homogeneous, 1, 17, 0)
        block = partition[0]
        with pytest.raises(ConfigurationError):
            builder.build(block, partition.block_cells(block))

    def test_cell_count_mismatch(self, partition, homogeneous):
        builder = LocalBasisBuilder(homogeneous, 1, 4, 2)
        with pytest.raises(ConsistencyError):
            builder.build(partition[0], np.arange(3))


class TestDiscontinuousBasis:
    """Local SIPG eigenmode basis."""

    def test_mass_orthonormal(self, partition, heterogeneous):
        builder = LocalBasisBuilder(heterogeneous, 1, 4, 4, variant="dg")
        block = partition[0]
        cells = partition.block_cells(block)
        R_block = builder.build(block, cells)
        M = local_mass(block, heterogeneous, cells)

        assert R_block.shape == (64, 8)
        assert np.allclose(R_block.T @ M @ R_block, np.eye(8), atol=1e-8)

    def test_unknown_variant(self, homogeneous):
        with pytest.raises(ConfigurationError):
            LocalBasisBuilder(homogeneous, 1, 4, 4, variant="fem")


class TestChecks:
    """Consistency checks applied to every local basis."""

    def test_rank_deficient(self):
        R_block = np.ones((10, 2))
        with pytest.raises(ConsistencyError):
            check_full_rank(R_block, 0)

    def test_full_rank(self, rng):
        check_full_rank(rng.standard_normal((10, 3)), 0)

    def test_map_length(self):
        with pytest.raises(ConsistencyError):
            check_local_map(np.arange(5), np.zeros((6, 2)), 0)

    def test_unresolved_map(self):
        with pytest.raises(ConsistencyError):
            check_local_map(np.array([0, 1, -1]), np.zeros((3, 2)), 0)
