"""
Seismos: Multiscale Acoustic Wave Models

File: partition.py
Description: Coarse partition planner. Divides the fine structured grid into
             coarse blocks and distributes the blocks over worker processes.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from Seismos.errors import ConfigurationError, ConsistencyError


def split_counts(n_items, n_parts):
    """
    Split n_items into n_parts counts: every part gets n_items // n_parts,
    the first n_items % n_parts parts get one extra item.
    Parts may be empty when n_parts > n_items.
    """
    if n_parts <= 0:
        raise ConfigurationError(f"Number of parts ({n_parts}) must be > 0")
    counts = np.full(n_parts, n_items // n_parts, dtype=np.int64)
    counts[:n_items % n_parts] += 1
    return counts


def fine_cells_per_coarse(n_fine, n_coarse):
    """
    Number of fine cells in each coarse block along one axis.

    The counts sum exactly to n_fine and the extra cells of a non-divisible
    grid go to the lowest block indices.
    """
    if n_coarse <= 0 or n_coarse > n_fine:
        raise ConfigurationError(f"Number of coarse blocks ({n_coarse}) must be in "
                                 f"[1, {n_fine}] (number of fine cells)")
    return split_counts(n_fine, n_coarse)


def split_range(n_items, n_parts, part):
    """
    Contiguous [start, stop) range of items owned by `part`.
    Lower parts receive the extra items first.
    """
    counts = split_counts(n_items, n_parts)
    if part < 0 or part >= n_parts:
        raise ConsistencyError(f"Part {part} out of range [0, {n_parts})")
    start = int(counts[:part].sum())
    return start, start + int(counts[part])


@dataclass(frozen=True)
class CoarseBlock:
    index: int                          # row-major (x fastest) block number
    multi_index: Tuple[int, ...]        # (ix, iy[, iz])
    offset: Tuple[int, ...]             # first fine cell along each axis
    n_cells: Tuple[int, ...]            # fine cells along each axis
    origin: Tuple[float, ...]           # physical lower corner
    extent: Tuple[float, ...]           # physical size

    @property
    def size(self):
        return int(np.prod(self.n_cells))


class CoarsePartition:
    """
    All coarse blocks of a structured fine grid.

    fine_counts: (Nx, Ny[, Nz]) fine cells
    coarse_counts: (Mx, My[, Mz]) coarse blocks
    spacing: (hx, hy[, hz]) fine cell sizes
    """
    def __init__(self, fine_counts, coarse_counts, spacing):
        if not (len(fine_counts) == len(coarse_counts) == len(spacing)):
            raise ConfigurationError("Fine counts, coarse counts and spacing must have the same dimension")

        self.dim = len(fine_counts)
        self.fine_counts = tuple(int(n) for n in fine_counts)
        self.coarse_counts = tuple(int(n) for n in coarse_counts)
        self.spacing = tuple(float(h) for h in spacing)

        # Per-axis cell counts and offsets
        self.cells_per_block = [fine_cells_per_coarse(nf, nc)
                                for nf, nc in zip(self.fine_counts, self.coarse_counts)]
        self.offsets = [np.concatenate(([0], np.cumsum(c)[:-1])) for c in self.cells_per_block]

        self.blocks = [self._make_block(b) for b in range(self.n_blocks)]

    @property
    def n_blocks(self):
        return int(np.prod(self.coarse_counts))

    def _make_block(self, index):
        multi = self.unravel(index)
        offset = tuple(int(self.offsets[a][i]) for a, i in enumerate(multi))
        n_cells = tuple(int(self.cells_per_block[a][i]) for a, i in enumerate(multi))
        origin = tuple(o * h for o, h in zip(offset, self.spacing))
        extent = tuple(n * h for n, h in zip(n_cells, self.spacing))
        return CoarseBlock(index, multi, offset, n_cells, origin, extent)

    def unravel(self, index):
        # x fastest
        return tuple(int(i) for i in np.unravel_index(index, self.coarse_counts[::-1])[::-1])

    def __getitem__(self, index):
        return self.blocks[index]

    def __len__(self):
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)

    def owned_blocks(self, rank=0, size=1):
        """Blocks owned by `rank` out of `size` workers (contiguous range)."""
        start, stop = split_range(self.n_blocks, size, rank)
        return self.blocks[start:stop]

    def block_cells(self, block):
        """
        Global fine cell ids of a block, in block-local order (x fastest).
        """
        ranges = [np.arange(o, o + n) for o, n in zip(block.offset, block.n_cells)]
        grids = np.meshgrid(*ranges[::-1], indexing="ij")
        cells = np.ravel_multi_index(tuple(grids), dims=self.fine_counts[::-1])
        return cells.ravel().astype(np.int64)

    def min_block_shape(self):
        return tuple(int(c.min()) for c in self.cells_per_block)
