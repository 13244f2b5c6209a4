"""
Seismos: Multiscale Acoustic Wave Models

File: restriction.py
Description: Assembly of the global restriction operator R from the local
             basis blocks and Galerkin reduction of fine operators.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np
import scipy.sparse as sp

from Seismos.errors import ConsistencyError


class RestrictionBuilder:
    """
    Collects dense blocks of R and assembles one CSR matrix.

    Each block covers the coarse rows [row_start, row_start + height) and
    the fine columns `col_indices`. Rows of R are coarse DOFs, columns are
    fine DOFs; R^T is the prolongation.
    """
    def __init__(self, n_cols):
        self.n_cols = int(n_cols)
        self.rows = []
        self.cols = []
        self.vals = []
        self.n_rows = 0

    def add(self, row_start, col_indices, block):
        """
        row_start: first coarse row of the block
        col_indices: global fine DOF of every block column
        block: dense array (height, len(col_indices))
        """
        col_indices = np.asarray(col_indices, dtype=np.int64)
        block = np.asarray(block, dtype=np.float64)
        if block.ndim != 2 or block.shape[1] != col_indices.shape[0]:
            raise ConsistencyError(f"Block of shape {block.shape} does not match "
                                   f"{col_indices.shape[0]} column indices")
        if row_start < 0:
            raise ConsistencyError(f"Negative row offset {row_start}")
        if col_indices.size and (col_indices.min() < 0 or col_indices.max() >= self.n_cols):
            raise ConsistencyError(f"Column indices outside [0, {self.n_cols})")

        height = block.shape[0]
        r = row_start + np.arange(height, dtype=np.int64)
        self.rows.append(np.repeat(r, col_indices.shape[0]))
        self.cols.append(np.tile(col_indices, height))
        self.vals.append(block.ravel())
        self.n_rows = max(self.n_rows, row_start + height)

    def build(self, n_rows=None):
        """Assemble R with n_rows rows (defaults to the last row added)."""
        n_rows = self.n_rows if n_rows is None else int(n_rows)
        if n_rows < self.n_rows:
            raise ConsistencyError(f"R needs at least {self.n_rows} rows, got {n_rows}")
        if not self.rows:
            return sp.csr_matrix((n_rows, self.n_cols))

        R = sp.coo_matrix((np.concatenate(self.vals),
                           (np.concatenate(self.rows), np.concatenate(self.cols))),
                          shape=(n_rows, self.n_cols)).tocsr()
        R.sum_duplicates()
        return R


def galerkin_reduce(R, A):
    """Coarse operator R A R^T."""
    if R.shape[1] != A.shape[0] or A.shape[0] != A.shape[1]:
        raise ConsistencyError(f"Cannot reduce operator {A.shape} with R {R.shape}")
    return sp.csr_matrix(R @ A @ R.T)


def restrict(R, b):
    """Coarse vector R b."""
    if R.shape[1] != b.shape[0]:
        raise ConsistencyError(f"Cannot restrict vector {b.shape} with R {R.shape}")
    return R @ b
