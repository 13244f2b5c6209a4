"""
Seismos: Multiscale Acoustic Wave Models

File: matrices.py
Description: Matrix Market dumps of the local bases and the fine and coarse
             operators for offline inspection.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import os

import numpy as np
import scipy.io
import scipy.sparse as sp

from Seismos.errors import OutputError
from Seismos.logging import get_logger

logger = get_logger(__name__)


class MatrixWriter:
    """
    Writes OUTDIR/matrices/<name>.mtx. Disabled writers do nothing.
    """
    def __init__(self, output_dir, enabled=False):
        self.directory = os.path.join(output_dir, "matrices")
        self.enabled = enabled
        self.written = []

    def write(self, name, A):
        if not self.enabled:
            return
        path = os.path.join(self.directory, f"{name}.mtx")
        if not sp.issparse(A):
            A = sp.coo_matrix(np.atleast_2d(A))
        try:
            os.makedirs(self.directory, exist_ok=True)
            scipy.io.mmwrite(path, A)
        except OSError as e:
            raise OutputError(f"Cannot write matrix {path}: {e}") from e
        self.written.append(path)

    def summary(self):
        if self.written:
            logger.info(f"Wrote {len(self.written)} matrices to {self.directory}")
