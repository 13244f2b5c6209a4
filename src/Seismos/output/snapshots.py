"""
Seismos: Multiscale Acoustic Wave Models

File: snapshots.py
Description: Snapshot collection. Every snapshot is a compressed numpy archive
             holding the named fields of one cycle; a TOML index lists the
             cycles and times of the collection.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import os

import numpy as np
import toml

from Seismos.errors import OutputError
from Seismos.logging import get_logger

logger = get_logger(__name__)


class SnapshotWriter:
    """
    Writes OUTDIR/snapshots/<stem>_<cycle:06d>.npz and OUTDIR/snapshots/<stem>.toml,
    where the stem is the name without trailing underscores ("GMsFEM_" -> "GMsFEM").
    Disabled writers (or non-root workers) accept calls and write nothing.
    """
    def __init__(self, output_dir, name, enabled=True):
        self.directory = os.path.join(output_dir, "snapshots")
        self.name = name
        self.stem = name.rstrip("_") or name
        self.enabled = enabled
        self.entries = []

        if self.enabled:
            try:
                os.makedirs(self.directory, exist_ok=True)
            except OSError as e:
                raise OutputError(f"Cannot create snapshot directory {self.directory}: {e}") from e

    def path(self, cycle):
        return os.path.join(self.directory, f"{self.stem}_{cycle:06d}.npz")

    @property
    def index_path(self):
        return os.path.join(self.directory, f"{self.stem}.toml")

    def write(self, cycle, time, fields):
        """
        cycle: time step number
        time: physical time of the snapshot
        fields: {name: array}
        """
        if not self.enabled:
            return
        path = self.path(cycle)
        try:
            np.savez_compressed(path, cycle=np.int64(cycle), time=np.float64(time),
                                **{k: np.asarray(v) for k, v in fields.items()})
        except OSError as e:
            raise OutputError(f"Cannot write snapshot {path}: {e}") from e

        self.entries.append({'cycle': int(cycle), 'time': float(time),
                             'file': os.path.basename(path)})
        self.write_index()

    def write_index(self):
        index = {
            'name': self.name,
            'snapshots': self.entries,
        }
        try:
            with open(self.index_path, 'w') as f:
                toml.dump(index, f)
        except OSError as e:
            raise OutputError(f"Cannot write snapshot index {self.index_path}: {e}") from e


def load_snapshot(path):
    """Read back one snapshot as a dictionary of arrays."""
    with np.load(path) as data:
        return {k: data[k] for k in data.files}
