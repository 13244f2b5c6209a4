"""
Seismos: Multiscale Acoustic Wave Models

File: collectives.py
Description: Collective operations shared by the distributed setup phases:
             offsets from all-gathered counts, summation of partial operators
             and a typed all-gather of variable-length integer records.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import hashlib

import numpy as np

from Seismos.errors import ConsistencyError


def exclusive_offset(comm, count):
    """
    Offset of this worker (sum of the counts of lower ranks) and the global
    total. With comm None the offset is 0 and the total is `count`.
    """
    if comm is None:
        return 0, int(count)
    counts = comm.allgather(int(count))
    rank = comm.Get_rank()
    return int(sum(counts[:rank])), int(sum(counts))


def allreduce_sum(comm, obj):
    """Sum of `obj` (array or sparse matrix) over all workers."""
    if comm is None:
        return obj
    return comm.allreduce(obj)


def pack_records(records):
    """
    Pack (key, values) records into one int64 buffer:
        [n, key_0, len_0, values_0..., key_1, len_1, values_1..., ...]
    """
    parts = [np.array([len(records)], dtype=np.int64)]
    for key, values in records:
        values = np.asarray(values, dtype=np.int64).ravel()
        parts.append(np.array([key, values.shape[0]], dtype=np.int64))
        parts.append(values)
    return np.concatenate(parts)


def unpack_records(buf):
    """Inverse of pack_records. Accepts several packed buffers back to back."""
    buf = np.asarray(buf, dtype=np.int64)
    records = []
    pos = 0
    while pos < buf.shape[0]:
        n = int(buf[pos])
        pos += 1
        for _ in range(n):
            if pos + 2 > buf.shape[0]:
                raise ConsistencyError("Truncated record buffer")
            key, length = int(buf[pos]), int(buf[pos+1])
            pos += 2
            if length < 0 or pos + length > buf.shape[0]:
                raise ConsistencyError(f"Corrupt record for key {key} (length {length})")
            records.append((key, buf[pos:pos+length].copy()))
            pos += length
    return records


def allgather_records(comm, records):
    """
    All-gather variable-length integer records (key, values).

    Every worker packs its records into a length-prefixed int64 buffer,
    root 0 gathers and concatenates the buffers in rank order and
    broadcasts the result. Every worker returns the same list.
    """
    buf = pack_records(records)
    if comm is None:
        return unpack_records(buf)

    gathered = comm.gather(buf, root=0)
    if comm.Get_rank() == 0:
        merged = np.concatenate(gathered)
    else:
        merged = None
    merged = comm.bcast(merged, root=0)
    return unpack_records(merged)


def digest(array):
    """Content hash of an integer array, used to compare tables across workers."""
    a = np.ascontiguousarray(array, dtype=np.int64)
    h = hashlib.sha256(a.tobytes())
    h.update(str(a.shape).encode())
    return h.hexdigest()
