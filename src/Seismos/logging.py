"""
Seismos: Multiscale Acoustic Wave Models

File: logging.py
Description: Central logging utilities with optional MPI support.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import logging as py_logging

try:
    from mpi4py import MPI
    rank = MPI.COMM_WORLD.Get_rank()
except Exception:
    rank = 0

# Level of every Seismos logger, changed with set_level
level = py_logging.DEBUG

class MPIRankFilter(py_logging.Filter):
    """Filter INFO and DEBUG messages to only emit from rank 0."""
    def __init__(self, rank):
        super().__init__()
        self.rank = rank

    def filter(self, record: py_logging.LogRecord) -> bool:
        if record.levelno <= py_logging.INFO and self.rank != 0:
            return False
        return True

def get_logger(name: str = None) -> py_logging.Logger:
    """Return a configured logger with MPI rank filtering."""
    logger = py_logging.getLogger(name)
    if not logger.handlers:
        handler = py_logging.StreamHandler()
        fmt = '%(asctime)s - %(levelname)s - %(message)s'
        if rank != 0:
            fmt = f'%(asctime)s - [rank {rank}] %(levelname)s - %(message)s'
        handler.setFormatter(py_logging.Formatter(fmt))
        handler.addFilter(MPIRankFilter(rank))
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    return logger

def set_level(new_level):
    """
    Set the level of every Seismos logger, including the ones created later.
    Used by the command line interface for --quiet.
    """
    global level
    level = new_level
    for name, logger in py_logging.root.manager.loggerDict.items():
        if name.startswith('Seismos') and isinstance(logger, py_logging.Logger):
            logger.setLevel(level)
