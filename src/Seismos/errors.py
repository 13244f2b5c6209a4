"""
Seismos: Multiscale Acoustic Wave Models

File: errors.py
Description: Exception hierarchy used to classify fatal failures of a run.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

class SeismosError(Exception):
    """Base class for all errors raised by Seismos."""


class ConfigurationError(SeismosError, ValueError):
    """
    Invalid user input: bad domain sizes, unknown methods or components,
    impossible coarse partitions. Always raised before any assembly.
    """


class ConsistencyError(SeismosError, RuntimeError):
    """
    Internal bookkeeping is broken: unresolved DOF map entries, dimension
    mismatches, duplicate or missing records during reconciliation.
    These point to a planner or reconciler bug and are never recovered.
    """


class OutputError(SeismosError, OSError):
    """An output stream (snapshot, matrix dump) cannot be written."""


def verify(condition, message, error=ConsistencyError):
    """
    Raise `error(message)` if `condition` is false.
    """
    if not condition:
        raise error(message)
