"""
Seismos: Multiscale Acoustic Wave Models

File: format.py
Description: Utility functions for pretty formatting of numbers and strings.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari. All rights reserved.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

def s2str(seconds):
    """
    Format a simulation time in seconds into s, ms or us.

    Parameters:
        seconds (float): The time in seconds.

    Returns:
        str: A formatted string with the time in the most appropriate unit.
    """
    if seconds == 0.0 or abs(seconds) >= 1.0:
        value = seconds
        unit = "s"
    elif abs(seconds) >= 1e-3:
        value = seconds * 1e3
        unit = "ms"
    else:
        value = seconds * 1e6
        unit = "us"

    return f"{value:.2f} {unit}"


def shape2str(shape):
    """
    Format a grid or matrix shape as "nx x ny [x nz]".
    """
    return " x ".join(f"{n:g}" if isinstance(n, float) else str(int(n)) for n in shape)
