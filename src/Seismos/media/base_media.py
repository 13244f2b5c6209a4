"""
Seismos: Multiscale Acoustic Wave Models

File: base_media.py
Description: Base media class for Seismos, which provides the per-cell material
             properties of the fine grid. This class is meant to be inherited by
             specific media implementations.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

class BaseMedia:
    def __init__(self, ctx):
        raise NotImplementedError()

    def finalize(self, ctx):
        pass
