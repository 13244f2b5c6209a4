"""
Seismos: Multiscale Acoustic Wave Models

File: base_grid.py
Description: Base grid class for Seismos, which handles the mesh data structure.
             This class is meant to be inherited by specific grid implementations and
             serves to implement the required methods for the grid class.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

class BaseGrid:
    def __init__(self, *args, **kwargs):
        raise NotImplementedError()

    @property
    def n_cells(self):
        raise NotImplementedError()

    def locate(self, point):
        raise NotImplementedError()

    def info(self):
        pass
