"""
Seismos: Multiscale Acoustic Wave Models

File: homogeneous.py
Description: Uniform medium, the fallback when no per-cell material is given.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

from Seismos.media.base_media import BaseMedia
from Seismos.media.properties import build_media


class HomogeneousMedia(BaseMedia):
    """
    Constant density and wave speed taken from [parameters.media].
    """
    def __init__(self, ctx):
        # The media is always initialized after the grid
        s, p, o = ctx

        self.properties = build_media(p.media.rho, p.media.vp, s.grid.n_cells)
        self.properties.info()
        s.media = self.properties
