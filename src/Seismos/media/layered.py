"""
Seismos: Multiscale Acoustic Wave Models

File: layered.py
Description: Horizontally layered medium. Layers are stacked along the last
             axis (y in 2D, z in 3D) and measured as depth below the top of
             the domain.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np
import numba as nb

from Seismos.media.base_media import BaseMedia
from Seismos.media.properties import build_media
from Seismos.grid.cartesian import VERTICAL_AXIS


class LayeredMedia(BaseMedia):
    """
    Background rho/vp from [parameters.media] above the first layer.
    Each entry of `layers` is {top, rho, vp}; a cell belongs to the deepest
    layer whose top lies above the cell center.
    """
    def __init__(self, ctx):
        s, p, o = ctx
        grid = s.grid

        layers = sorted(p.media.layers, key=lambda l: l['top'])
        tops = np.array([l['top'] for l in layers], dtype=np.float64)
        rho_l = np.array([l['rho'] for l in layers], dtype=np.float64)
        vp_l = np.array([l['vp'] for l in layers], dtype=np.float64)

        # Depth of every cell center below the top of the domain
        axis = VERTICAL_AXIS
        depth = grid.origin[axis] + grid.sizes[axis] - grid.cell_centers()[:, axis]

        rho, vp = _assign_layers(depth, tops, rho_l, vp_l,
                                 float(p.media.rho), float(p.media.vp))

        self.properties = build_media(rho, vp, grid.n_cells)
        self.properties.info()
        s.media = self.properties


@nb.njit(cache=True)
def _assign_layers(depth, tops, rho_l, vp_l, rho_bg, vp_bg):
    """
    depth: cell center depths
    tops: sorted layer tops
    rho_l, vp_l: layer properties
    rho_bg, vp_bg: properties above the first layer
    """
    n = depth.shape[0]
    rho = np.full(n, rho_bg)
    vp = np.full(n, vp_bg)
    for c in range(n):
        for l in range(tops.shape[0]):
            if depth[c] >= tops[l]:
                rho[c] = rho_l[l]
                vp[c] = vp_l[l]
    return rho, vp
