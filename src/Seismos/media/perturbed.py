"""
Seismos: Multiscale Acoustic Wave Models

File: perturbed.py
Description: Homogeneous background with a seeded random per-cell perturbation.
             Produces strongly heterogeneous media for testing multiscale bases.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

from Seismos.media.base_media import BaseMedia
from Seismos.media.properties import build_media
from Seismos.rng import set_seed, uniform_perturbation


class PerturbedMedia(BaseMedia):
    """
    rho = rho0 * (1 + e_rho), vp = vp0 * (1 + e_vp)
    with e_* drawn uniformly from [-perturbation, perturbation].
    """
    def __init__(self, ctx):
        s, p, o = ctx
        m = p.media
        n = s.grid.n_cells

        set_seed(m.seed)
        e_rho = uniform_perturbation(n, m.perturbation)
        e_vp = uniform_perturbation(n, m.perturbation)

        self.properties = build_media(m.rho * (1.0 + e_rho), m.vp * (1.0 + e_vp), n)
        self.properties.info()
        s.media = self.properties
