"""
Seismos: Multiscale Acoustic Wave Models

File: properties.py
Description: Immutable per-cell acoustic material properties (density, wave
             speed, bulk modulus) and the derived coefficients used by the
             fine-scale forms.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np

from Seismos.errors import ConfigurationError
from Seismos.logging import get_logger

logger = get_logger(__name__)


def _readonly(a):
    a = np.ascontiguousarray(a, dtype=np.float64)
    a.flags.writeable = False
    return a


class MediaProperties:
    """
    Snapshot of the material of every fine cell.

    rho: density (kg/m^3)
    vp: acoustic wave speed (m/s)
    K = rho*vp^2: bulk modulus

    The mass form is weighted by 1/K and the stiffness form by 1/rho.
    All arrays are read-only and shared by every local basis construction.
    """
    def __init__(self, rho, vp):
        rho = np.asarray(rho, dtype=np.float64)
        vp = np.asarray(vp, dtype=np.float64)
        if rho.shape != vp.shape or rho.ndim != 1:
            raise ConfigurationError(f"Density {rho.shape} and velocity {vp.shape} "
                                     "must be 1D arrays of equal length")
        if not np.all(np.isfinite(rho)) or np.any(rho <= 0.0):
            raise ConfigurationError("Density must be positive in every cell")
        if not np.all(np.isfinite(vp)) or np.any(vp <= 0.0):
            raise ConfigurationError("Wave speed must be positive in every cell")

        self.rho = _readonly(rho)
        self.vp = _readonly(vp)
        self.K = _readonly(rho * vp**2)
        self.one_over_rho = _readonly(1.0 / self.rho)
        self.one_over_K = _readonly(1.0 / self.K)

    @property
    def n_cells(self):
        return self.rho.shape[0]

    def extrema(self):
        """Global (min, max) of rho, vp and K."""
        return {name: (float(a.min()), float(a.max()))
                for name, a in (("rho", self.rho), ("vp", self.vp), ("K", self.K))}

    def info(self):
        logger.info(10*"-" + " Media Information " + 10*"-")
        logger.info(f"Number of cells: {self.n_cells}")
        for name, (lo, hi) in self.extrema().items():
            logger.info(f"{name:>3}: min = {lo:.4e}, max = {hi:.4e}")
        logger.info(39*"-")


def build_media(rho, vp, n_cells):
    """
    Build media properties from scalars (homogeneous) or per-cell arrays.
    Raises ConfigurationError for non-positive values or size mismatches.
    """
    rho = np.asarray(rho, dtype=np.float64)
    vp = np.asarray(vp, dtype=np.float64)
    for name, a in (("rho", rho), ("vp", vp)):
        if a.ndim > 1 or (a.ndim == 1 and a.shape[0] != n_cells):
            raise ConfigurationError(f"Per-cell {name} has shape {a.shape}, expected ({n_cells},)")
    return MediaProperties(np.broadcast_to(rho, (n_cells,)),
                           np.broadcast_to(vp, (n_cells,)))
