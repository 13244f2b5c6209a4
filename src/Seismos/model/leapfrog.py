"""
Seismos: Multiscale Acoustic Wave Models

File: leapfrog.py
Description: Explicit second order leapfrog integrator for M u'' + S u = s(t) b.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import numpy as np

from Seismos.linalg import PCGSolver
from Seismos.errors import ConsistencyError


class LeapfrogIntegrator:
    """
    Three time levels U0 (new), U1 (current), U2 (previous), all zero at start.

    One step:
        y   = 2 U1 - U2
        rhs = M y - dt^2 (S U1 - s b)
        M U0 = rhs
        U2 <- U1, U1 <- U0
    """
    def __init__(self, M, S, b, dt, name="mass"):
        n = M.shape[0]
        if M.shape != (n, n) or S.shape != (n, n) or b.shape != (n,):
            raise ConsistencyError(f"Inconsistent system sizes: M {M.shape}, "
                                   f"S {S.shape}, b {b.shape}")
        self.M = M
        self.S = S
        self.b = b
        self.dt = float(dt)
        self.solver = PCGSolver(M, name=name)

        self.U0 = np.zeros(n)
        self.U1 = np.zeros(n)
        self.U2 = np.zeros(n)

    @property
    def stats(self):
        return self.solver.stats

    def step(self, source_value):
        y = 2.0 * self.U1 - self.U2
        rhs = self.M @ y - self.dt**2 * (self.S @ self.U1 - source_value * self.b)
        self.U0 = self.solver.solve(rhs, x0=y)

        # Rotate time levels
        self.U2 = self.U1
        self.U1 = self.U0
        return self.U0

    def norm(self):
        return float(np.linalg.norm(self.U0))
