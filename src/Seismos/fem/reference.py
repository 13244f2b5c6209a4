"""
Seismos: Multiscale Acoustic Wave Models

File: reference.py
Description: One-dimensional nodal reference element on Gauss-Lobatto-Legendre
             points and tensor-product helpers used to build 2D/3D element
             matrices on uniform Cartesian cells.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

from functools import reduce

import numpy as np
from numpy.polynomial import legendre as L
from numpy.polynomial import polynomial as P

from Seismos.errors import ConfigurationError


def gll_nodes(order):
    """Gauss-Lobatto-Legendre nodes of the given order mapped to [0, 1]."""
    if order < 1:
        raise ConfigurationError(f"Finite element order ({order}) must be >= 1")
    # Interior nodes are the roots of P_p'
    interior = L.Legendre.basis(order).deriv().roots() if order > 1 else np.array([])
    x = np.concatenate(([-1.0], np.sort(np.real(interior)), [1.0]))
    return 0.5 * (x + 1.0)


def gauss_rule(n_points):
    """Gauss-Legendre points and weights on [0, 1]."""
    x, w = L.leggauss(n_points)
    return 0.5 * (x + 1.0), 0.5 * w


def kron_axes(mats):
    """
    Tensor product of per-axis factors with axis 0 (x) varying fastest:
        kron(mats[-1], ..., mats[1], mats[0])
    Works for 1D vectors and 2D matrices alike.
    """
    return reduce(lambda acc, m: np.kron(m, acc), mats[1:], mats[0])


def tensor_points(points_per_axis):
    """
    Cartesian product of per-axis coordinates, x fastest.
    Returns an array (n_points, dim).
    """
    grids = np.meshgrid(*points_per_axis[::-1], indexing="ij")
    return np.stack([g.ravel() for g in grids[::-1]], axis=1)


class ReferenceElement:
    """
    Lagrange basis of degree `order` on the GLL nodes of [0, 1].

    All matrices are for the unit interval; scale with the cell size h:
        mass * h, stiffness / h, derivatives / h.
    """
    def __init__(self, order):
        self.order = int(order)
        self.nodes = gll_nodes(self.order)
        self.n = self.order + 1

        # Monomial coefficients of every Lagrange polynomial
        self.coeffs = []
        for i in range(self.n):
            others = np.delete(self.nodes, i)
            c = P.polyfromroots(others)
            self.coeffs.append(c / P.polyval(self.nodes[i], c))
        self.dcoeffs = [P.polyder(c) for c in self.coeffs]

        # Exact for products of two degree-p polynomials
        qx, qw = gauss_rule(self.order + 2)
        B = self.eval(qx)
        D = self.eval_deriv(qx)
        self.mass = B.T @ (qw[:, None] * B)
        self.stiffness = D.T @ (qw[:, None] * D)

        # Values and derivatives at the end points 0 and 1
        self.trace = self.eval(np.array([0.0, 1.0]))
        self.dtrace = self.eval_deriv(np.array([0.0, 1.0]))

    def eval(self, x):
        """Basis values, array (len(x), order+1)."""
        x = np.atleast_1d(np.asarray(x, dtype=float))
        return np.stack([P.polyval(x, c) for c in self.coeffs], axis=1)

    def eval_deriv(self, x):
        """Basis derivatives, array (len(x), order+1)."""
        x = np.atleast_1d(np.asarray(x, dtype=float))
        return np.stack([P.polyval(x, c) for c in self.dcoeffs], axis=1)

    def eval_tensor(self, xi):
        """
        Values of the dim-dimensional tensor basis at one point with
        reference coordinates xi (one per axis).
        """
        return kron_axes([self.eval([x])[0] for x in xi])
