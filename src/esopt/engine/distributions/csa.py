"""
Isotropic Gaussian with cumulative step-size adaptation.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from esopt.foundation.numeric import Matrix, Vector

from .base import Distribution

if TYPE_CHECKING:
    from ..strategy import Strategy


class CSA(Distribution):
    """``x = mean + sigma * z``; only ``sigma`` adapts.

    The squared length of the evolution path is compared with its expectation
    ``n`` under random selection (Arnold & Beyer): longer paths grow ``sigma``,
    shorter ones shrink it. The only stop criterion is a vanishing step size.
    """

    name = "csa"

    def _allocate(self, n: int) -> None:
        self._path = Vector.zeros(n)
        self._c = 1.0 / math.sqrt(n)
        self._damping = 1.0 / (2.0 * n * math.sqrt(n))

    def _reset(self, strategy: Strategy) -> None:
        w = strategy.weights
        self._mu_eff = 1.0 / float(np.sum(w * w))
        self._path.fill(0.0)

    @property
    def path(self) -> Vector:
        return self._path

    def _transform_point(self, z: Vector, out: Vector) -> None:
        out.copy(z)

    def _transform_cloud(self, Z: Matrix, out: Matrix) -> None:
        out.copy(Z)

    def _adapt(self, strategy: Strategy) -> None:
        c = self._c
        n = strategy.n
        self._path.scale(1.0 - c).scaled_add(math.sqrt(self._mu_eff * c * (2.0 - c)), strategy.z_mean)
        self._sigma *= math.exp(self._damping * (self._path.square_sum() - n))


__all__ = ["CSA"]
