"""
Gaussian with a diagonal covariance matrix (separable CMA-ES).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from esopt.foundation.exceptions import CovarianceShapeError
from esopt.foundation.numeric import Matrix, Vector
from esopt.foundation.numeric.functors import Sqrt

from ..termination import MAX_CONDITION, NO_EFFECT_TOLERANCE, StopReason
from .base import Distribution
from .constants import CMAConstants

if TYPE_CHECKING:
    from ..strategy import Strategy


class SepCMA(Distribution):
    """CMA update restricted to the diagonal ``c`` of the covariance.

    The axis lengths are ``D = sqrt(c)`` so each generation costs O(n mu)
    instead of the O(n^3) decomposition of the full model; suited to high
    dimensions.
    """

    name = "sep-cma"

    def __init__(self, sigma_init: float = 1.0, sigma_stop: float = 1e-12) -> None:
        super().__init__(sigma_init, sigma_stop)
        self._custom_cov: np.ndarray | None = None

    # -------- Setup API --------

    def set_covariance(self, C: np.ndarray | Matrix) -> None:
        """Seed the covariance for the next ``start()``; only its diagonal is kept."""
        arr = C.to_numpy() if isinstance(C, Matrix) else np.array(C, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise CovarianceShapeError(arr.shape, arr.shape[0] if arr.ndim else 0)
        if self._n is not None and arr.shape[0] != self._n:
            raise CovarianceShapeError(arr.shape, self._n)
        self._custom_cov = np.diag(arr).copy()

    # -------- Accessors --------

    @property
    def constants(self) -> CMAConstants:
        return self._constants

    @property
    def covariance_diagonal(self) -> Vector:
        return self._c

    @property
    def axis_lengths(self) -> Vector:
        return self._D

    # -------- Variant hooks --------

    def _allocate(self, n: int) -> None:
        self._ps = Vector.zeros(n)
        self._pc = Vector.zeros(n)
        self._c = Vector.zeros(n)
        self._D = Vector.zeros(n)
        self._tmp = Vector.zeros(n)
        self._rank_mu = Vector.zeros(n)

    def _reset(self, strategy: Strategy) -> None:
        n = strategy.n
        self._constants = CMAConstants.compute(n, strategy.weights, separable=True)
        self._ps.fill(0.0)
        self._pc.fill(0.0)
        if self._custom_cov is not None:
            if self._custom_cov.size != n:
                raise CovarianceShapeError((self._custom_cov.size, self._custom_cov.size), n)
            self._c.fill_from_values(self._custom_cov)
            self._custom_cov = None
        else:
            self._c.fill(1.0)
        self._refresh_axes()

    def _transform_point(self, z: Vector, out: Vector) -> None:
        out.copy(z).convolve(self._D)

    def _transform_cloud(self, Z: Matrix, out: Matrix) -> None:
        out.copy(Z).col_wise().scale(self._D)

    def _adapt(self, strategy: Strategy) -> None:
        k = self._constants
        z_mean = strategy.z_mean

        self._ps.scale(1.0 - k.c_sigma).scaled_add(math.sqrt(k.mu_eff * k.c_sigma * (2.0 - k.c_sigma)), z_mean)
        ps_norm = math.sqrt(self._ps.square_sum())
        h_sigma = k.h_sigma(ps_norm, strategy.n_updates)

        self._pc.scale(1.0 - k.cc)
        if h_sigma:
            self._tmp.copy(z_mean).convolve(self._D)
            self._pc.scaled_add(math.sqrt(k.mu_eff * k.cc * (2.0 - k.cc)), self._tmp)

        self._sigma *= k.sigma_factor(ps_norm)

        scale = 1.0 - k.c1 - k.c_mu
        if not h_sigma:
            scale += k.c1 * k.cc * (2.0 - k.cc)

        self._rank_mu.fill(0.0)
        weights = strategy.weights
        for i, point in enumerate(strategy.selected()):
            self._tmp.copy(point.z).convolve(self._D)
            self._rank_mu.scaled_add(weights[i], self._tmp.convolve(self._tmp))

        self._c.scale(scale)
        self._tmp.copy(self._pc).convolve(self._pc)
        self._c.scaled_add(k.c1, self._tmp).scaled_add(k.c_mu, self._rank_mu)
        self._refresh_axes()

    def _degeneracy(self, strategy: Strategy) -> StopReason:
        x_mean = strategy.x_mean.values
        step = 0.2 * self._sigma * np.sqrt(np.maximum(self._c.values, 0.0))
        if np.any(np.abs(x_mean - (x_mean + step)) <= NO_EFFECT_TOLERANCE):
            return StopReason.NO_EFFECT_COORDINATE
        if self._c.max() >= MAX_CONDITION * self._c.min():
            return StopReason.ILL_CONDITIONED
        return StopReason.NONE

    # -------- Internals --------

    def _refresh_axes(self) -> None:
        self._D.copy(self._c).broadcast(Sqrt())


__all__ = ["SepCMA"]
