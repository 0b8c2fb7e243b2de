"""
Gaussian with a full covariance matrix (CMA-ES).

Close to Hansen's reference ``purecmaes.m``: the covariance ``C`` is
factored as ``B diag(D^2) B^T`` by a symmetric eigen-decomposition and
samples are ``x = mean + sigma * B diag(D) z``.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from esopt.foundation.exceptions import CovarianceShapeError, EigenDecompositionError
from esopt.foundation.kernel import DEFAULT_KERNEL, KernelBackend
from esopt.foundation.numeric import EigenSolver, Matrix, Vector
from esopt.foundation.numeric.functors import Sqrt

from ..termination import MAX_CONDITION, NO_EFFECT_TOLERANCE, StopReason
from .base import Distribution
from .constants import CMAConstants

if TYPE_CHECKING:
    from ..strategy import Strategy


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class CMA(Distribution):
    """Rotated and scaled Gaussian with covariance matrix adaptation.

    Parameters
    ----------
    sigma_init, sigma_stop : float
        Initial step size and the floor below which the run stops.
    kernel : str or KernelBackend
        Eigen kernel name (``"numpy"`` or ``"numba"``) or instance.
    """

    name = "cma"

    def __init__(
        self,
        sigma_init: float = 1.0,
        sigma_stop: float = 1e-12,
        kernel: str | KernelBackend = DEFAULT_KERNEL,
    ) -> None:
        super().__init__(sigma_init, sigma_stop)
        self._solver = EigenSolver(kernel)
        self._custom_cov: np.ndarray | None = None
        self._eigen_failure = False
        self._eigen_period = 1

    # -------- Setup API --------

    def set_covariance(self, C: np.ndarray | Matrix) -> None:
        """Seed ``C`` for the next ``start()``; consumed once, checked by shape only."""
        arr = C.to_numpy() if isinstance(C, Matrix) else np.array(C, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            expected = self._n if self._n is not None else (arr.shape[0] if arr.ndim else 0)
            raise CovarianceShapeError(arr.shape, expected)
        if self._n is not None and arr.shape[0] != self._n:
            raise CovarianceShapeError(arr.shape, self._n)
        self._custom_cov = arr

    # -------- Accessors --------

    @property
    def constants(self) -> CMAConstants:
        return self._constants

    @property
    def kernel(self) -> KernelBackend:
        return self._solver.kernel

    @property
    def C(self) -> Matrix:
        return self._C

    @property
    def B(self) -> Matrix:
        return self._B

    @property
    def D(self) -> Vector:
        return self._D

    @property
    def eigen_period(self) -> int:
        return self._eigen_period

    # -------- Variant hooks --------

    def _allocate(self, n: int) -> None:
        self._ps = Vector.zeros(n)
        self._pc = Vector.zeros(n)
        self._C = Matrix.zeros(n, n)
        self._B = Matrix.zeros(n, n)
        self._BD = Matrix.zeros(n, n)
        self._D = Vector.zeros(n)
        self._tmp = Vector.zeros(n)

    def _reset(self, strategy: Strategy) -> None:
        n = strategy.n
        k = self._constants = CMAConstants.compute(n, strategy.weights, separable=False)
        self._eigen_period = int(math.floor(max(1.0, 1.0 / (10.0 * n * (k.c1 + k.c_mu)))))
        self._eigen_failure = False
        self._ps.fill(0.0)
        self._pc.fill(0.0)

        if self._custom_cov is not None:
            if self._custom_cov.shape != (n, n):
                raise CovarianceShapeError(self._custom_cov.shape, n)
            self._C.values[...] = self._custom_cov
            self._custom_cov = None
            self._decompose()
        else:
            self._C.fill(0.0).diagonal().fill(1.0)
            self._B.fill(0.0).diagonal().fill(1.0)
            self._BD.fill(0.0).diagonal().fill(1.0)
            self._D.fill(1.0)

    def _transform_point(self, z: Vector, out: Vector) -> None:
        self._BD.dot(z, out)

    def _transform_cloud(self, Z: Matrix, out: Matrix) -> None:
        self._BD.dot(Z, out)

    def _adapt(self, strategy: Strategy) -> None:
        k = self._constants
        z_mean = strategy.z_mean
        generation = strategy.n_updates

        # Step-size path in the whitened coordinates: B z_mean
        self._B.dot(z_mean, self._tmp)
        self._ps.scale(1.0 - k.c_sigma).scaled_add(math.sqrt(k.mu_eff * k.c_sigma * (2.0 - k.c_sigma)), self._tmp)
        ps_norm = math.sqrt(self._ps.square_sum())
        h_sigma = k.h_sigma(ps_norm, generation)

        self._BD.dot(z_mean, self._tmp)
        self._pc.scale(1.0 - k.cc)
        if h_sigma:
            self._pc.scaled_add(math.sqrt(k.mu_eff * k.cc * (2.0 - k.cc)), self._tmp)

        self._sigma *= k.sigma_factor(ps_norm)

        scale = 1.0 - k.c1 - k.c_mu
        if not h_sigma:
            scale += k.c1 * k.cc * (2.0 - k.cc)
        self._C.scale(scale).scaled_add_cross(k.c1, self._pc)

        weights = strategy.weights
        for i, point in enumerate(strategy.selected()):
            self._BD.dot(point.z, self._tmp)
            self._C.scaled_add_cross(k.c_mu * weights[i], self._tmp)

        if self._eigen_period == 1 or generation % self._eigen_period == 0:
            self._decompose()

    def stop(self, strategy: Strategy) -> StopReason:
        self._require_started()
        if self._eigen_failure:
            return StopReason.EIGEN_FAILURE
        return super().stop(strategy)

    def _degeneracy(self, strategy: Strategy) -> StopReason:
        x_mean = strategy.x_mean.values
        B = self._B.values
        D = self._D.values

        # Axis i has no effect when 0.1 sigma D_i B[:, i] leaves every coordinate unchanged
        shifts = x_mean[:, np.newaxis] + (0.1 * self._sigma) * B * D[np.newaxis, :]
        moved = np.abs(x_mean[:, np.newaxis] - shifts) > NO_EFFECT_TOLERANCE
        if not np.all(np.any(moved, axis=0)):
            return StopReason.NO_EFFECT_AXIS

        step = 0.2 * self._sigma * np.sqrt(np.maximum(self._C.diagonal().values, 0.0))
        if np.any(np.abs(x_mean - (x_mean + step)) <= NO_EFFECT_TOLERANCE):
            return StopReason.NO_EFFECT_COORDINATE

        eigenvalues = D * D
        if eigenvalues.max() >= MAX_CONDITION * eigenvalues.min():
            return StopReason.ILL_CONDITIONED
        return StopReason.NONE

    # -------- Internals --------

    def _decompose(self) -> None:
        """Refresh ``B``, ``D`` and ``BD`` from ``C``; latch a failure instead of raising."""
        try:
            self._solver.solve(self._C, self._B, self._D)
        except EigenDecompositionError as exc:
            _logger().warning("Eigen-decomposition failed: %s", exc.message)
            self._eigen_failure = True
            return
        self._D.broadcast(Sqrt())
        self._BD.copy(self._B).row_wise().scale(self._D)


__all__ = ["CMA"]
