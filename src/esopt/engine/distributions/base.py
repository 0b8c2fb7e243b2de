"""
Sampling distribution contract shared by CSA, SepCMA and CMA.

Lifecycle: ``setup(n)`` allocates the n-sized state once, ``start(strategy)``
resets the step size, the evolution paths and the covariance factorization
(and may be called again to restart), then each generation alternates
``sample_cloud``/``sample_point``, ``update`` and ``stop``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from esopt.foundation.exceptions import DistributionStateError, InvalidStepSizeError
from esopt.foundation.numeric import Matrix, Vector

from ..termination import StopReason

if TYPE_CHECKING:
    from ..point import Point
    from ..strategy import Strategy


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


DEFAULT_SIGMA_INIT = 1.0
DEFAULT_SIGMA_STOP = 1e-12


class Distribution(ABC):
    """Adaptive Gaussian sampling distribution ``x = mean + sigma * T(z)``.

    Subclasses define the linear map ``T`` (identity, diagonal scaling or a
    full ``B diag(D)`` rotation) and how it adapts in :meth:`update`.
    """

    name: str = "abstract"

    def __init__(self, sigma_init: float = DEFAULT_SIGMA_INIT, sigma_stop: float = DEFAULT_SIGMA_STOP) -> None:
        self._sigma_init = DEFAULT_SIGMA_INIT
        self._sigma_stop = DEFAULT_SIGMA_STOP
        self.set_sigma(sigma_init, sigma_stop)
        self._sigma = self._sigma_init
        self._n: int | None = None
        self._started = False

    # -------- Setup API --------

    def set_sigma(self, sigma_init: float, sigma_stop: float) -> None:
        sigma_init = float(sigma_init)
        sigma_stop = float(sigma_stop)
        if not sigma_init >= 0.0:
            raise InvalidStepSizeError(f"sigma_init must be >= 0, got {sigma_init}.", sigma_init, sigma_stop)
        if not sigma_stop >= 0.0:
            raise InvalidStepSizeError(f"sigma_stop must be >= 0, got {sigma_stop}.", sigma_init, sigma_stop)
        if sigma_init < sigma_stop:
            raise InvalidStepSizeError(
                f"sigma_init ({sigma_init}) must be >= sigma_stop ({sigma_stop}).", sigma_init, sigma_stop
            )
        self._sigma_init = sigma_init
        self._sigma_stop = sigma_stop

    @property
    def sigma(self) -> float:
        return self._sigma

    @property
    def sigma_init(self) -> float:
        return self._sigma_init

    @property
    def sigma_stop(self) -> float:
        return self._sigma_stop

    @property
    def n(self) -> int | None:
        return self._n

    @property
    def is_started(self) -> bool:
        return self._started

    # -------- Lifecycle --------

    def setup(self, n: int) -> None:
        """Allocate the state for dimension ``n``; a no-op when already sized."""
        if self._n == n:
            self._started = False
            return
        self._allocate(n)
        self._n = n
        self._started = False
        _logger().debug("%s allocated for n=%d", type(self).__name__, n)

    def start(self, strategy: Strategy) -> None:
        self._require_setup("setup")
        self._sigma = self._sigma_init
        self._reset(strategy)
        self._started = True

    def sample_point(self, strategy: Strategy, point: Point) -> None:
        """Resample one candidate with the same transform as :meth:`sample_cloud`."""
        self._require_started()
        point.z.fill_randn(strategy.rng)
        self._transform_point(point.z, point.x)
        point.x.scale(self._sigma).add(strategy.x_mean)

    def sample_cloud(self, strategy: Strategy) -> None:
        """Resample the whole population matrices ``X``/``Z`` of ``strategy``."""
        self._require_started()
        X, Z = strategy.positions, strategy.samples
        Z.fill_randn(strategy.rng)
        self._transform_cloud(Z, X)
        X.scale(self._sigma).col_wise().add(strategy.x_mean)

    def update(self, strategy: Strategy) -> None:
        self._require_started()
        self._adapt(strategy)

    def stop(self, strategy: Strategy) -> StopReason:
        self._require_started()
        if self._sigma <= self._sigma_stop:
            return StopReason.LOW_STEP_SIZE
        return self._degeneracy(strategy)

    # -------- Variant hooks --------

    @abstractmethod
    def _allocate(self, n: int) -> None: ...

    @abstractmethod
    def _reset(self, strategy: Strategy) -> None: ...

    @abstractmethod
    def _transform_point(self, z: Vector, out: Vector) -> None: ...

    @abstractmethod
    def _transform_cloud(self, Z: Matrix, out: Matrix) -> None: ...

    @abstractmethod
    def _adapt(self, strategy: Strategy) -> None: ...

    def _degeneracy(self, strategy: Strategy) -> StopReason:
        return StopReason.NONE

    # -------- Internals --------

    def _require_setup(self, required: str) -> None:
        if self._n is None:
            raise DistributionStateError(type(self).__name__, required)

    def _require_started(self) -> None:
        self._require_setup("setup")
        if not self._started:
            raise DistributionStateError(type(self).__name__, "start")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sigma_init={self._sigma_init}, sigma_stop={self._sigma_stop})"


__all__ = ["Distribution", "DEFAULT_SIGMA_INIT", "DEFAULT_SIGMA_STOP"]
