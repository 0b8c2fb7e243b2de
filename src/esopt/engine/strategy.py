"""
(mu, lambda) evolution strategy state machine.

The strategy owns the population: two ``n x lambda`` matrices ``X`` (positions)
and ``Z`` (standard-normal draws) whose columns are handed out as the ``x``/``z``
views of the candidate points. One generation is::

    strategy.sample_cloud()
    for point in strategy.points:
        point.fitness = f(point.x.values)
    strategy.update()
    if strategy.stop():
        ...

Ranking, the weighted means and best-point tracking happen in ``update``;
the numeric adaptation is delegated to the attached Distribution.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

from esopt.foundation.exceptions import (
    DistributionNotSetError,
    DistributionStateError,
    InvalidDimensionError,
    InvalidPopulationError,
)
from esopt.foundation.numeric import Matrix, Vector

from .distributions.base import Distribution
from .point import FitnessOrder, Point
from .termination import StopReason, best_fitness_stall_limit
from .weights import WeightsLike, normalized_weights, resolve_weights


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def default_population_size(n: int) -> int:
    return int(math.ceil(4.0 + 3.0 * math.log(n)))


class Strategy:
    """Population bookkeeping for a (mu, lambda) evolution strategy.

    Parameters
    ----------
    n : int
        Search space dimension, fixed for the lifetime of the strategy.
    distribution : Distribution, optional
        Sampling distribution; can be attached later with ``set_distribution``.
    weights : str or callable
        Raw mean-weight generator (``"equal"``, ``"linear"``, ``"log"``).
    maximize : bool
        Rank by decreasing fitness instead of increasing.
    seed : int, optional
        Seed of the run's ``numpy.random.Generator``.
    """

    def __init__(
        self,
        n: int,
        distribution: Distribution | None = None,
        weights: WeightsLike = "log",
        maximize: bool = False,
        seed: int | None = None,
    ) -> None:
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1:
            raise InvalidDimensionError(n)
        self._n = int(n)
        self._seed = seed
        self._rng = np.random.default_rng(seed)
        self._order = FitnessOrder.MAXIMIZE if maximize else FitnessOrder.MINIMIZE

        self._x_mean = Vector.zeros(self._n)
        self._z_mean = Vector.zeros(self._n)
        self._best = Point.allocate(self._n)

        self._weights_generator = resolve_weights(weights)
        self._weights: np.ndarray | None = None

        self._X: Matrix | None = None
        self._Z: Matrix | None = None
        self._points: list[Point] = []
        self._prev_lam = 0

        lam = default_population_size(self._n)
        self.set_mu_lambda(lam // 2, lam)

        self._distribution: Distribution | None = None
        if distribution is not None:
            self.set_distribution(distribution)

        self._n_updates = 0
        self._n_stalled = 0
        self._stop_reason = StopReason.NONE
        self._started = False

    # -------- Accessors --------

    @property
    def n(self) -> int:
        return self._n

    @property
    def mu(self) -> int:
        return self._mu

    @property
    def lam(self) -> int:
        return self._lam

    @property
    def order(self) -> FitnessOrder:
        return self._order

    @property
    def maximize(self) -> bool:
        return self._order is FitnessOrder.MAXIMIZE

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def distribution(self) -> Distribution | None:
        return self._distribution

    @property
    def weights(self) -> np.ndarray:
        """Normalized mean weights, best rank first (length ``mu``)."""
        if self._weights is None:
            self._weights = normalized_weights(self._weights_generator, self._mu)
        return self._weights

    @property
    def x_mean(self) -> Vector:
        return self._x_mean

    @property
    def z_mean(self) -> Vector:
        return self._z_mean

    @property
    def points(self) -> Sequence[Point]:
        """The ``lambda`` candidates; ranked best first after ``update()``."""
        return self._points

    @property
    def positions(self) -> Matrix:
        return self._require_population(self._X)

    @property
    def samples(self) -> Matrix:
        return self._require_population(self._Z)

    @property
    def best_point(self) -> Point:
        return self._best

    @property
    def n_updates(self) -> int:
        return self._n_updates

    @property
    def n_stalled(self) -> int:
        return self._n_stalled

    @property
    def stall_limit(self) -> int:
        return self._stall_limit

    @property
    def stop_reason(self) -> StopReason:
        return self._stop_reason

    # -------- Setup API --------

    def set_distribution(self, distribution: Distribution) -> None:
        self._distribution = distribution
        distribution.setup(self._n)
        self._started = False

    def set_weights(self, weights: WeightsLike) -> None:
        self._weights_generator = resolve_weights(weights)
        self._weights = None
        self._started = False

    def set_maximize(self, maximize: bool) -> None:
        self._order = FitnessOrder.MAXIMIZE if maximize else FitnessOrder.MINIMIZE

    def set_mu_lambda(self, mu: int, lam: int) -> None:
        if lam < 1:
            raise InvalidPopulationError(f"lambda must be >= 1, got {lam}.", mu, lam)
        if mu < 1:
            raise InvalidPopulationError(f"mu must be >= 1, got {mu}.", mu, lam)
        if mu > lam:
            raise InvalidPopulationError(f"mu ({mu}) must not exceed lambda ({lam}).", mu, lam)
        self._mu = int(mu)
        self._lam = int(lam)
        self._stall_limit = best_fitness_stall_limit(self._n, self._lam)
        self._weights = None
        self._started = False

    def reseed(self, seed: int | None) -> None:
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    # -------- Iterations API --------

    def start(self, x_init: Sequence[float] | np.ndarray | Vector | None = None) -> None:
        """Reset the run; ``x_init`` becomes the initial mean when given."""
        if self._distribution is None:
            raise DistributionNotSetError()

        if x_init is not None:
            values = x_init.values if isinstance(x_init, Vector) else np.asarray(x_init, dtype=np.float64).reshape(-1)
            if values.size != self._n:
                raise InvalidDimensionError(values.size)
            self._x_mean.fill_from_values(values)

        if self._prev_lam != self._lam:
            self._allocate_population(self._lam)
            self._prev_lam = self._lam

        self._distribution.start(self)

        self._z_mean.fill(0.0)
        self._best.fitness = math.nan
        self._n_updates = 0
        self._n_stalled = 0
        self._stop_reason = StopReason.NONE
        self._started = True
        _logger().debug(
            "Strategy started: n=%d mu=%d lambda=%d distribution=%s",
            self._n,
            self._mu,
            self._lam,
            type(self._distribution).__name__,
        )

    def sample_cloud(self) -> None:
        self._require_started().sample_cloud(self)

    def sample_point(self, point: Point) -> None:
        self._require_started().sample_point(self, point)

    def selected(self) -> Sequence[Point]:
        """The ``mu`` best ranked points of the last ``update()``."""
        return self._points[: self._mu]

    def update(self) -> None:
        distribution = self._require_started()
        order = self._order

        self._points.sort(key=lambda p: order.sort_key(p.fitness))

        top = self._points[0]
        if self._n_updates == 0 or order.better(top.fitness, self._best.fitness):
            self._best.copy(top)
            self._n_stalled = 0
        else:
            self._n_stalled += 1

        weights = self.weights
        self._x_mean.fill(0.0)
        self._z_mean.fill(0.0)
        for w, point in zip(weights, self.selected()):
            self._x_mean.scaled_add(w, point.x)
            self._z_mean.scaled_add(w, point.z)

        distribution.update(self)
        self._n_updates += 1

    def stop(self) -> bool:
        """Evaluate the stop criteria; the first reason that fires is latched."""
        distribution = self._require_started()
        if self._stop_reason is StopReason.NONE:
            if self._n_stalled > self._stall_limit:
                self._stop_reason = StopReason.BEST_FITNESS_STALLED
            else:
                self._stop_reason = distribution.stop(self)
        return self._stop_reason is not StopReason.NONE

    # -------- Internals --------

    def _allocate_population(self, lam: int) -> None:
        self._X = Matrix.zeros(self._n, lam)
        self._Z = Matrix.zeros(self._n, lam)
        self._points = [Point(self._X.col(i), self._Z.col(i)) for i in range(lam)]

    def _require_started(self) -> Distribution:
        if self._distribution is None:
            raise DistributionNotSetError()
        if not self._started:
            raise DistributionStateError("Strategy", "start")
        return self._distribution

    def _require_population(self, matrix: Matrix | None) -> Matrix:
        if matrix is None:
            raise DistributionStateError("Strategy", "start")
        return matrix

    def __repr__(self) -> str:
        return (
            f"Strategy(n={self._n}, mu={self._mu}, lam={self._lam}, order={self._order}, "
            f"distribution={self._distribution!r})"
        )


__all__ = ["Strategy", "default_population_size"]
