"""
Managed optimization loop.

``Optimizer.run`` drives one Strategy against an evaluator: seed the random
generator, draw the initial mean from the evaluator, then sample, evaluate,
update and test the stop criteria until a stop reason fires or the
evaluation budget is spent.

Failed evaluations (``EvaluationError``) resample the candidate and retry, at
most ``max_retries`` attempts per candidate. A candidate that exhausts its
attempts gets the worst fitness of the ranking order, is counted in
``RunResult.n_exhausted`` and the run goes on. Every attempt counts as one
evaluation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from esopt.foundation.exceptions import ConfigurationError, EvaluationError
from esopt.foundation.problem.types import Evaluator

from .distributions.base import Distribution
from .listeners import OptimizerListener
from .point import Point
from .strategy import Strategy
from .termination import StopReason

DEFAULT_MAX_RETRIES = 32


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def fresh_seed() -> int:
    """A 64-bit seed drawn from OS entropy."""
    return int(np.random.SeedSequence().generate_state(1, np.uint64)[0])


@dataclass
class RunResult:
    best_x: np.ndarray
    best_fitness: float
    stop_reason: StopReason
    n_evaluations: int
    n_updates: int
    seed: int
    n_exhausted: int = 0
    budget_exhausted: bool = False

    @property
    def converged(self) -> bool:
        """True when the run ended on a stop criterion rather than on its budget."""
        return self.stop_reason is not StopReason.NONE

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["best_x"] = self.best_x.tolist()
        data["stop_reason"] = str(self.stop_reason)
        return data


class Optimizer:
    """Runs a Strategy to completion against an evaluator.

    Parameters
    ----------
    evaluator : Evaluator
        Fitness function with ``dimension``, ``initial_vector`` and ``fitness``.
    distribution : Distribution, optional
        Sampling distribution attached to the strategy.
    strategy : Strategy, optional
        Pre-configured strategy (population sizes, weights, order); a default
        ``Strategy(evaluator.dimension)`` is built when omitted.
    max_evaluations : int
        Evaluation budget, 0 for unlimited.
    max_retries : int
        Attempts per candidate before it is given the worst fitness.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        distribution: Distribution | None = None,
        strategy: Strategy | None = None,
        max_evaluations: int = 0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        listeners: Iterable[OptimizerListener] = (),
    ) -> None:
        if strategy is None:
            strategy = Strategy(evaluator.dimension)
        elif strategy.n != evaluator.dimension:
            raise ConfigurationError(
                f"Strategy dimension ({strategy.n}) does not match the evaluator dimension ({evaluator.dimension}).",
                "Build the Strategy with n=evaluator.dimension",
            )
        if distribution is not None:
            strategy.set_distribution(distribution)
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}.")

        self.evaluator = evaluator
        self.strategy = strategy
        self.max_retries = int(max_retries)
        self.set_max_evaluations(max_evaluations)
        self._listeners: list[OptimizerListener] = list(listeners)

        self._seed = 0
        self._n_evaluations = 0
        self._n_exhausted = 0

    # -------- Accessors --------

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def n_evaluations(self) -> int:
        return self._n_evaluations

    @property
    def n_exhausted(self) -> int:
        return self._n_exhausted

    def set_max_evaluations(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"max_evaluations must be >= 0, got {value}.")
        self.max_evaluations = int(value)

    # -------- Listeners --------

    def add_listener(self, listener: OptimizerListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: OptimizerListener) -> None:
        self._listeners.remove(listener)

    # -------- Run --------

    def run(self, seed: int | None = None) -> RunResult:
        """Perform one optimization run; a fresh seed is drawn when ``seed`` is None."""
        self._seed = fresh_seed() if seed is None else int(seed)
        self._n_evaluations = 0
        self._n_exhausted = 0
        strategy = self.strategy

        strategy.reseed(self._seed)
        x0 = np.asarray(self.evaluator.initial_vector(strategy.rng), dtype=np.float64)
        strategy.start(x0)
        _logger().debug("Run started: seed=%d n=%d lambda=%d", self._seed, strategy.n, strategy.lam)
        self._fire("on_start")

        budget_exhausted = False
        while True:
            strategy.sample_cloud()
            for point in strategy.points:
                self._evaluate(point)

            strategy.update()
            self._fire("on_update")

            if self.max_evaluations > 0 and self._n_evaluations >= self.max_evaluations:
                budget_exhausted = True
                break
            if strategy.stop():
                break

        self._fire("on_stop")
        best = strategy.best_point
        _logger().debug(
            "Run stopped: reason=%s evaluations=%d best=%g", strategy.stop_reason, self._n_evaluations, best.fitness
        )
        return RunResult(
            best_x=best.x.to_numpy(),
            best_fitness=best.fitness,
            stop_reason=strategy.stop_reason,
            n_evaluations=self._n_evaluations,
            n_updates=strategy.n_updates,
            seed=self._seed,
            n_exhausted=self._n_exhausted,
            budget_exhausted=budget_exhausted,
        )

    # -------- Internals --------

    def _evaluate(self, point: Point) -> None:
        for attempt in range(1, self.max_retries + 1):
            self._n_evaluations += 1
            try:
                point.fitness = float(self.evaluator.fitness(point.x.to_numpy()))
                return
            except EvaluationError:
                if attempt < self.max_retries:
                    self.strategy.sample_point(point)

        point.fitness = self.strategy.order.worst
        self._n_exhausted += 1
        _logger().warning(
            "Candidate could not be evaluated after %d attempts; ranking it last (fitness=%s).",
            self.max_retries,
            point.fitness,
        )

    def _fire(self, event: str) -> None:
        for listener in self._listeners:
            getattr(listener, event)(self)


__all__ = ["Optimizer", "RunResult", "DEFAULT_MAX_RETRIES", "fresh_seed"]
