from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from esopt.foundation.logging import RUN_LOGGER

if TYPE_CHECKING:
    from .optimizer import Optimizer


@runtime_checkable
class OptimizerListener(Protocol):
    """Observer of an optimization run; purely observational."""

    def on_start(self, optimizer: Optimizer) -> None:
        """Called once, after the strategy has been started."""
        ...

    def on_update(self, optimizer: Optimizer) -> None:
        """Called after every generation."""
        ...

    def on_stop(self, optimizer: Optimizer) -> None:
        """Called once at the end of the run."""
        ...


class NoOpListener:
    """Default no-op implementation."""

    def on_start(self, optimizer: Optimizer) -> None:
        return None

    def on_update(self, optimizer: Optimizer) -> None:
        return None

    def on_stop(self, optimizer: Optimizer) -> None:
        return None


class OptimizerLogger:
    """Reports a run through ``logging``: a header, one line per generation, the stop reason.

    Lines look like::

        # N=10 mu=6 lambda=12 seed=42
        12 31.415927
        24 18.003310
        ...
        # stopping criteria=low-step-size
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger or logging.getLogger(RUN_LOGGER)
        self.level = level

    def on_start(self, optimizer: Optimizer) -> None:
        strategy = optimizer.strategy
        self.logger.log(
            self.level, "# N=%d mu=%d lambda=%d seed=%d", strategy.n, strategy.mu, strategy.lam, optimizer.seed
        )

    def on_update(self, optimizer: Optimizer) -> None:
        self.logger.log(self.level, "%d %f", optimizer.n_evaluations, optimizer.strategy.best_point.fitness)

    def on_stop(self, optimizer: Optimizer) -> None:
        self.logger.log(self.level, "# stopping criteria=%s", optimizer.strategy.stop_reason)


__all__ = ["OptimizerListener", "NoOpListener", "OptimizerLogger"]
