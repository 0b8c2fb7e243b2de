from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Evaluator(Protocol):
    """Black-box fitness contract consumed by the Optimizer.

    ``fitness`` returns a scalar or raises ``EvaluationError`` when the
    candidate cannot be evaluated; the Optimizer then resamples it.
    """

    dimension: int

    def initial_vector(self, rng: np.random.Generator) -> np.ndarray: ...

    def fitness(self, x: np.ndarray) -> float: ...


__all__ = ["Evaluator"]
