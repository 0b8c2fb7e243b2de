"""
Base classes for fitness functions.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from ..exceptions import InvalidDimensionError


class FitnessFunction:
    """Base class for class-based fitness functions.

    Subclass this and implement :meth:`fitness`. The initial mean of a run is
    drawn uniformly in ``[xl, xu]^n`` from the run's random generator.

    Example::

        import numpy as np
        from esopt import CMA, FitnessFunction, Optimizer

        class Shifted(FitnessFunction):
            def fitness(self, x):
                return float(np.sum((x - 1.0) ** 2))

        problem = Shifted(5)
        result = Optimizer(problem, CMA()).run(seed=1)
    """

    xl: float = -5.0
    """Lower bound of the initialization box."""

    xu: float = 5.0
    """Upper bound of the initialization box."""

    def __init__(self, dimension: int) -> None:
        if int(dimension) < 1:
            raise InvalidDimensionError(dimension)
        self.dimension = int(dimension)

    def initial_vector(self, rng: np.random.Generator) -> np.ndarray:
        return rng.uniform(self.xl, self.xu, self.dimension)

    def fitness(self, x: np.ndarray) -> float:
        raise NotImplementedError(f"{type(self).__name__} must implement fitness(self, x).")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dimension={self.dimension})"


class FunctionEvaluator(FitnessFunction):
    """Adapts a plain ``f(x) -> float`` callable to the evaluator contract."""

    def __init__(
        self,
        func: Callable[[np.ndarray], float],
        dimension: int,
        xl: float = -5.0,
        xu: float = 5.0,
    ) -> None:
        super().__init__(dimension)
        self.func = func
        self.xl = float(xl)
        self.xu = float(xu)

    def fitness(self, x: np.ndarray) -> float:
        return float(self.func(x))


__all__ = ["FitnessFunction", "FunctionEvaluator"]
