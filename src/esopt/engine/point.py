"""
Candidate points and the fitness order used to rank them.
"""

from __future__ import annotations

import math
from enum import Enum

from esopt.foundation.numeric import Vector


class FitnessOrder(str, Enum):
    """Ranking direction; NaN fitness always ranks last."""

    MINIMIZE = "min"
    MAXIMIZE = "max"

    def __str__(self) -> str:
        return self.value

    @property
    def worst(self) -> float:
        return math.inf if self is FitnessOrder.MINIMIZE else -math.inf

    def better(self, a: float, b: float) -> bool:
        """True when ``a`` is strictly better than ``b``."""
        if math.isnan(a):
            return False
        if math.isnan(b):
            return True
        return a < b if self is FitnessOrder.MINIMIZE else a > b

    def sort_key(self, fitness: float) -> tuple[bool, float]:
        if math.isnan(fitness):
            return (True, 0.0)
        return (False, fitness if self is FitnessOrder.MINIMIZE else -fitness)


class Point:
    """A candidate: position ``x``, sampling-space draw ``z`` and its fitness.

    Population points hold column views of the strategy's ``X``/``Z``
    matrices; the best point owns its buffers and is copied into.
    """

    __slots__ = ("x", "z", "fitness")

    def __init__(self, x: Vector, z: Vector, fitness: float = math.nan) -> None:
        self.x = x
        self.z = z
        self.fitness = float(fitness)

    @classmethod
    def allocate(cls, n: int) -> "Point":
        return cls(Vector.zeros(n), Vector.zeros(n))

    def copy(self, other: "Point") -> "Point":
        self.x.copy(other.x)
        self.z.copy(other.z)
        self.fitness = other.fitness
        return self

    def __repr__(self) -> str:
        return f"Point(fitness={self.fitness!r}, x={self.x.to_numpy().tolist()})"


__all__ = ["FitnessOrder", "Point"]
