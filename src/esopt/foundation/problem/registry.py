"""
Benchmark problem registry.
"""

from __future__ import annotations

from collections.abc import Callable

from ..suggestions import format_unknown
from .base import FitnessFunction
from .functions import Ellipsoid, Rastrigin, Rosenbrock, Sphere

PROBLEMS: dict[str, Callable[[int], FitnessFunction]] = {
    "sphere": Sphere,
    "ellipsoid": Ellipsoid,
    "rosenbrock": Rosenbrock,
    "rastrigin": Rastrigin,
}


def available_problem_names() -> list[str]:
    return sorted(PROBLEMS)


def make_problem(name: str, n: int) -> FitnessFunction:
    """Instantiate the benchmark ``name`` in dimension ``n``."""
    try:
        factory = PROBLEMS[name.lower()]
    except KeyError as exc:
        raise ValueError(format_unknown("problem", name, available_problem_names())) from exc
    return factory(n)


__all__ = ["PROBLEMS", "available_problem_names", "make_problem"]
