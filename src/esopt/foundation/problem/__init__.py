"""
Fitness functions and the evaluator contract.
"""

from .base import FitnessFunction, FunctionEvaluator
from .functions import Ellipsoid, Rastrigin, Rosenbrock, Sphere
from .registry import PROBLEMS, available_problem_names, make_problem
from .types import Evaluator

__all__ = [
    "Evaluator",
    "FitnessFunction",
    "FunctionEvaluator",
    "Sphere",
    "Ellipsoid",
    "Rosenbrock",
    "Rastrigin",
    "PROBLEMS",
    "available_problem_names",
    "make_problem",
]
