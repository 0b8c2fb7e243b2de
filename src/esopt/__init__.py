"""
esopt: (mu, lambda) evolution strategies over strided dense linear algebra.

Quick start::

    from esopt import CMA, Optimizer, Sphere

    result = Optimizer(Sphere(10), CMA(sigma_init=0.5)).run(seed=1)
    print(result.best_fitness, result.stop_reason)
"""

from .engine import (
    CMA,
    CSA,
    CMAConstants,
    Distribution,
    FitnessOrder,
    NoOpListener,
    Optimizer,
    OptimizerConfig,
    OptimizerConfigData,
    OptimizerListener,
    OptimizerLogger,
    Point,
    RunResult,
    SepCMA,
    StopReason,
    Strategy,
    build_optimizer,
)
from .foundation.exceptions import ESOptError, EvaluationError
from .foundation.numeric import Matrix, Vector
from .foundation.problem import (
    Ellipsoid,
    FitnessFunction,
    FunctionEvaluator,
    Rastrigin,
    Rosenbrock,
    Sphere,
    make_problem,
)
from .foundation.version import __version__

__all__ = [
    "__version__",
    "Strategy",
    "Point",
    "FitnessOrder",
    "StopReason",
    "Distribution",
    "CSA",
    "SepCMA",
    "CMA",
    "CMAConstants",
    "Optimizer",
    "RunResult",
    "OptimizerListener",
    "NoOpListener",
    "OptimizerLogger",
    "OptimizerConfig",
    "OptimizerConfigData",
    "build_optimizer",
    "Vector",
    "Matrix",
    "FitnessFunction",
    "FunctionEvaluator",
    "Sphere",
    "Ellipsoid",
    "Rosenbrock",
    "Rastrigin",
    "make_problem",
    "ESOptError",
    "EvaluationError",
]
