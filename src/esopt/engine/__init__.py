"""
Engine layer: strategy, sampling distributions and the managed optimization loop.
"""

from .config import OptimizerConfig, OptimizerConfigData, build_optimizer
from .distributions import CMA, CSA, CMAConstants, Distribution, SepCMA, resolve_distribution
from .listeners import NoOpListener, OptimizerListener, OptimizerLogger
from .optimizer import Optimizer, RunResult
from .point import FitnessOrder, Point
from .strategy import Strategy
from .termination import StopReason
from .weights import resolve_weights

__all__ = [
    "Strategy",
    "Point",
    "FitnessOrder",
    "StopReason",
    "Distribution",
    "CSA",
    "SepCMA",
    "CMA",
    "CMAConstants",
    "resolve_distribution",
    "resolve_weights",
    "Optimizer",
    "RunResult",
    "OptimizerListener",
    "NoOpListener",
    "OptimizerLogger",
    "OptimizerConfig",
    "OptimizerConfigData",
    "build_optimizer",
]
