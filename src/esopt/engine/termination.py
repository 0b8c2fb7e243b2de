from __future__ import annotations

import math
from enum import Enum


class StopReason(str, Enum):
    """Why a run stopped; ``NONE`` while it is still running."""

    NONE = "none"
    LOW_STEP_SIZE = "low-step-size"
    NO_EFFECT_AXIS = "no-effect-axis"
    NO_EFFECT_COORDINATE = "no-effect-coordinate"
    ILL_CONDITIONED = "ill-conditioned-covariance"
    BEST_FITNESS_STALLED = "best-fitness-stalled"
    EIGEN_FAILURE = "eigen-decomposition-failure"

    def __str__(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return self is not StopReason.NONE


# Absolute tolerance of the "no effect" tests: a perturbation below it does
# not change a coordinate in double precision.
NO_EFFECT_TOLERANCE = 1.11e-16

# Maximum ratio between the largest and smallest covariance eigenvalue.
MAX_CONDITION = 1e14


def best_fitness_stall_limit(n: int, lam: int) -> int:
    """Generations without strict improvement tolerated before stopping."""
    return math.ceil(10 + math.floor(30 * n / lam))


__all__ = ["StopReason", "NO_EFFECT_TOLERANCE", "MAX_CONDITION", "best_fitness_stall_limit"]
