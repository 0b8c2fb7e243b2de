"""
Sampling distributions and their name registry.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from esopt.foundation.exceptions import InvalidDistributionError

from .base import DEFAULT_SIGMA_INIT, DEFAULT_SIGMA_STOP, Distribution
from .cma import CMA
from .constants import CMAConstants
from .csa import CSA
from .sep_cma import SepCMA

DISTRIBUTIONS: dict[str, Callable[..., Distribution]] = {
    "csa": CSA,
    "sep-cma": SepCMA,
    "cma": CMA,
}


def available_distributions() -> list[str]:
    return sorted(DISTRIBUTIONS)


def resolve_distribution(name: str, **kwargs: Any) -> Distribution:
    """Instantiate the distribution registered as ``name`` (``sep_cma`` is accepted for ``sep-cma``)."""
    key = name.lower().replace("_", "-")
    try:
        factory = DISTRIBUTIONS[key]
    except KeyError as exc:
        raise InvalidDistributionError(name, available_distributions()) from exc
    return factory(**kwargs)


__all__ = [
    "Distribution",
    "CSA",
    "SepCMA",
    "CMA",
    "CMAConstants",
    "DISTRIBUTIONS",
    "DEFAULT_SIGMA_INIT",
    "DEFAULT_SIGMA_STOP",
    "available_distributions",
    "resolve_distribution",
]
