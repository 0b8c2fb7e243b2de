"""
Raw mean-weight generators.

A generator maps ``mu`` to ``mu`` non-negative raw weights, ordered from the
best ranked point to the worst; the strategy normalizes them to sum 1.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from esopt.foundation.exceptions import InvalidWeightsError


def equal_weights(mu: int) -> np.ndarray:
    return np.ones(mu)


def linear_weights(mu: int) -> np.ndarray:
    """``mu - i`` for rank ``i``: ``[3, 2, 1]`` for ``mu = 3``."""
    return mu - np.arange(mu, dtype=np.float64)


def log_weights(mu: int) -> np.ndarray:
    """``ln(mu + 0.5) - ln(i + 1)`` for rank ``i``."""
    return np.log(mu + 0.5) - np.log(np.arange(1, mu + 1, dtype=np.float64))


WEIGHTS: dict[str, Callable[[int], np.ndarray]] = {
    "equal": equal_weights,
    "linear": linear_weights,
    "log": log_weights,
}


WeightsLike = str | Callable[[int], np.ndarray]


def resolve_weights(weights: WeightsLike) -> Callable[[int], np.ndarray]:
    if callable(weights):
        return weights
    try:
        return WEIGHTS[weights.lower()]
    except KeyError as exc:
        raise InvalidWeightsError(weights, sorted(WEIGHTS)) from exc


def normalized_weights(generator: Callable[[int], np.ndarray], mu: int) -> np.ndarray:
    raw = np.asarray(generator(mu), dtype=np.float64)
    if raw.shape != (mu,) or np.any(raw < 0) or not np.all(np.isfinite(raw)) or raw.sum() <= 0:
        raise ValueError(f"Weight generator must return {mu} finite non-negative weights with a positive sum.")
    return raw / raw.sum()


__all__ = ["WEIGHTS", "WeightsLike", "equal_weights", "linear_weights", "log_weights", "resolve_weights", "normalized_weights"]
