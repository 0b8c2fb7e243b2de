"""Elementwise functors applied by Vector/Matrix broadcasts.

Functors are vectorized: they receive numpy arrays (a contiguous slice or a
strided view of a coefficient buffer) and return the image array. A unary
functor maps ``u -> f(u)``, a binary functor maps ``(u, v) -> f(u, v)`` where
``v`` is either an array of the same shape or a broadcastable row/column.
"""

from __future__ import annotations

import numpy as np


class UnaryFunctor:
    """Base class for ``u -> f(u)`` maps."""

    def __call__(self, u: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class BinaryFunctor:
    """Base class for ``(u, v) -> f(u, v)`` maps."""

    def __call__(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class Constant(UnaryFunctor):
    def __init__(self, value: float) -> None:
        self.value = float(value)

    def __call__(self, u: np.ndarray) -> np.ndarray:
        return np.full_like(u, self.value)


class Identity(UnaryFunctor):
    def __call__(self, u: np.ndarray) -> np.ndarray:
        return u


class Scale(UnaryFunctor):
    def __init__(self, factor: float) -> None:
        self.factor = float(factor)

    def __call__(self, u: np.ndarray) -> np.ndarray:
        return self.factor * u


class InvScale(UnaryFunctor):
    def __init__(self, factor: float) -> None:
        self.factor = float(factor)

    def __call__(self, u: np.ndarray) -> np.ndarray:
        return u / self.factor


class Sqrt(UnaryFunctor):
    """Square root clamped at zero, for eigenvalues spoiled by rounding."""

    def __call__(self, u: np.ndarray) -> np.ndarray:
        return np.sqrt(np.maximum(u, 0.0))


class Add(BinaryFunctor):
    def __call__(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        return u + v


class Sub(BinaryFunctor):
    def __call__(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        return u - v


class Product(BinaryFunctor):
    def __call__(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        return u * v


class Division(BinaryFunctor):
    def __call__(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        return u / v


class ScaledAdd(BinaryFunctor):
    """``u + k * v``."""

    def __init__(self, factor: float) -> None:
        self.factor = float(factor)

    def __call__(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        return u + self.factor * v


__all__ = [
    "UnaryFunctor",
    "BinaryFunctor",
    "Constant",
    "Identity",
    "Scale",
    "InvScale",
    "Sqrt",
    "Add",
    "Sub",
    "Product",
    "Division",
    "ScaledAdd",
]
