"""Associative reductions over vector coefficients.

A reduction is defined as a fold: the accumulator starts from ``init`` of the
first coefficient and ``accumulate`` folds in the remaining ones in traversal
order. ``fold`` is the vectorized evaluation used by Vector and Matrix; it
always reduces a contiguous array so that a strided view and a contiguous copy
of the same data give the same result.
"""

from __future__ import annotations

import numpy as np


class Reduction:
    """Base reduction; subclasses override ``fold`` with a numpy ufunc."""

    def init(self, value: float) -> float:
        return value

    def accumulate(self, acc: float, value: float) -> float:
        raise NotImplementedError

    def fold(self, values: np.ndarray) -> float:
        if values.size == 0:
            raise ValueError(f"{type(self).__name__} of an empty vector is undefined.")
        acc = self.init(float(values[0]))
        for value in values[1:]:
            acc = self.accumulate(acc, float(value))
        return acc


def _contiguous(values: np.ndarray) -> np.ndarray:
    if values.size == 0:
        raise ValueError("Reduction of an empty vector is undefined.")
    return np.ascontiguousarray(values)


class Sum(Reduction):
    def accumulate(self, acc: float, value: float) -> float:
        return acc + value

    def fold(self, values: np.ndarray) -> float:
        return float(np.add.reduce(_contiguous(values)))


class SquareSum(Reduction):
    def init(self, value: float) -> float:
        return value * value

    def accumulate(self, acc: float, value: float) -> float:
        return acc + value * value

    def fold(self, values: np.ndarray) -> float:
        values = _contiguous(values)
        return float(np.add.reduce(values * values))


class AbsSum(Reduction):
    def init(self, value: float) -> float:
        return abs(value)

    def accumulate(self, acc: float, value: float) -> float:
        return acc + abs(value)

    def fold(self, values: np.ndarray) -> float:
        return float(np.add.reduce(np.abs(_contiguous(values))))


class Min(Reduction):
    def accumulate(self, acc: float, value: float) -> float:
        return min(acc, value)

    def fold(self, values: np.ndarray) -> float:
        return float(np.minimum.reduce(_contiguous(values)))


class Max(Reduction):
    def accumulate(self, acc: float, value: float) -> float:
        return max(acc, value)

    def fold(self, values: np.ndarray) -> float:
        return float(np.maximum.reduce(_contiguous(values)))


class Product(Reduction):
    def accumulate(self, acc: float, value: float) -> float:
        return acc * value

    def fold(self, values: np.ndarray) -> float:
        return float(np.multiply.reduce(_contiguous(values)))


__all__ = ["Reduction", "Sum", "SquareSum", "AbsSum", "Min", "Max", "Product"]
