"""Strided dense vectors over a shared coefficient buffer.

A :class:`Vector` is a lightweight ``(data, offset, stride, size)`` descriptor:
coefficient ``i`` lives at ``data[offset + i * stride]``. Vectors never own
their buffer; several vectors (and matrices) may alias the same ``data`` and
every write through one view is visible through the others. This is what lets
a population matrix hand out its columns as candidate points without copying.

Performance-sensitive: operators run on a numpy view of the coefficients.
Stride 1 maps to a plain contiguous slice, other strides to a strided slice;
both paths compute the same values.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

import numpy as np

from . import functors as fn
from . import reductions as red

if TYPE_CHECKING:
    from .matrix import Matrix
    from .sequences import Sequence


def _check_buffer(data: np.ndarray) -> np.ndarray:
    if not isinstance(data, np.ndarray) or data.ndim != 1 or data.dtype != np.float64:
        raise TypeError("Coefficient buffers must be 1-D float64 numpy arrays.")
    if not data.flags.c_contiguous:
        raise ValueError("Coefficient buffers must be contiguous.")
    return data


class Vector:
    """A dense vector of float64 coefficients, viewed through (offset, stride).

    Parameters
    ----------
    data : np.ndarray
        Shared 1-D float64 buffer holding the coefficients.
    size : int, optional
        Number of coefficients; defaults to the whole buffer.
    offset : int
        Index of the first coefficient in ``data``.
    stride : int
        Distance in ``data`` between two consecutive coefficients.

    Examples
    --------
    >>> buf = np.arange(6, dtype=float)
    >>> odd = Vector(buf, size=3, offset=1, stride=2)
    >>> odd.scale(10.0)
    Vector([10.0, 30.0, 50.0])
    >>> float(buf[1])
    10.0
    """

    __slots__ = ("data", "size", "offset", "stride")

    def __init__(self, data: np.ndarray, size: int | None = None, offset: int = 0, stride: int = 1) -> None:
        data = _check_buffer(data)
        if size is None:
            size = (data.size - offset + stride - 1) // stride if stride > 0 else 0
        if stride < 1:
            raise ValueError(f"Vector stride must be >= 1, got {stride}.")
        if size < 0 or offset < 0:
            raise ValueError("Vector size and offset must be non-negative.")
        if size > 0 and offset + (size - 1) * stride >= data.size:
            raise ValueError(
                f"Vector view (size={size}, offset={offset}, stride={stride}) exceeds a buffer of {data.size} coefficients."
            )
        self.data = data
        self.size = int(size)
        self.offset = int(offset)
        self.stride = int(stride)

    # -------- Instance creation helpers --------

    @classmethod
    def zeros(cls, size: int) -> "Vector":
        return cls(np.zeros(size, dtype=np.float64))

    @classmethod
    def ones(cls, size: int) -> "Vector":
        return cls(np.ones(size, dtype=np.float64))

    @classmethod
    def from_values(cls, *values: float) -> "Vector":
        return cls(np.array(values, dtype=np.float64))

    @classmethod
    def from_array(cls, values: Iterable[float] | np.ndarray) -> "Vector":
        """Copy ``values`` into a freshly allocated contiguous vector."""
        return cls(np.array(values, dtype=np.float64).reshape(-1))

    @classmethod
    def from_sequence(cls, sequence: "Sequence") -> "Vector":
        return cls(np.fromiter(iter(sequence), dtype=np.float64, count=len(sequence)))

    # -------- Accessors --------

    @property
    def values(self) -> np.ndarray:
        """Writable numpy view of the coefficients (no copy)."""
        return self._view()

    def _view(self) -> np.ndarray:
        start = self.offset
        if self.stride == 1:
            return self.data[start : start + self.size]
        if self.size == 0:
            return self.data[start:start]
        stop = start + (self.size - 1) * self.stride + 1
        return self.data[start : stop : self.stride]

    def _index(self, i: int) -> int:
        if i < 0:
            i += self.size
        if not 0 <= i < self.size:
            raise IndexError(f"Index {i} out of range for a vector of size {self.size}.")
        return self.offset + i * self.stride

    def get(self, i: int) -> float:
        return float(self.data[self._index(i)])

    def set(self, i: int, value: float) -> "Vector":
        self.data[self._index(i)] = value
        return self

    def inc(self, i: int, value: float) -> "Vector":
        self.data[self._index(i)] += value
        return self

    def dec(self, i: int, value: float) -> "Vector":
        self.data[self._index(i)] -= value
        return self

    @property
    def front(self) -> float:
        return self.get(0)

    @property
    def back(self) -> float:
        return self.get(self.size - 1)

    def to_numpy(self) -> np.ndarray:
        """Return an owned copy of the coefficients."""
        return self._view().copy()

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, i: int) -> float:
        return self.get(i)

    def __setitem__(self, i: int, value: float) -> None:
        self.set(i, value)

    def __iter__(self) -> Iterator[float]:
        return iter(self._view().tolist())

    # -------- Slices & views --------

    def slice(self, start: int, end: int | None = None) -> "Vector":
        """View of coefficients ``start`` (included) to ``end`` (excluded)."""
        if end is None:
            end = self.size
        if not 0 <= start <= end <= self.size:
            raise IndexError(f"Invalid slice [{start}, {end}) of a vector of size {self.size}.")
        return Vector(self.data, end - start, self.offset + start * self.stride, self.stride)

    def shares_buffer(self, other: "Vector | Matrix") -> bool:
        return self.data is other.data

    # -------- Filling --------

    def fill(self, value: float) -> "Vector":
        self._view()[...] = value
        return self

    def fill_from_values(self, values: Iterable[float] | np.ndarray) -> "Vector":
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.size != self.size:
            raise ValueError(f"Expected {self.size} values, got {arr.size}.")
        self._view()[...] = arr
        return self

    def fill_randn(self, rng: np.random.Generator) -> "Vector":
        """Fill with standard normal deviates, one per coefficient in order."""
        self._view()[...] = rng.standard_normal(self.size)
        return self

    # -------- Dot products --------

    def dot(self, other: "Vector | Matrix", out: "Vector | None" = None) -> "float | Vector":
        """Scalar product with a vector, or ``v^T M`` with a matrix.

        The matrix product is written into ``out`` (allocated when omitted)
        and returned.
        """
        if isinstance(other, Vector):
            return float(np.add.reduce(self._view() * self._operand(other)))
        if out is None:
            out = Vector.zeros(other.cols)
        out._view()[...] = self._view() @ other._view()
        return out

    # -------- Broadcasting --------

    def _operand(self, other: "Vector") -> np.ndarray:
        if other.size != self.size:
            raise ValueError(f"Operand has size {other.size}, expected {self.size}.")
        return other._view()

    def broadcast(self, func: fn.UnaryFunctor | fn.BinaryFunctor, other: "Vector | None" = None) -> "Vector":
        """Apply ``func`` in place, elementwise, optionally against ``other``."""
        view = self._view()
        if other is None:
            view[...] = func(view)  # type: ignore[call-arg]
        else:
            view[...] = func(view, self._operand(other))  # type: ignore[call-arg]
        return self

    def scale(self, value: float) -> "Vector":
        return self.broadcast(fn.Scale(value))

    def inv_scale(self, value: float) -> "Vector":
        return self.broadcast(fn.InvScale(value))

    def add(self, other: "Vector") -> "Vector":
        return self.broadcast(fn.Add(), other)

    def sub(self, other: "Vector") -> "Vector":
        return self.broadcast(fn.Sub(), other)

    def convolve(self, other: "Vector") -> "Vector":
        """Elementwise product with ``other``."""
        return self.broadcast(fn.Product(), other)

    def scaled_add(self, value: float, other: "Vector") -> "Vector":
        return self.broadcast(fn.ScaledAdd(value), other)

    # -------- Broadcasted copies --------

    def broadcasted_copy(self, func: fn.UnaryFunctor, other: "Vector") -> "Vector":
        self._view()[...] = func(self._operand(other))
        return self

    def copy(self, other: "Vector") -> "Vector":
        """Copy the coefficients of ``other`` into this view.

        Contiguous, non-overlapping views are copied as one block; any other
        layout goes through numpy assignment, which buffers overlapping
        operands.
        """
        if other.size != self.size:
            raise ValueError(f"Cannot copy a vector of size {other.size} into one of size {self.size}.")
        if self.stride == 1 and other.stride == 1 and not np.shares_memory(self._view(), other._view()):
            np.copyto(self._view(), other._view())
        else:
            self._view()[...] = other._view()
        return self

    def scaled_copy(self, value: float, other: "Vector") -> "Vector":
        return self.broadcasted_copy(fn.Scale(value), other)

    def inv_scaled_copy(self, value: float, other: "Vector") -> "Vector":
        return self.broadcasted_copy(fn.InvScale(value), other)

    # -------- Reductions --------

    def reduce(self, reduction: red.Reduction) -> float:
        return reduction.fold(self._view())

    def sum(self) -> float:
        return self.reduce(red.Sum())

    def product(self) -> float:
        return self.reduce(red.Product())

    def square_sum(self) -> float:
        return self.reduce(red.SquareSum())

    def abs_sum(self) -> float:
        return self.reduce(red.AbsSum())

    def min(self) -> float:
        return self.reduce(red.Min())

    def max(self) -> float:
        return self.reduce(red.Max())

    # -------- Python object protocol --------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._view(), other._view()))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Vector({self._view().tolist()})"


__all__ = ["Vector"]
