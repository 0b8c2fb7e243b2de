"""Column-major strided matrices and their row-wise / column-wise proxies.

A :class:`Matrix` views ``rows x cols`` coefficients of a shared buffer;
element ``(i, j)`` lives at ``data[offset + i + j * pitch]``. Columns are
stride-1 vectors, rows are vectors of stride ``pitch`` and the diagonal is a
vector of stride ``pitch + 1``, all aliasing the matrix buffer.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from numpy.lib.stride_tricks import as_strided

from . import functors as fn
from . import reductions as red
from .vector import Vector, _check_buffer


class Matrix:
    """A dense column-major matrix of float64 coefficients.

    Parameters
    ----------
    data : np.ndarray
        Shared 1-D float64 buffer holding the coefficients.
    rows, cols : int
        Shape of the matrix.
    offset : int
        Index of element ``(0, 0)`` in ``data``.
    pitch : int, optional
        Distance in ``data`` between two consecutive columns; defaults to
        ``rows`` (densely packed columns).
    """

    __slots__ = ("data", "rows", "cols", "offset", "pitch")

    def __init__(self, data: np.ndarray, rows: int, cols: int, offset: int = 0, pitch: int | None = None) -> None:
        data = _check_buffer(data)
        if pitch is None:
            pitch = rows
        if rows < 0 or cols < 0 or offset < 0:
            raise ValueError("Matrix shape and offset must be non-negative.")
        if pitch < rows:
            raise ValueError(f"Matrix pitch ({pitch}) must be >= rows ({rows}).")
        if rows > 0 and cols > 0 and offset + (rows - 1) + (cols - 1) * pitch >= data.size:
            raise ValueError(
                f"Matrix view ({rows}x{cols}, offset={offset}, pitch={pitch}) exceeds a buffer of {data.size} coefficients."
            )
        self.data = data
        self.rows = int(rows)
        self.cols = int(cols)
        self.offset = int(offset)
        self.pitch = int(pitch)

    # -------- Instance creation helpers --------

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        return cls(np.zeros(rows * cols, dtype=np.float64), rows, cols)

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        m = cls.zeros(n, n)
        m.diagonal().fill(1.0)
        return m

    @classmethod
    def from_array(cls, values: Iterable[Iterable[float]] | np.ndarray) -> "Matrix":
        """Copy a 2-D array into a freshly allocated column-major matrix."""
        arr = np.asarray(values, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"Expected a 2-D array, got {arr.ndim} dimension(s).")
        rows, cols = arr.shape
        return cls(np.asfortranarray(arr).reshape(-1, order="F").copy(), rows, cols)

    # -------- Accessors --------

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def values(self) -> np.ndarray:
        """Writable numpy ``(rows, cols)`` view of the coefficients (no copy)."""
        return self._view()

    def _view(self) -> np.ndarray:
        if self.rows == 0 or self.cols == 0:
            return np.zeros((self.rows, self.cols))
        start = self.offset
        if self.pitch == self.rows:
            block = self.data[start : start + self.rows * self.cols]
            return block.reshape(self.cols, self.rows).T
        itemsize = self.data.itemsize
        return as_strided(
            self.data[start:],
            shape=(self.rows, self.cols),
            strides=(itemsize, self.pitch * itemsize),
            writeable=True,
        )

    def _index(self, i: int, j: int) -> int:
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(f"Index ({i}, {j}) out of range for a {self.rows}x{self.cols} matrix.")
        return self.offset + i + j * self.pitch

    def get(self, i: int, j: int) -> float:
        return float(self.data[self._index(i, j)])

    def set(self, i: int, j: int, value: float) -> "Matrix":
        self.data[self._index(i, j)] = value
        return self

    def to_numpy(self) -> np.ndarray:
        """Return an owned copy of the coefficients."""
        return self._view().copy()

    # -------- Views --------

    def col(self, j: int) -> Vector:
        if not 0 <= j < self.cols:
            raise IndexError(f"Column {j} out of range for a matrix with {self.cols} columns.")
        return Vector(self.data, self.rows, self.offset + j * self.pitch, 1)

    def row(self, i: int) -> Vector:
        if not 0 <= i < self.rows:
            raise IndexError(f"Row {i} out of range for a matrix with {self.rows} rows.")
        return Vector(self.data, self.cols, self.offset + i, self.pitch)

    def diagonal(self) -> Vector:
        return Vector(self.data, min(self.rows, self.cols), self.offset, self.pitch + 1)

    def row_wise(self) -> "RowWiseMatrixProxy":
        return RowWiseMatrixProxy(self)

    def col_wise(self) -> "ColWiseMatrixProxy":
        return ColWiseMatrixProxy(self)

    # -------- Filling --------

    def fill(self, value: float) -> "Matrix":
        self._view()[...] = value
        return self

    def fill_randn(self, rng: np.random.Generator) -> "Matrix":
        """Fill with standard normal deviates drawn in column-major order."""
        self._view()[...] = rng.standard_normal((self.cols, self.rows)).T
        return self

    # -------- Broadcasting --------

    def broadcast(self, func: fn.UnaryFunctor | fn.BinaryFunctor, other: "Matrix | None" = None) -> "Matrix":
        view = self._view()
        if other is None:
            view[...] = func(view)  # type: ignore[call-arg]
        else:
            view[...] = func(view, other._view())  # type: ignore[call-arg]
        return self

    def scale(self, value: float) -> "Matrix":
        return self.broadcast(fn.Scale(value))

    def inv_scale(self, value: float) -> "Matrix":
        return self.broadcast(fn.InvScale(value))

    def add(self, other: "Matrix") -> "Matrix":
        return self.broadcast(fn.Add(), other)

    def sub(self, other: "Matrix") -> "Matrix":
        return self.broadcast(fn.Sub(), other)

    def scaled_add(self, value: float, other: "Matrix") -> "Matrix":
        return self.broadcast(fn.ScaledAdd(value), other)

    def scaled_add_cross(self, value: float, vector: Vector) -> "Matrix":
        """``M += value * v v^T``."""
        v = vector._view()
        view = self._view()
        view += value * np.outer(v, v)
        return self

    # -------- Copies --------

    def copy(self, other: "Matrix") -> "Matrix":
        if other.shape != self.shape:
            raise ValueError(f"Cannot copy a {other.rows}x{other.cols} matrix into a {self.rows}x{self.cols} one.")
        self._view()[...] = other._view()
        return self

    def broadcasted_copy(self, func: fn.UnaryFunctor, other: "Matrix") -> "Matrix":
        self._view()[...] = func(other._view())
        return self

    def scaled_copy(self, value: float, other: "Matrix") -> "Matrix":
        return self.broadcasted_copy(fn.Scale(value), other)

    # -------- Products --------

    def dot(self, other: "Vector | Matrix", out: "Vector | Matrix | None" = None) -> "Vector | Matrix":
        """Matrix-vector or matrix-matrix product written into ``out``.

        ``out`` may alias either operand: the product is computed before it is
        stored.
        """
        product = self._view() @ other._view()
        if out is None:
            if isinstance(other, Vector):
                out = Vector.zeros(self.rows)
            else:
                out = Matrix.zeros(self.rows, other.cols)
        out._view()[...] = product
        return out

    # -------- Python object protocol --------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._view(), other._view()))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix({self._view().tolist()})"


class _AxisProxy:
    """Redirects vector operators to every line (row or column) of a matrix."""

    __slots__ = ("_matrix",)

    def __init__(self, matrix: Matrix) -> None:
        self._matrix = matrix

    @property
    def matrix(self) -> Matrix:
        return self._matrix

    def _n_lines(self) -> int:
        raise NotImplementedError

    def _line(self, k: int) -> Vector:
        raise NotImplementedError

    def _line_length(self) -> int:
        raise NotImplementedError

    def _along_lines(self, values: np.ndarray) -> np.ndarray:
        """Reshape a line-length vector so it broadcasts onto every line."""
        raise NotImplementedError

    def _across_lines(self, values: np.ndarray) -> np.ndarray:
        """Reshape one value per line so it broadcasts within each line."""
        raise NotImplementedError

    def _operand(self, vector: Vector) -> np.ndarray:
        if vector.size != self._line_length():
            raise ValueError(
                f"{type(self).__name__} operand has size {vector.size}, expected {self._line_length()}."
            )
        return self._along_lines(vector._view())

    # -------- Filling & copies --------

    def fill(self, value: float) -> Matrix:
        return self._matrix.fill(value)

    def fill_from_values(self, values: Iterable[float] | np.ndarray) -> Matrix:
        """Fill line ``k`` with the constant ``values[k]``."""
        arr = np.asarray(values, dtype=np.float64)[: self._n_lines()]
        self._matrix._view()[...] = self._across_lines(arr)
        return self._matrix

    def fill_randn(self, rng: np.random.Generator) -> Matrix:
        return self._matrix.fill_randn(rng)

    def copy(self, vector: Vector) -> Matrix:
        """Set every line to ``vector``."""
        self._matrix._view()[...] = self._operand(vector)
        return self._matrix

    def scaled_copy(self, value: float, vector: Vector) -> Matrix:
        return self.copy(vector).scale(value)

    # -------- Broadcasting --------

    def broadcast(self, func: fn.BinaryFunctor, vector: Vector) -> Matrix:
        view = self._matrix._view()
        view[...] = func(view, self._operand(vector))
        return self._matrix

    def scale(self, value: "float | Vector") -> Matrix:
        if isinstance(value, Vector):
            return self.broadcast(fn.Product(), value)
        return self._matrix.scale(value)

    def inv_scale(self, value: "float | Vector") -> Matrix:
        if isinstance(value, Vector):
            return self.broadcast(fn.Division(), value)
        return self._matrix.inv_scale(value)

    def add(self, vector: Vector) -> Matrix:
        return self.broadcast(fn.Add(), vector)

    def sub(self, vector: Vector) -> Matrix:
        return self.broadcast(fn.Sub(), vector)

    def scaled_add(self, value: float, vector: Vector) -> Matrix:
        return self.broadcast(fn.ScaledAdd(value), vector)

    # -------- Reductions --------

    def reduce(self, reduction: red.Reduction, out: Vector | None = None) -> Vector:
        """One reduction result per line, written into ``out``."""
        n_lines = self._n_lines()
        if out is None:
            out = Vector.zeros(n_lines)
        for k in range(n_lines):
            out.set(k, self._line(k).reduce(reduction))
        return out

    def sum(self, out: Vector | None = None) -> Vector:
        return self.reduce(red.Sum(), out)

    def square_sum(self, out: Vector | None = None) -> Vector:
        return self.reduce(red.SquareSum(), out)

    def abs_sum(self, out: Vector | None = None) -> Vector:
        return self.reduce(red.AbsSum(), out)

    def min(self, out: Vector | None = None) -> Vector:
        return self.reduce(red.Min(), out)

    def max(self, out: Vector | None = None) -> Vector:
        return self.reduce(red.Max(), out)


class RowWiseMatrixProxy(_AxisProxy):
    """Applies operators to each row: operands have ``cols`` coefficients.

    ``m.row_wise().scale(d)`` multiplies column ``j`` by ``d[j]`` (that is,
    ``M diag(d)``) and ``m.row_wise().sum()`` returns one sum per row.
    """

    __slots__ = ()

    def _n_lines(self) -> int:
        return self._matrix.rows

    def _line(self, k: int) -> Vector:
        return self._matrix.row(k)

    def _line_length(self) -> int:
        return self._matrix.cols

    def _along_lines(self, values: np.ndarray) -> np.ndarray:
        return values[np.newaxis, :]

    def _across_lines(self, values: np.ndarray) -> np.ndarray:
        return values[:, np.newaxis]


class ColWiseMatrixProxy(_AxisProxy):
    """Applies operators to each column: operands have ``rows`` coefficients.

    ``m.col_wise().add(mean)`` translates every column by ``mean`` and
    ``m.col_wise().sum()`` returns one sum per column.
    """

    __slots__ = ()

    def _n_lines(self) -> int:
        return self._matrix.cols

    def _line(self, k: int) -> Vector:
        return self._matrix.col(k)

    def _line_length(self) -> int:
        return self._matrix.rows

    def _along_lines(self, values: np.ndarray) -> np.ndarray:
        return values[:, np.newaxis]

    def _across_lines(self, values: np.ndarray) -> np.ndarray:
        return values[np.newaxis, :]


__all__ = ["Matrix", "RowWiseMatrixProxy", "ColWiseMatrixProxy"]
