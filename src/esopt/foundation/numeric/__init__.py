"""
Dense linear algebra over shared, strided coefficient buffers.
"""

from __future__ import annotations

from . import functors, reductions
from .eigen import EigenSolver
from .matrix import ColWiseMatrixProxy, Matrix, RowWiseMatrixProxy
from .sequences import LinSpace, Range, Sequence
from .vector import Vector

__all__ = [
    "Vector",
    "Matrix",
    "RowWiseMatrixProxy",
    "ColWiseMatrixProxy",
    "EigenSolver",
    "Sequence",
    "Range",
    "LinSpace",
    "functors",
    "reductions",
]
