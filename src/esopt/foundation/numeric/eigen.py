"""Symmetric eigen-decomposition on Matrix/Vector views."""

from __future__ import annotations

from ..kernel.backend import KernelBackend
from ..kernel.registry import DEFAULT_KERNEL, resolve_kernel
from .matrix import Matrix
from .vector import Vector


class EigenSolver:
    """Writes the eigen factors of a symmetric matrix into caller-owned views.

    ``solve(C, B, D)`` stores the eigenvectors as the columns of ``B`` and the
    (unsorted) eigenvalues in ``D``, so that ``C ~= B diag(D) B^T``. ``C`` is
    left unchanged. ``EigenDecompositionError`` propagates to the caller; ``B``
    and ``D`` are only written after a successful decomposition.
    """

    def __init__(self, kernel: str | KernelBackend = DEFAULT_KERNEL) -> None:
        self.kernel = resolve_kernel(kernel)

    def solve(self, C: Matrix, B: Matrix, D: Vector) -> None:
        n = C.rows
        if C.cols != n or B.shape != (n, n) or D.size != n:
            raise ValueError(f"EigenSolver expects {n}x{n} C and B and a size-{n} D.")
        values, vectors = self.kernel.symmetric_eigen(C.values)
        B.values[...] = vectors
        D.values[...] = values


__all__ = ["EigenSolver"]
