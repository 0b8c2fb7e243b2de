from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np

from ..exceptions import EigenDecompositionError

# Maximum number of QL sweeps spent on a single eigenvalue.
MAX_QL_SWEEPS = 30


class KernelBackend(ABC):
    """
    Interface for the numeric kernels used by the adaptive distributions.
    Backends implement the O(N^3) symmetric eigen-decomposition on plain
    numpy arrays; Matrix/Vector views are unwrapped by ``EigenSolver``.
    """

    name: str = "abstract"

    # -------- Computation device / capability metadata --------

    def device(self) -> str:
        """
        Return a short label describing the primary execution device.
        """
        return "cpu"

    def capabilities(self) -> Iterable[str]:
        """
        Optional backend capability tags (e.g., {"jit"}).
        """
        return ()

    # -------- Linear algebra kernels --------

    @abstractmethod
    def symmetric_eigen(self, C: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Eigen-decompose the symmetric matrix ``C`` (left untouched).

        Returns ``(values, vectors)`` with eigenvectors as the columns of
        ``vectors`` so that ``C ~= vectors @ diag(values) @ vectors.T``.
        Eigenvalues are not sorted. Raises EigenDecompositionError on
        non-finite input or when QL iteration does not converge.
        """


def check_symmetric_input(C: np.ndarray) -> np.ndarray:
    """Validate a square matrix for decomposition and return a float64 work copy."""
    A = np.array(C, dtype=np.float64, order="C")
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Eigen-decomposition expects a square matrix, got shape {A.shape}.")
    if not np.all(np.isfinite(A)):
        raise EigenDecompositionError("Matrix contains NaN or infinite coefficients.")
    return A


def raise_not_converged(index: int) -> None:
    raise EigenDecompositionError(
        f"QL iteration did not converge for eigenvalue {index} within {MAX_QL_SWEEPS} sweeps.",
        index=index,
    )


__all__ = ["KernelBackend", "MAX_QL_SWEEPS", "check_symmetric_input", "raise_not_converged"]
