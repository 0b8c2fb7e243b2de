# kernel/numba_backend.py
import numpy as np
from typing import Iterable

from .backend import MAX_QL_SWEEPS, KernelBackend, check_symmetric_input, raise_not_converged
from .numba_ops import tql2_numba, tred2_numba


class NumbaKernel(KernelBackend):
    """Scalar tred2/tql2 loops compiled with numba (requires the [compute] extra)."""

    name = "numba"

    def capabilities(self) -> Iterable[str]:
        return ("jit",)

    def symmetric_eigen(self, C: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        V = check_symmetric_input(C)
        n = V.shape[0]
        d = np.zeros(n)
        e = np.zeros(n)
        if n == 0:
            return d, V
        tred2_numba(V, d, e)
        failed = tql2_numba(V, d, e, MAX_QL_SWEEPS)
        if failed >= 0:
            raise_not_converged(int(failed))
        return d, V
