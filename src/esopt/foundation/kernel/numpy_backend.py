"""
NumPy eigen kernel: Householder tridiagonalization followed by QL iteration
with implicit shifts (the EISPACK tred2/tql2 pair).

The scalar reference loops are vectorized row/column-wise; the sweep
structure, the convergence test and the order of the resulting eigenvalues
are the same as in the numba kernel.
"""

from __future__ import annotations

import math

import numpy as np

from .backend import MAX_QL_SWEEPS, KernelBackend, check_symmetric_input, raise_not_converged


def _tred2(V: np.ndarray, d: np.ndarray, e: np.ndarray) -> None:
    """Reduce V (symmetric) to tridiagonal form in place.

    On exit ``d`` holds the diagonal, ``e[1:]`` the sub-diagonal and ``V`` the
    accumulated orthogonal transformation.
    """
    n = V.shape[0]
    d[:] = V[n - 1, :]

    for i in range(n - 1, 0, -1):
        scale = float(np.abs(d[:i]).sum())
        h = 0.0
        if scale == 0.0:
            e[i] = d[i - 1]
            d[:i] = V[i - 1, :i]
            V[i, :i] = 0.0
            V[:i, i] = 0.0
        else:
            d[:i] /= scale
            h = float(d[:i] @ d[:i])
            f = d[i - 1]
            g = math.sqrt(h)
            if f > 0:
                g = -g
            e[i] = scale * g
            h -= f * g
            d[i - 1] = f - g

            # e = A d with A the symmetric matrix stored in the lower triangle
            L = np.tril(V[:i, :i])
            S = L + L.T - np.diag(np.diag(L))
            V[:i, i] = d[:i]
            e[:i] = S @ d[:i]

            e[:i] /= h
            f = float(e[:i] @ d[:i])
            hh = f / (h + h)
            e[:i] -= hh * d[:i]

            V[:i, :i] -= np.tril(np.outer(e[:i], d[:i]) + np.outer(d[:i], e[:i]))
            d[:i] = V[i - 1, :i]
            V[i, :i] = 0.0
        d[i] = h

    # Accumulate transformations.
    for i in range(n - 1):
        V[n - 1, i] = V[i, i]
        V[i, i] = 1.0
        h = d[i + 1]
        if h != 0.0:
            d[: i + 1] = V[: i + 1, i + 1] / h
            g = V[: i + 1, i + 1] @ V[: i + 1, : i + 1]
            V[: i + 1, : i + 1] -= np.outer(d[: i + 1], g)
        V[: i + 1, i + 1] = 0.0

    d[:] = V[n - 1, :]
    V[n - 1, :] = 0.0
    V[n - 1, n - 1] = 1.0
    e[0] = 0.0


def _tql2(V: np.ndarray, d: np.ndarray, e: np.ndarray) -> int:
    """Diagonalize the tridiagonal form; return -1 or the index that diverged."""
    n = V.shape[0]
    e[:-1] = e[1:]
    e[n - 1] = 0.0

    f = 0.0
    tst1 = 0.0
    eps = 2.0**-52
    for l in range(n):
        tst1 = max(tst1, abs(d[l]) + abs(e[l]))
        m = l
        while m < n - 1 and abs(e[m]) > eps * tst1:
            m += 1

        if m > l:
            sweeps = 0
            while True:
                sweeps += 1
                if sweeps > MAX_QL_SWEEPS:
                    return l

                # Implicit shift
                g = d[l]
                p = (d[l + 1] - g) / (2.0 * e[l])
                r = math.hypot(p, 1.0)
                if p < 0:
                    r = -r
                d[l] = e[l] / (p + r)
                d[l + 1] = e[l] * (p + r)
                dl1 = d[l + 1]
                h = g - d[l]
                d[l + 2 :] -= h
                f += h

                p = d[m]
                c = c2 = c3 = 1.0
                el1 = e[l + 1]
                s = s2 = 0.0
                for i in range(m - 1, l - 1, -1):
                    c3 = c2
                    c2 = c
                    s2 = s
                    g = c * e[i]
                    h = c * p
                    r = math.hypot(p, e[i])
                    e[i + 1] = s * r
                    s = e[i] / r
                    c = p / r
                    p = c * d[i] - s * g
                    d[i + 1] = h + s * (c * g + s * d[i])

                    col = V[:, i + 1].copy()
                    V[:, i + 1] = s * V[:, i] + c * col
                    V[:, i] = c * V[:, i] - s * col

                p = -s * s2 * c3 * el1 * e[l] / dl1
                e[l] = s * p
                d[l] = c * p
                if abs(e[l]) <= eps * tst1:
                    break
        d[l] += f
        e[l] = 0.0
    return -1


class NumPyKernel(KernelBackend):
    """Vectorized eigen kernel, always available."""

    name = "numpy"

    def symmetric_eigen(self, C: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        V = check_symmetric_input(C)
        n = V.shape[0]
        d = np.zeros(n)
        e = np.zeros(n)
        if n == 0:
            return d, V
        _tred2(V, d, e)
        failed = _tql2(V, d, e)
        if failed >= 0:
            raise_not_converged(failed)
        return d, V


__all__ = ["NumPyKernel"]
