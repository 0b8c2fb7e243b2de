"""
Learning rates of the adaptive distributions (Hansen's CMA-ES defaults).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class CMAConstants:
    n: int
    mu_eff: float
    c_sigma: float
    d_sigma: float
    cc: float
    c1: float
    c_mu: float
    chi_n: float

    @classmethod
    def compute(cls, n: int, weights: np.ndarray, separable: bool = False) -> "CMAConstants":
        """Constants for dimension ``n`` and normalized mean ``weights``.

        ``separable`` raises the covariance learning rates by ``(n + 1.5) / 3``
        for a diagonal covariance model.
        """
        w = np.asarray(weights, dtype=np.float64)
        mu_eff = 1.0 / float(np.sum(w * w))
        N = float(n)

        chi_n = math.sqrt(N) * (1.0 - 1.0 / (4.0 * N) + 1.0 / (21.0 * N * N))
        c_sigma = (mu_eff + 2.0) / (mu_eff + N + 5.0)
        d_sigma = 1.0 + 2.0 * max(0.0, math.sqrt((mu_eff - 1.0) / (N + 1.0)) - 1.0) + c_sigma
        cc = (4.0 + mu_eff / N) / (N + 4.0 + 2.0 * mu_eff / N)
        c1 = 2.0 / ((N + 1.3) ** 2 + mu_eff)
        c_mu = min(1.0 - c1, 2.0 * (mu_eff - 2.0 + 1.0 / mu_eff) / ((N + 2.0) ** 2 + mu_eff))
        if separable:
            k = (N + 1.5) / 3.0
            c1 = min(1.0, k * c1)
            c_mu = min(1.0 - c1, k * c_mu)

        return cls(n=n, mu_eff=mu_eff, c_sigma=c_sigma, d_sigma=d_sigma, cc=cc, c1=c1, c_mu=c_mu, chi_n=chi_n)

    def h_sigma(self, ps_norm: float, generation: int) -> bool:
        """False when the step-size path is too long to trust the rank-one update."""
        correction = math.sqrt(1.0 - (1.0 - self.c_sigma) ** (2.0 * (generation + 1)))
        return ps_norm / correction / self.chi_n < 1.4 + 2.0 / (self.n + 1.0)

    def sigma_factor(self, ps_norm: float) -> float:
        return math.exp((self.c_sigma / self.d_sigma) * (ps_norm / self.chi_n - 1.0))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["CMAConstants"]
