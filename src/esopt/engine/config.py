"""Declarative optimizer configuration."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from esopt.foundation.exceptions import InvalidDistributionError, InvalidPopulationError, MissingConfigError
from esopt.foundation.kernel import DEFAULT_KERNEL
from esopt.foundation.problem.types import Evaluator

from .distributions import DISTRIBUTIONS, available_distributions, resolve_distribution
from .distributions.base import DEFAULT_SIGMA_INIT, DEFAULT_SIGMA_STOP
from .listeners import OptimizerListener
from .optimizer import DEFAULT_MAX_RETRIES, Optimizer
from .strategy import Strategy
from .weights import resolve_weights


class _SerializableConfig:
    """Mixin to serialize dataclass configs."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


def _require_fields(cfg: Dict[str, Any], fields: Tuple[str, ...], name: str) -> None:
    """Validate that required fields are present in configuration."""
    for field_name in fields:
        if field_name not in cfg:
            raise MissingConfigError(field_name, name)


@dataclass(frozen=True)
class OptimizerConfigData(_SerializableConfig):
    distribution: str
    sigma_init: float = DEFAULT_SIGMA_INIT
    sigma_stop: float = DEFAULT_SIGMA_STOP
    mu: Optional[int] = None
    lam: Optional[int] = None
    weights: str = "log"
    maximize: bool = False
    kernel: str = DEFAULT_KERNEL
    max_evaluations: int = 0
    max_retries: int = DEFAULT_MAX_RETRIES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptimizerConfigData":
        builder = OptimizerConfig()
        builder._cfg.update(data)
        return builder.fixed()


class OptimizerConfig:
    """Declarative configuration holder for optimizer settings.

    Example::

        cfg = OptimizerConfig().distribution("cma").sigma(0.5, 1e-10).max_evaluations(20000).fixed()
        result = build_optimizer(cfg, Sphere(10)).run(seed=3)
    """

    def __init__(self) -> None:
        self._cfg: Dict[str, Any] = {}

    def distribution(self, value: str) -> "OptimizerConfig":
        self._cfg["distribution"] = value
        return self

    def sigma(self, sigma_init: float, sigma_stop: float = DEFAULT_SIGMA_STOP) -> "OptimizerConfig":
        self._cfg["sigma_init"] = sigma_init
        self._cfg["sigma_stop"] = sigma_stop
        return self

    def mu_lambda(self, mu: int, lam: int) -> "OptimizerConfig":
        self._cfg["mu"] = mu
        self._cfg["lam"] = lam
        return self

    def weights(self, value: str) -> "OptimizerConfig":
        self._cfg["weights"] = value
        return self

    def maximize(self, enabled: bool = True) -> "OptimizerConfig":
        self._cfg["maximize"] = bool(enabled)
        return self

    def kernel(self, value: str) -> "OptimizerConfig":
        self._cfg["kernel"] = value
        return self

    def max_evaluations(self, value: int) -> "OptimizerConfig":
        self._cfg["max_evaluations"] = value
        return self

    def max_retries(self, value: int) -> "OptimizerConfig":
        self._cfg["max_retries"] = value
        return self

    def fixed(self) -> OptimizerConfigData:
        _require_fields(self._cfg, ("distribution",), "OptimizerConfig")
        mu = self._cfg.get("mu")
        lam = self._cfg.get("lam")
        if (mu is None) != (lam is None):
            raise InvalidPopulationError("mu and lambda must be set together.", mu, lam)
        distribution = str(self._cfg["distribution"]).lower().replace("_", "-")
        if distribution not in DISTRIBUTIONS:
            raise InvalidDistributionError(self._cfg["distribution"], available_distributions())
        weights = self._cfg.get("weights", "log")
        resolve_weights(weights)
        return OptimizerConfigData(
            distribution=distribution,
            sigma_init=float(self._cfg.get("sigma_init", DEFAULT_SIGMA_INIT)),
            sigma_stop=float(self._cfg.get("sigma_stop", DEFAULT_SIGMA_STOP)),
            mu=None if mu is None else int(mu),
            lam=None if lam is None else int(lam),
            weights=weights,
            maximize=bool(self._cfg.get("maximize", False)),
            kernel=self._cfg.get("kernel", DEFAULT_KERNEL),
            max_evaluations=int(self._cfg.get("max_evaluations", 0)),
            max_retries=int(self._cfg.get("max_retries", DEFAULT_MAX_RETRIES)),
        )


def build_optimizer(
    config: OptimizerConfigData,
    evaluator: Evaluator,
    listeners: Iterable[OptimizerListener] = (),
) -> Optimizer:
    """Assemble Strategy, Distribution and Optimizer from a fixed config."""
    kwargs: Dict[str, Any] = {"sigma_init": config.sigma_init, "sigma_stop": config.sigma_stop}
    if config.distribution == "cma":
        kwargs["kernel"] = config.kernel
    distribution = resolve_distribution(config.distribution, **kwargs)

    strategy = Strategy(evaluator.dimension, weights=config.weights, maximize=config.maximize)
    if config.mu is not None and config.lam is not None:
        strategy.set_mu_lambda(config.mu, config.lam)
    strategy.set_distribution(distribution)

    return Optimizer(
        evaluator,
        strategy=strategy,
        max_evaluations=config.max_evaluations,
        max_retries=config.max_retries,
        listeners=listeners,
    )


__all__ = ["OptimizerConfig", "OptimizerConfigData", "build_optimizer"]
