"""Tests for the OptimizerConfig builder and build_optimizer()."""

from __future__ import annotations

import json

import pytest

from esopt.engine.config import OptimizerConfig, OptimizerConfigData, build_optimizer
from esopt.engine.distributions import CMA, CSA, SepCMA
from esopt.foundation.exceptions import (
    BackendNotAvailableError,
    InvalidDistributionError,
    InvalidPopulationError,
    InvalidWeightsError,
    MissingConfigError,
)
from esopt.foundation.problem import Sphere


class TestOptimizerConfig:
    def test_defaults(self):
        cfg = OptimizerConfig().distribution("cma").fixed()
        assert cfg == OptimizerConfigData(distribution="cma")
        assert cfg.sigma_init == 1.0
        assert cfg.sigma_stop == 1e-12
        assert cfg.mu is None and cfg.lam is None
        assert cfg.weights == "log"
        assert cfg.kernel == "numpy"
        assert cfg.max_evaluations == 0
        assert cfg.max_retries == 32

    def test_chained_setters(self):
        cfg = (
            OptimizerConfig()
            .distribution("sep_cma")
            .sigma(0.3, 1e-8)
            .mu_lambda(3, 12)
            .weights("linear")
            .maximize()
            .kernel("numpy")
            .max_evaluations(500)
            .max_retries(4)
            .fixed()
        )
        assert cfg.distribution == "sep-cma"
        assert (cfg.sigma_init, cfg.sigma_stop) == (0.3, 1e-8)
        assert (cfg.mu, cfg.lam) == (3, 12)
        assert cfg.weights == "linear"
        assert cfg.maximize is True
        assert cfg.max_evaluations == 500
        assert cfg.max_retries == 4

    def test_missing_distribution(self):
        with pytest.raises(MissingConfigError, match="distribution"):
            OptimizerConfig().sigma(0.5).fixed()

    def test_unknown_distribution(self):
        with pytest.raises(InvalidDistributionError):
            OptimizerConfig().distribution("nes").fixed()

    def test_unknown_weights(self):
        with pytest.raises(InvalidWeightsError):
            OptimizerConfig().distribution("cma").weights("cubic").fixed()

    def test_mu_without_lambda(self):
        with pytest.raises(InvalidPopulationError):
            OptimizerConfigData.from_dict({"distribution": "cma", "mu": 3})

    def test_roundtrip(self):
        cfg = OptimizerConfig().distribution("csa").sigma(2.0).mu_lambda(2, 6).max_evaluations(100).fixed()
        d = cfg.to_dict()
        assert isinstance(d, dict)
        assert OptimizerConfigData.from_dict(d) == cfg
        assert json.loads(cfg.to_json()) == d

    def test_frozen(self):
        cfg = OptimizerConfig().distribution("cma").fixed()
        with pytest.raises(AttributeError):
            cfg.sigma_init = 2.0  # type: ignore[misc]


class TestBuildOptimizer:
    @pytest.mark.parametrize("name, cls", [("csa", CSA), ("sep-cma", SepCMA), ("cma", CMA)])
    def test_distribution_type(self, name, cls):
        cfg = OptimizerConfig().distribution(name).sigma(0.5, 1e-6).fixed()
        optimizer = build_optimizer(cfg, Sphere(4))
        distribution = optimizer.strategy.distribution
        assert isinstance(distribution, cls)
        assert distribution.sigma_init == 0.5
        assert distribution.sigma_stop == 1e-6

    def test_strategy_settings(self):
        cfg = (
            OptimizerConfig()
            .distribution("cma")
            .mu_lambda(2, 10)
            .maximize()
            .max_evaluations(40)
            .max_retries(5)
            .fixed()
        )
        optimizer = build_optimizer(cfg, Sphere(3))
        assert (optimizer.strategy.mu, optimizer.strategy.lam) == (2, 10)
        assert optimizer.strategy.maximize
        assert optimizer.max_evaluations == 40
        assert optimizer.max_retries == 5
        result = optimizer.run(seed=0)
        assert result.n_evaluations == 40

    def test_invalid_population_raised_at_build(self):
        cfg = OptimizerConfig().distribution("csa").mu_lambda(5, 3).fixed()
        with pytest.raises(InvalidPopulationError):
            build_optimizer(cfg, Sphere(3))

    def test_unknown_kernel(self):
        cfg = OptimizerConfig().distribution("cma").kernel("cuda").fixed()
        with pytest.raises(ValueError, match="Unknown kernel"):
            build_optimizer(cfg, Sphere(3))

    def test_missing_numba_kernel(self, monkeypatch):
        def fake_import(name, *args, **kwargs):
            raise ImportError("forced-missing-numba")

        monkeypatch.setattr("esopt.foundation.kernel.registry.import_module", fake_import)
        cfg = OptimizerConfig().distribution("cma").kernel("numba").fixed()
        with pytest.raises(BackendNotAvailableError):
            build_optimizer(cfg, Sphere(3))

    def test_kernel_ignored_without_cma(self):
        cfg = OptimizerConfig().distribution("csa").kernel("cuda").fixed()
        assert isinstance(build_optimizer(cfg, Sphere(2)).strategy.distribution, CSA)
