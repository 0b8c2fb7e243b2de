import json
import logging

import numpy as np
import pytest

from esopt.engine.distributions import CMA, CSA, SepCMA
from esopt.engine.listeners import NoOpListener, OptimizerListener, OptimizerLogger
from esopt.engine.optimizer import Optimizer, RunResult
from esopt.engine.strategy import Strategy
from esopt.engine.termination import StopReason
from esopt.foundation.exceptions import ConfigurationError, EvaluationError
from esopt.foundation.problem import Ellipsoid, FitnessFunction, FunctionEvaluator, Sphere


class AlwaysFails(FitnessFunction):
    def fitness(self, x):
        raise EvaluationError(solution=x)


class FailsEveryOtherCall(FitnessFunction):
    def __init__(self, dimension):
        super().__init__(dimension)
        self.calls = 0

    def fitness(self, x):
        self.calls += 1
        if self.calls % 2 == 1:
            raise EvaluationError()
        return float(x @ x)


class RecordingListener:
    def __init__(self):
        self.events = []

    def on_start(self, optimizer):
        self.events.append("start")

    def on_update(self, optimizer):
        self.events.append("update")

    def on_stop(self, optimizer):
        self.events.append("stop")


# ---------------------------------------------------------------------------
# Convergence
# ---------------------------------------------------------------------------


@pytest.mark.slow
@pytest.mark.parametrize("factory", [CSA, SepCMA, CMA])
def test_sphere_converges(factory):
    result = Optimizer(Sphere(10), factory()).run(seed=42)
    assert result.converged
    assert not result.budget_exhausted
    assert result.best_fitness < 1e-10
    assert result.n_evaluations == result.n_updates * default_lambda(10)


@pytest.mark.slow
def test_csa_sphere_stops_on_low_step_size():
    result = Optimizer(Sphere(10), CSA()).run(seed=1)
    assert result.stop_reason is StopReason.LOW_STEP_SIZE
    assert result.best_fitness < 1e-18


@pytest.mark.slow
def test_cma_solves_ellipsoid():
    result = Optimizer(Ellipsoid(5), CMA(sigma_init=2.0)).run(seed=3)
    assert result.converged
    assert result.best_fitness < 1e-8


def test_maximization():
    strategy = Strategy(3, CMA(sigma_init=0.5), maximize=True)
    evaluator = FunctionEvaluator(lambda x: -float(x @ x), 3)
    result = Optimizer(evaluator, strategy=strategy, max_evaluations=3000).run(seed=8)
    assert result.best_fitness <= 0.0
    assert result.best_fitness > -1e-6


def default_lambda(n):
    return Strategy(n).lam


# ---------------------------------------------------------------------------
# Budget & result
# ---------------------------------------------------------------------------


def test_budget_checked_after_each_generation():
    optimizer = Optimizer(Sphere(4), CMA(), max_evaluations=50)
    result = optimizer.run(seed=1)
    lam = optimizer.strategy.lam
    assert lam == 9
    assert result.n_evaluations == 54
    assert result.n_updates == 6
    assert result.budget_exhausted
    assert not result.converged
    assert result.stop_reason is StopReason.NONE


def test_result_matches_best_point():
    optimizer = Optimizer(Sphere(3), SepCMA(), max_evaluations=200)
    result = optimizer.run(seed=2)
    assert isinstance(result, RunResult)
    assert result.best_fitness == pytest.approx(float(result.best_x @ result.best_x))
    assert result.seed == 2 == optimizer.seed


def test_result_to_dict_is_json_ready():
    result = Optimizer(Sphere(2), CSA(), max_evaluations=30).run(seed=4)
    data = json.loads(json.dumps(result.to_dict()))
    assert data["stop_reason"] == "none"
    assert len(data["best_x"]) == 2
    assert data["seed"] == 4
    assert data["budget_exhausted"] is True


def test_seed_drawn_when_omitted():
    optimizer = Optimizer(Sphere(2), CSA(), max_evaluations=10)
    result = optimizer.run()
    assert isinstance(result.seed, int)
    assert result.seed == optimizer.seed


@pytest.mark.parametrize("kwargs", [{"max_evaluations": -1}, {"max_retries": 0}])
def test_invalid_loop_settings(kwargs):
    with pytest.raises(ValueError):
        Optimizer(Sphere(2), CSA(), **kwargs)


def test_dimension_mismatch():
    with pytest.raises(ConfigurationError, match="does not match"):
        Optimizer(Sphere(3), strategy=Strategy(4, CSA()))


# ---------------------------------------------------------------------------
# Failed evaluations
# ---------------------------------------------------------------------------


def test_exhausted_candidates_rank_last(caplog):
    optimizer = Optimizer(AlwaysFails(3), CSA(), max_evaluations=1, max_retries=3)
    with caplog.at_level(logging.WARNING, logger="esopt.engine.optimizer"):
        result = optimizer.run(seed=0)
    lam = optimizer.strategy.lam
    assert result.n_evaluations == 3 * lam
    assert result.n_exhausted == lam
    assert result.best_fitness == np.inf
    assert "could not be evaluated after 3 attempts" in caplog.text


def test_exhausted_candidates_worst_when_maximizing():
    strategy = Strategy(2, CSA(), maximize=True)
    result = Optimizer(AlwaysFails(2), strategy=strategy, max_evaluations=1, max_retries=1).run(seed=0)
    assert result.best_fitness == -np.inf
    assert result.n_exhausted == strategy.lam


def test_failed_evaluation_resampled():
    evaluator = FailsEveryOtherCall(3)
    optimizer = Optimizer(evaluator, CSA(), max_evaluations=1, max_retries=2)
    result = optimizer.run(seed=0)
    lam = optimizer.strategy.lam
    assert result.n_evaluations == 2 * lam == evaluator.calls
    assert result.n_exhausted == 0
    for point in optimizer.strategy.points:
        x = point.x.to_numpy()
        assert point.fitness == pytest.approx(float(x @ x))


def test_other_exceptions_propagate():
    evaluator = FunctionEvaluator(lambda x: 1.0 / 0.0, 2)
    with pytest.raises(ZeroDivisionError):
        Optimizer(evaluator, CSA()).run(seed=0)


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------


def test_listener_events():
    listener = RecordingListener()
    assert isinstance(listener, OptimizerListener)
    optimizer = Optimizer(Sphere(2), CSA(), max_evaluations=25, listeners=[listener, NoOpListener()])
    result = optimizer.run(seed=5)
    assert listener.events[0] == "start"
    assert listener.events[-1] == "stop"
    assert listener.events.count("update") == result.n_updates


def test_remove_listener():
    listener = RecordingListener()
    optimizer = Optimizer(Sphere(2), CSA(), max_evaluations=10)
    optimizer.add_listener(listener)
    optimizer.remove_listener(listener)
    optimizer.run(seed=0)
    assert listener.events == []


def test_optimizer_logger_lines(caplog):
    optimizer = Optimizer(Sphere(4), CSA(), max_evaluations=18, listeners=[OptimizerLogger()])
    with caplog.at_level(logging.INFO, logger="esopt.run"):
        optimizer.run(seed=7)
    messages = [record.getMessage() for record in caplog.records if record.name == "esopt.run"]
    assert messages[0] == "# N=4 mu=4 lambda=9 seed=7"
    assert messages[1].startswith("9 ")
    assert messages[2].startswith("18 ")
    assert messages[-1] == "# stopping criteria=none"
    assert len(messages) == 4
