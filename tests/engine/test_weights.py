import math

import numpy as np
import pytest

from esopt.engine.strategy import Strategy
from esopt.engine.weights import (
    equal_weights,
    linear_weights,
    log_weights,
    normalized_weights,
    resolve_weights,
)
from esopt.foundation.exceptions import InvalidWeightsError


@pytest.mark.parametrize("name", ["equal", "linear", "log"])
@pytest.mark.parametrize("mu", [1, 3, 10])
def test_normalized_weights_sum_to_one(name, mu):
    w = normalized_weights(resolve_weights(name), mu)
    assert w.shape == (mu,)
    assert w.sum() == pytest.approx(1.0)
    assert np.all(w > 0)


def test_raw_generators():
    np.testing.assert_array_equal(equal_weights(4), [1.0, 1.0, 1.0, 1.0])
    np.testing.assert_array_equal(linear_weights(3), [3.0, 2.0, 1.0])
    expected = [math.log(3.5) - math.log(i) for i in (1, 2, 3)]
    np.testing.assert_allclose(log_weights(3), expected)


def test_linear_normalization():
    np.testing.assert_allclose(normalized_weights(linear_weights, 3), [0.5, 1.0 / 3.0, 1.0 / 6.0])


def test_log_weights_decrease_with_rank():
    w = normalized_weights(log_weights, 6)
    assert np.all(np.diff(w) < 0)


def test_custom_callable_accepted():
    generator = resolve_weights(lambda mu: np.arange(mu, 0, -1) ** 2)
    np.testing.assert_allclose(normalized_weights(generator, 2), [0.8, 0.2])


def test_unknown_generator_name():
    with pytest.raises(InvalidWeightsError, match="superlinear"):
        resolve_weights("superlinear")


@pytest.mark.parametrize(
    "generator",
    [lambda mu: np.ones(mu + 1), lambda mu: -np.ones(mu), lambda mu: np.zeros(mu), lambda mu: np.full(mu, np.nan)],
)
def test_invalid_generator_output(generator):
    with pytest.raises(ValueError):
        normalized_weights(generator, 3)


def test_strategy_weights_follow_mu():
    strategy = Strategy(4, weights="equal")
    strategy.set_mu_lambda(2, 8)
    np.testing.assert_allclose(strategy.weights, [0.5, 0.5])
    strategy.set_mu_lambda(4, 8)
    np.testing.assert_allclose(strategy.weights, [0.25] * 4)
