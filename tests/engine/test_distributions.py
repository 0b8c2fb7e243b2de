import numpy as np
import pytest

from esopt.engine.distributions import CMA, CSA, SepCMA, available_distributions, resolve_distribution
from esopt.engine.strategy import Strategy
from esopt.engine.termination import StopReason
from esopt.foundation.exceptions import (
    CovarianceShapeError,
    DistributionStateError,
    EigenDecompositionError,
    InvalidDistributionError,
    InvalidStepSizeError,
)
from esopt.foundation.kernel import KernelBackend


class CountingKernel(KernelBackend):
    name = "counting"

    def __init__(self):
        self.calls = 0

    def symmetric_eigen(self, C):
        self.calls += 1
        return np.linalg.eigh(C)


class FailingKernel(KernelBackend):
    name = "failing"

    def __init__(self):
        self.calls = 0

    def symmetric_eigen(self, C):
        self.calls += 1
        raise EigenDecompositionError("forced failure", index=0)


def started(distribution, n=5, x_init=None, seed=0):
    strategy = Strategy(n, distribution, seed=seed)
    strategy.start(np.zeros(n) if x_init is None else x_init)
    return strategy


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("factory", [CSA, SepCMA, CMA])
def test_start_requires_setup(factory):
    distribution = factory()
    strategy = Strategy(3)
    with pytest.raises(DistributionStateError, match="setup"):
        distribution.start(strategy)


@pytest.mark.parametrize("factory", [CSA, SepCMA, CMA])
def test_sampling_requires_start(factory):
    distribution = factory()
    strategy = Strategy(3, distribution)
    assert not distribution.is_started
    with pytest.raises(DistributionStateError, match="start"):
        distribution.update(strategy)
    with pytest.raises(DistributionStateError, match="start"):
        distribution.stop(strategy)


def test_setup_same_dimension_keeps_state_buffers():
    distribution = SepCMA()
    distribution.setup(4)
    c = distribution.covariance_diagonal
    distribution.setup(4)
    assert distribution.covariance_diagonal is c
    distribution.setup(6)
    assert distribution.n == 6
    assert distribution.covariance_diagonal is not c


@pytest.mark.parametrize("factory", [CSA, SepCMA, CMA])
def test_start_resets_sigma(factory):
    distribution = factory(sigma_init=0.3, sigma_stop=1e-9)
    strategy = started(distribution)
    strategy.sample_cloud()
    for i, point in enumerate(strategy.points):
        point.fitness = float(i)
    strategy.update()
    assert distribution.sigma != 0.3
    strategy.start()
    assert distribution.sigma == 0.3


# ---------------------------------------------------------------------------
# Step-size settings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "sigma_init, sigma_stop",
    [(-1.0, 0.0), (1.0, -1e-3), (1e-3, 1e-2), (float("nan"), 0.0)],
)
def test_invalid_sigma_rejected(sigma_init, sigma_stop):
    with pytest.raises(InvalidStepSizeError):
        CSA(sigma_init=sigma_init, sigma_stop=sigma_stop)


def test_set_sigma_validates_new_values():
    distribution = CMA(sigma_init=1.0, sigma_stop=0.5)
    distribution.set_sigma(0.2, 0.1)
    assert (distribution.sigma_init, distribution.sigma_stop) == (0.2, 0.1)
    with pytest.raises(InvalidStepSizeError):
        distribution.set_sigma(0.1, 0.2)
    assert (distribution.sigma_init, distribution.sigma_stop) == (0.2, 0.1)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


def test_csa_samples_isotropic_cloud():
    distribution = CSA(sigma_init=0.5)
    strategy = started(distribution, n=4, x_init=np.arange(4.0))
    strategy.sample_cloud()
    X = strategy.positions.to_numpy()
    Z = strategy.samples.to_numpy()
    np.testing.assert_allclose(X, np.arange(4.0)[:, np.newaxis] + 0.5 * Z)


def test_sep_cma_scales_each_coordinate():
    distribution = SepCMA(sigma_init=2.0)
    distribution.setup(3)
    distribution.set_covariance(np.diag([4.0, 1.0, 9.0]))
    strategy = started(distribution, n=3)
    np.testing.assert_array_equal(distribution.axis_lengths.to_numpy(), [2.0, 1.0, 3.0])

    strategy.sample_cloud()
    X = strategy.positions.to_numpy()
    Z = strategy.samples.to_numpy()
    np.testing.assert_allclose(X, 2.0 * np.array([[2.0], [1.0], [3.0]]) * Z)


def test_cma_identity_covariance_is_exact():
    distribution = CMA()
    distribution.setup(5)
    distribution.set_covariance(np.eye(5))
    started(distribution, n=5)
    np.testing.assert_array_equal(distribution.B.to_numpy(), np.eye(5))
    np.testing.assert_array_equal(distribution.D.to_numpy(), np.ones(5))


def test_cma_custom_covariance_factorization():
    rng = np.random.default_rng(7)
    A = rng.standard_normal((4, 4))
    C = A @ A.T + 4.0 * np.eye(4)
    distribution = CMA()
    distribution.setup(4)
    distribution.set_covariance(C)
    started(distribution, n=4)

    B = distribution.B.to_numpy()
    D = distribution.D.to_numpy()
    np.testing.assert_allclose(B @ np.diag(D * D) @ B.T, C, atol=1e-10)
    np.testing.assert_allclose(B.T @ B, np.eye(4), atol=1e-12)


def test_cma_sample_point_matches_cloud_transform():
    rng = np.random.default_rng(1)
    A = rng.standard_normal((3, 3))
    distribution = CMA(sigma_init=0.7)
    distribution.setup(3)
    distribution.set_covariance(A @ A.T + np.eye(3))
    strategy = started(distribution, n=3, x_init=[1.0, -1.0, 2.0])

    B = distribution.B.to_numpy()
    D = distribution.D.to_numpy()
    mean = np.array([1.0, -1.0, 2.0])

    strategy.sample_cloud()
    X = strategy.positions.to_numpy()
    Z = strategy.samples.to_numpy()
    np.testing.assert_allclose(X, mean[:, np.newaxis] + 0.7 * (B * D) @ Z, atol=1e-12)

    point = strategy.points[0]
    strategy.sample_point(point)
    np.testing.assert_allclose(point.x.to_numpy(), mean + 0.7 * (B * D) @ point.z.to_numpy(), atol=1e-12)


def test_covariance_shape_checked():
    distribution = CMA()
    distribution.setup(5)
    with pytest.raises(CovarianceShapeError):
        distribution.set_covariance(np.eye(3))
    with pytest.raises(CovarianceShapeError):
        distribution.set_covariance(np.ones((5, 4)))
    with pytest.raises(CovarianceShapeError):
        SepCMA().set_covariance(np.ones(5))


@pytest.mark.parametrize("factory", [SepCMA, CMA])
def test_scalar_covariance_rejected_before_setup(factory):
    with pytest.raises(CovarianceShapeError):
        factory().set_covariance(np.float64(1.0))


def test_custom_covariance_consumed_once():
    distribution = SepCMA()
    distribution.setup(2)
    distribution.set_covariance(np.diag([4.0, 4.0]))
    strategy = started(distribution, n=2)
    np.testing.assert_array_equal(distribution.covariance_diagonal.to_numpy(), [4.0, 4.0])
    strategy.start()
    np.testing.assert_array_equal(distribution.covariance_diagonal.to_numpy(), [1.0, 1.0])


# ---------------------------------------------------------------------------
# Adaptation
# ---------------------------------------------------------------------------


def _update_with_samples(strategy, value):
    strategy.sample_cloud()
    strategy.samples.fill(value)
    for i, point in enumerate(strategy.points):
        point.fitness = float(i)
    strategy.update()


def test_csa_sigma_grows_on_long_path():
    distribution = CSA()
    strategy = started(distribution, n=4)
    _update_with_samples(strategy, 3.0)
    assert distribution.sigma > 1.0
    np.testing.assert_allclose(strategy.z_mean.to_numpy(), np.full(4, 3.0))


def test_csa_sigma_shrinks_on_short_path():
    distribution = CSA()
    strategy = started(distribution, n=4)
    _update_with_samples(strategy, 0.0)
    assert distribution.sigma < 1.0
    np.testing.assert_array_equal(distribution.path.to_numpy(), np.zeros(4))


@pytest.mark.parametrize("factory", [SepCMA, CMA])
def test_covariance_stays_symmetric_positive(factory):
    distribution = factory()
    strategy = started(distribution, n=6, seed=3)
    for _ in range(20):
        strategy.sample_cloud()
        for point in strategy.points:
            x = point.x.to_numpy()
            point.fitness = float(x @ x)
        strategy.update()
    if factory is CMA:
        C = distribution.C.to_numpy()
        np.testing.assert_allclose(C, C.T, atol=1e-14)
        assert np.all(np.linalg.eigvalsh(C) > 0)
    else:
        assert np.all(distribution.covariance_diagonal.to_numpy() > 0)
    assert not strategy.stop()


# ---------------------------------------------------------------------------
# Stop criteria
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("factory", [CSA, SepCMA, CMA])
def test_low_step_size(factory):
    distribution = factory(sigma_init=1e-12, sigma_stop=1e-12)
    strategy = started(distribution, n=3)
    assert strategy.stop()
    assert strategy.stop_reason is StopReason.LOW_STEP_SIZE


def test_sep_cma_no_effect_coordinate():
    strategy = started(SepCMA(), n=3, x_init=np.full(3, 1e20))
    assert strategy.stop()
    assert strategy.stop_reason is StopReason.NO_EFFECT_COORDINATE


def test_cma_no_effect_axis():
    strategy = started(CMA(), n=3, x_init=np.full(3, 1e20))
    assert strategy.stop()
    assert strategy.stop_reason is StopReason.NO_EFFECT_AXIS


def test_cma_no_effect_coordinate_with_rotated_covariance():
    distribution = CMA()
    distribution.setup(3)
    distribution.set_covariance([[2.0, 1.0, 0.0], [1.0, 2.0, 0.0], [0.0, 0.0, 1.0]])
    strategy = started(distribution, n=3, x_init=np.array([1e20, 0.0, 0.0]))
    assert strategy.stop()
    assert strategy.stop_reason is StopReason.NO_EFFECT_COORDINATE


@pytest.mark.parametrize("factory", [SepCMA, CMA])
def test_ill_conditioned(factory):
    distribution = factory()
    distribution.setup(3)
    distribution.set_covariance(np.diag([1e15, 1.0, 1.0]))
    strategy = started(distribution, n=3)
    assert strategy.stop()
    assert strategy.stop_reason is StopReason.ILL_CONDITIONED


def test_eigen_failure_is_latched(caplog):
    kernel = FailingKernel()
    distribution = CMA(kernel=kernel)
    distribution.setup(3)
    distribution.set_covariance(np.eye(3))
    with caplog.at_level("WARNING", logger="esopt.engine.distributions.cma"):
        strategy = started(distribution, n=3)
    assert kernel.calls == 1
    assert "Eigen-decomposition failed" in caplog.text
    np.testing.assert_array_equal(distribution.D.to_numpy(), np.zeros(3))
    assert strategy.stop()
    assert strategy.stop_reason is StopReason.EIGEN_FAILURE


def test_eigen_failure_cleared_on_restart():
    kernel = FailingKernel()
    distribution = CMA(kernel=kernel)
    distribution.setup(3)
    distribution.set_covariance(np.eye(3))
    strategy = started(distribution, n=3)
    assert distribution.stop(strategy) is StopReason.EIGEN_FAILURE
    strategy.start()
    assert distribution.stop(strategy) is StopReason.NONE


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_resolve_distribution():
    assert available_distributions() == ["cma", "csa", "sep-cma"]
    assert isinstance(resolve_distribution("sep_cma"), SepCMA)
    distribution = resolve_distribution("CMA", sigma_init=0.5, kernel="numpy")
    assert isinstance(distribution, CMA)
    assert distribution.sigma_init == 0.5
    assert distribution.kernel.name == "numpy"


def test_resolve_unknown_distribution():
    with pytest.raises(InvalidDistributionError, match="Unknown distribution 'xnes'"):
        resolve_distribution("xnes")


# ---------------------------------------------------------------------------
# Eigen refresh schedule
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("n, period", [(5, 1), (400, 3), (1000, 8)])
def test_cma_eigen_period(n, period):
    distribution = CMA()
    started(distribution, n=n)
    assert distribution.eigen_period == period


def test_cma_refreshes_factors_on_schedule():
    kernel = CountingKernel()
    distribution = CMA(kernel=kernel)
    strategy = started(distribution, n=400, seed=3)
    assert distribution.eigen_period == 3
    assert kernel.calls == 0

    calls = []
    factors = []
    for _ in range(7):
        strategy.sample_cloud()
        for point in strategy.points:
            point.fitness = point.x.square_sum()
        strategy.update()
        calls.append(kernel.calls)
        factors.append((distribution.B.to_numpy(), distribution.D.to_numpy()))

    # Refreshed after updates 0, 3 and 6; B and D frozen in between
    assert calls == [1, 1, 1, 2, 2, 2, 3]
    for held in (1, 2, 4, 5):
        np.testing.assert_array_equal(factors[held][0], factors[held - 1][0])
        np.testing.assert_array_equal(factors[held][1], factors[held - 1][1])
    for refreshed in (3, 6):
        assert not np.array_equal(factors[refreshed][0], factors[refreshed - 1][0])
    assert not strategy.stop()
