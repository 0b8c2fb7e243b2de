"""
esopt exception hierarchy.

Every error carries a message, an optional fix-it suggestion and a ``details``
dict for programmatic handling; all of them derive from ESOptError.
Configuration errors are raised as soon as a bad setting is seen, runtime
errors while a run is in progress.

Numerical degeneracy (vanishing step size, ill-conditioned covariance, a
diverging eigen solver) is not reported through exceptions: it surfaces as a
stop reason of the strategy.

Example:
    try:
        result = optimizer.run(seed=1)
    except ESOptError as e:
        print(f"Optimization failed: {e}")
        print(f"Suggestion: {e.suggestion}")
"""

from __future__ import annotations

from typing import Any


class ESOptError(Exception):
    """
    Base exception for all esopt errors.

    Attributes:
        message: What went wrong, without the suggestion
        suggestion: How to fix it, appended to ``str(error)`` when set
        details: Offending values keyed by setting name
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with suggestion."""
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ESOptError):
    """Raised when configuration is invalid or incomplete."""

    pass


class InvalidDimensionError(ConfigurationError):
    """Raised when the search space dimension is not a positive integer."""

    def __init__(self, n: Any) -> None:
        message = f"Search space dimension must be >= 1, got {n!r}."
        suggestion = "Pass the number of decision variables of your problem"
        super().__init__(message, suggestion, {"n": n})


class InvalidPopulationError(ConfigurationError):
    """Raised when mu/lambda do not satisfy 1 <= mu <= lambda."""

    def __init__(self, message: str, mu: int | None = None, lam: int | None = None) -> None:
        suggestion = "Population sizes must satisfy 1 <= mu <= lambda"
        super().__init__(message, suggestion, {"mu": mu, "lambda": lam})


class InvalidStepSizeError(ConfigurationError):
    """Raised when sigma_init/sigma_stop are negative or inconsistent."""

    def __init__(self, message: str, sigma_init: float | None = None, sigma_stop: float | None = None) -> None:
        suggestion = "Step sizes must satisfy 0 <= sigma_stop <= sigma_init"
        super().__init__(message, suggestion, {"sigma_init": sigma_init, "sigma_stop": sigma_stop})


class DistributionNotSetError(ConfigurationError):
    """Raised when a strategy is started without a sampling distribution."""

    def __init__(self) -> None:
        message = "No distribution set on the strategy."
        suggestion = "Call strategy.set_distribution(CMA()) (or CSA()/SepCMA()) before start()"
        super().__init__(message, suggestion)


class InvalidDistributionError(ConfigurationError):
    """Raised when an unknown distribution name is requested."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        available = available or ["csa", "sep-cma", "cma"]
        message = f"Unknown distribution '{name}'."
        suggestion = f"Available distributions: {', '.join(available)}"
        super().__init__(message, suggestion, {"distribution": name, "available": available})


class InvalidWeightsError(ConfigurationError):
    """Raised when an unknown mean-weights generator is requested."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        available = available or ["equal", "linear", "log"]
        message = f"Unknown mean weights generator '{name}'."
        suggestion = f"Available generators: {', '.join(available)}"
        super().__init__(message, suggestion, {"weights": name, "available": available})


class CovarianceShapeError(ConfigurationError):
    """Raised when a custom covariance matrix does not match the dimension."""

    def __init__(self, shape: tuple[int, ...], n: int) -> None:
        message = f"Custom covariance has shape {shape}, expected ({n}, {n})."
        suggestion = "Provide a square covariance matrix matching the search space dimension"
        super().__init__(message, suggestion, {"shape": shape, "n": n})


class MissingConfigError(ConfigurationError):
    """Raised when required configuration is missing."""

    def __init__(self, field: str, config_class: str | None = None) -> None:
        message = f"Missing required configuration: '{field}'."
        suggestion = f"Add '{field}' to your configuration"
        if config_class:
            suggestion += f" with {config_class}().{field}(...)"
        super().__init__(message, suggestion, {"field": field})


# =============================================================================
# Runtime Errors
# =============================================================================


class OptimizationError(ESOptError):
    """Raised when optimization fails during execution."""

    pass


class EvaluationError(OptimizationError):
    """Raised by evaluators when the fitness of a candidate cannot be computed.

    The managed loop reacts by resampling the candidate, up to its retry cap.
    """

    def __init__(self, message: str = "Fitness evaluation failed.", solution: Any = None) -> None:
        suggestion = "The candidate will be resampled; check the evaluator if this happens often"
        super().__init__(message, suggestion, {"solution": solution})


class DistributionStateError(OptimizationError):
    """Raised when a distribution is used out of its setup/start order."""

    def __init__(self, distribution: str, required: str) -> None:
        message = f"{distribution} is not ready: call {required}() first."
        suggestion = "Attach the distribution to a Strategy and call strategy.start()"
        super().__init__(message, suggestion, {"distribution": distribution, "required": required})


class EigenDecompositionError(OptimizationError):
    """Raised by eigen kernels when QL iteration does not converge."""

    def __init__(self, message: str, index: int | None = None) -> None:
        suggestion = "The covariance matrix is numerically degenerate; restart with a fresh distribution"
        super().__init__(message, suggestion, {"index": index})


# =============================================================================
# Dependency Errors
# =============================================================================


class DependencyError(ESOptError):
    """Raised when an optional package needed by a feature cannot be imported."""

    def __init__(self, package: str, feature: str, extra: str | None = None) -> None:
        message = f"{feature} needs '{package}', which is not installed."
        if extra:
            suggestion = f'Install the optional extra: pip install "esopt[{extra}]"'
        else:
            suggestion = f"Install it with: pip install {package}"
        super().__init__(message, suggestion, {"package": package, "extra": extra})


# Optional extra that provides each non-default kernel.
KERNEL_EXTRAS = {"numba": "compute"}


class BackendNotAvailableError(DependencyError):
    """Raised when a requested eigen kernel cannot be loaded."""

    def __init__(self, backend: str) -> None:
        super().__init__(backend, f"The '{backend}' eigen kernel", KERNEL_EXTRAS.get(backend))


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Base
    "ESOptError",
    # Configuration
    "ConfigurationError",
    "InvalidDimensionError",
    "InvalidPopulationError",
    "InvalidStepSizeError",
    "DistributionNotSetError",
    "InvalidDistributionError",
    "InvalidWeightsError",
    "CovarianceShapeError",
    "MissingConfigError",
    # Runtime
    "OptimizationError",
    "EvaluationError",
    "DistributionStateError",
    "EigenDecompositionError",
    # Dependencies
    "DependencyError",
    "BackendNotAvailableError",
]
