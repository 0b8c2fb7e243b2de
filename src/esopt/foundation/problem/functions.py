# problem/functions.py
import numpy as np

from .base import FitnessFunction


class Sphere(FitnessFunction):
    def fitness(self, x: np.ndarray) -> float:
        return float(np.dot(x, x))


class Ellipsoid(FitnessFunction):
    """Axis-parallel ellipsoid with condition number 1e6."""

    def __init__(self, dimension: int) -> None:
        super().__init__(dimension)
        if self.dimension == 1:
            self.coefficients = np.ones(1)
        else:
            self.coefficients = 10.0 ** (6.0 * np.arange(self.dimension) / (self.dimension - 1))

    def fitness(self, x: np.ndarray) -> float:
        return float(np.dot(self.coefficients, x * x))


class Rosenbrock(FitnessFunction):
    xl = -2.0
    xu = 2.0

    def fitness(self, x: np.ndarray) -> float:
        if x.size < 2:
            return float((1.0 - x[0]) ** 2)
        return float(np.sum(100.0 * (x[1:] - x[:-1] ** 2) ** 2 + (1.0 - x[:-1]) ** 2))


class Rastrigin(FitnessFunction):
    xl = -5.12
    xu = 5.12

    def fitness(self, x: np.ndarray) -> float:
        return float(10.0 * x.size + np.sum(x * x - 10.0 * np.cos(2.0 * np.pi * x)))
