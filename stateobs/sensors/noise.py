"""
Additive noise models for simulated dynamics and measurements.
"""
import numpy as np
from typing import Optional


class GaussianWhiteNoise:
    """
    Additive Gaussian white noise with optional constant bias.

    The noise added to a vector v is bias + S @ n, with n ~ N(0, I) and S the
    standard deviation matrix, so that the noise covariance is S @ S^T.
    """

    def __init__(self, dimension: int, seed: Optional[int] = None):
        """
        Args:
            dimension: Size of the noisy vectors
            seed: Seed of the random generator
        """
        self.dimension = dimension
        self.std = np.eye(dimension)
        self.bias = np.zeros(dimension)
        self.rng = np.random.default_rng(seed)

    def set_standard_deviation(self, std: np.ndarray):
        """
        Set the standard deviation matrix S.

        Args:
            std: (dim, dim) matrix, (dim,) diagonal or a scalar
        """
        std = np.asarray(std, dtype=np.float64)
        if std.ndim == 0:
            std = std * np.eye(self.dimension)
        elif std.ndim == 1:
            std = np.diag(std)
        if std.shape != (self.dimension, self.dimension):
            raise ValueError(f"Standard deviation must be {self.dimension}x{self.dimension}, got {std.shape}")
        self.std = std

    def set_bias(self, bias: np.ndarray):
        bias = np.asarray(bias, dtype=np.float64)
        if bias.shape != (self.dimension,):
            raise ValueError(f"Bias must have size {self.dimension}, got {bias.shape}")
        self.bias = bias

    @property
    def covariance(self) -> np.ndarray:
        return self.std @ self.std.T

    def add_noise(self, v: np.ndarray) -> np.ndarray:
        """Return v plus a noise sample."""
        return v + self.bias + self.std @ self.rng.standard_normal(self.dimension)
