"""
Base definitions shared by the observers.

An observer is parameterized by three structural sizes:
- n: size of the state vector
- m: size of the measurement vector
- p: size of the input vector (0 for systems without input)
"""
import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

from ..core.errors import DimensionError


@dataclass(frozen=True)
class EstimationStep:
    """
    Data available to one estimation step, from time k to k+1.

    Attributes:
        time: Current time index k
        state: State estimate x_k (n,)
        measurement: Measurement y_k+1 (m,)
        input: Input u_k (p,), None when the system has no input
    """
    time: int
    state: np.ndarray
    measurement: np.ndarray
    input: Optional[np.ndarray] = None


class OneStepEstimator(Protocol):
    """Capability that turns x_k into x_k+1 using y_k+1 and u_k."""

    def one_step_estimation(self, step: EstimationStep) -> np.ndarray:
        ...


EstimatorLike = Union[OneStepEstimator, Callable[[EstimationStep], np.ndarray]]


class ObserverBase:
    """
    Sizes of the vectors exchanged with an observer, and their checks.
    """

    def __init__(self, state_size: int, measurement_size: int, input_size: int = 0):
        """
        Args:
            state_size: Dimension n of the state vector
            measurement_size: Dimension m of the measurement vector
            input_size: Dimension p of the input vector
        """
        if state_size <= 0 or measurement_size <= 0 or input_size < 0:
            raise ValueError(
                f"Invalid observer sizes n={state_size}, m={measurement_size}, p={input_size}"
            )
        self.state_size = int(state_size)
        self.measurement_size = int(measurement_size)
        self.input_size = int(input_size)

    @property
    def has_input(self) -> bool:
        return self.input_size > 0

    def check_state_vector(self, x) -> np.ndarray:
        return self._check(x, self.state_size, 'state')

    def check_measurement_vector(self, y) -> np.ndarray:
        return self._check(y, self.measurement_size, 'measurement')

    def check_input_vector(self, u) -> np.ndarray:
        return self._check(u, self.input_size, 'input')

    @staticmethod
    def _check(v, size: int, name: str) -> np.ndarray:
        """Copy v into a float64 vector of the given size."""
        v = np.array(v, dtype=np.float64)
        if v.ndim == 2 and 1 in v.shape:
            v = v.reshape(-1)
        if v.shape != (size,):
            raise DimensionError(name, size, v.shape)
        return v
