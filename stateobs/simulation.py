"""
Discrete-time simulation of a dynamical system.

Produces the state and measurement trajectories that observers are fed with.
"""
import bisect
import logging
import numpy as np
from typing import Dict, Optional

from .core.errors import InsufficientDataError, StateNotSetError
from .core.time_array import DiscreteTimeArray

logger = logging.getLogger(__name__)


class DynamicalSystemSimulator:
    """
    Simulator driving a dynamics functor forward in time.

    The functor must provide ``state_dynamics(x, u, k)``,
    ``measure_dynamics(x, k)`` and ``input_size``. Inputs are piecewise
    constant: an input given at time k is used until the next given input.
    """

    def __init__(self, functor=None):
        self.functor = functor
        self._states = DiscreteTimeArray()
        self._measurements = DiscreteTimeArray()
        self._inputs: Dict[int, np.ndarray] = {}
        self._input_times = []

    def set_dynamics_functor(self, functor):
        self.functor = functor

    def set_state(self, x: np.ndarray, k: int):
        """
        Set the state at time k and drop the previously simulated trajectory.
        """
        self._states.clear()
        self._measurements.clear()
        self._states.push_back(x, k)

    def set_input(self, u: np.ndarray, k: int):
        """Set the input from time k until the next given input."""
        k = int(k)
        if k not in self._inputs:
            bisect.insort(self._input_times, k)
        self._inputs[k] = np.array(u, dtype=np.float64)

    def get_input(self, k: int) -> Optional[np.ndarray]:
        """Input in use at time k, None if no input was given before k."""
        i = bisect.bisect_right(self._input_times, k)
        if i == 0:
            return None
        return self._inputs[self._input_times[i - 1]]

    def simulate_dynamics_to(self, k: int):
        """
        Simulate the states up to time k and the measurements up to time k.

        Raises:
            StateNotSetError: if no initial state was set
            InsufficientDataError: if an input is required but not given
        """
        if self.functor is None:
            raise RuntimeError("No dynamics functor is set")
        if len(self._states) == 0:
            raise StateNotSetError("The simulator initial state is not set")

        k = int(k)
        t = self._states.last_time
        needs_input = getattr(self.functor, 'input_size', 0) > 0

        if self._measurements.next_time is None:
            self._measurements.push_back(self.functor.measure_dynamics(self._states[t], t), t)

        while t < k:
            u = self.get_input(t)
            if needs_input and u is None:
                raise InsufficientDataError('input', t, k)

            x_next = self.functor.state_dynamics(self._states[t], u, t)
            t += 1
            self._states.push_back(x_next, t)
            self._measurements.push_back(self.functor.measure_dynamics(x_next, t), t)

        logger.info("Simulated dynamics up to time %d", t)

    def get_state(self, k: int) -> np.ndarray:
        return self._states[k].copy()

    def get_measurement(self, k: int) -> np.ndarray:
        return self._measurements[k].copy()

    def get_state_array(self, first: int, last: int) -> DiscreteTimeArray:
        return self._states.segment(first, last)

    def get_measurement_array(self, first: int, last: int) -> DiscreteTimeArray:
        return self._measurements.segment(first, last)

    def reset(self):
        """Forget the trajectories and the inputs."""
        self._states.clear()
        self._measurements.clear()
        self._inputs.clear()
        self._input_times = []

