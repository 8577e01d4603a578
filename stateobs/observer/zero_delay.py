"""
Zero-delay observer loop.

Zero-delay observers are the classical state observers where the state and
input at instant k and the measurement at instant k+1 are enough to provide
the estimate of the state at instant k+1. Only the newest state is kept;
measurements and inputs are buffered in chronological order.
"""
import logging
import numpy as np
from typing import Optional

from ..core.errors import CausalityError, InsufficientDataError, StateNotSetError
from ..core.time_array import DiscreteTimeArray
from .base import EstimationStep, EstimatorLike, ObserverBase

logger = logging.getLogger(__name__)


class ZeroDelayObserver(ObserverBase):
    """
    Time-indexed recursive observer.

    Stores the state at the current time k0 and the measurement/input
    histories, and runs the one-step estimator from k0 up to any requested
    future time. The estimator is supplied at construction, either as an
    object with a ``one_step_estimation(step)`` method or as a plain callable.

    Estimators that keep internal state (e.g. a covariance) may expose
    ``save()`` and ``restore(snapshot)`` so that a failed multi-step call
    leaves them unchanged as well.
    """

    def __init__(self,
                 state_size: int,
                 measurement_size: int,
                 input_size: int = 0,
                 estimator: Optional[EstimatorLike] = None,
                 drop_consumed: bool = True):
        """
        Initialize zero-delay observer.

        Args:
            state_size: Dimension n of the state vector
            measurement_size: Dimension m of the measurement vector
            input_size: Dimension p of the input vector
            estimator: One-step estimation capability
            drop_consumed: Drop measurements and inputs once they are consumed
        """
        super().__init__(state_size, measurement_size, input_size)

        self._estimator = None
        self._one_step = None
        if estimator is not None:
            self.set_estimator(estimator)

        self.drop_consumed = drop_consumed

        # Only one state is recorded, measurements and inputs are histories
        self._state: Optional[np.ndarray] = None
        self._time: Optional[int] = None
        self._measurements = DiscreteTimeArray()
        self._inputs = DiscreteTimeArray()

    @property
    def estimator(self):
        return self._estimator

    def set_estimator(self, estimator: EstimatorLike):
        """Set the one-step estimation capability."""
        if hasattr(estimator, 'one_step_estimation'):
            self._one_step = estimator.one_step_estimation
        elif callable(estimator):
            self._one_step = estimator
        else:
            raise TypeError(
                f"Estimator must be callable or provide one_step_estimation, got {type(estimator).__name__}"
            )
        self._estimator = estimator

    def set_state(self, x_k, k: int):
        """
        Set the state at time index k, which becomes the current time.

        Any previously stored state is discarded.
        """
        self._state = self.check_state_vector(x_k)
        self._time = int(k)
        logger.debug("State set at time %d", self._time)

    def clear_state(self):
        """Remove the stored state."""
        self._state = None
        self._time = None

    def set_measurement(self, y_k, k: int):
        """
        Set the measurement at time index k.

        Measurements have to be inserted in chronological order without gaps.

        Raises:
            OrderingError: if k is not right after the last measurement
        """
        self._measurements.push_back(self.check_measurement_vector(y_k), k)

    def clear_measurements(self):
        """Remove all the buffered measurements."""
        self._measurements.clear()

    def set_input(self, u_k, k: int):
        """
        Set the input at time index k.

        Inputs have to be inserted in chronological order without gaps.

        Raises:
            OrderingError: if k is not right after the last input
        """
        self._inputs.push_back(self.check_input_vector(u_k), k)

    def clear_inputs(self):
        """Remove all the buffered inputs."""
        self._inputs.clear()

    def get_current_time(self) -> int:
        """
        Get the current time index k0.

        Raises:
            StateNotSetError: if no state has been set
        """
        if self._time is None:
            raise StateNotSetError("The observer state is not set")
        return self._time

    @property
    def state_is_set(self) -> bool:
        return self._state is not None

    def get_state(self) -> np.ndarray:
        """Copy of the state stored at the current time."""
        if self._state is None:
            raise StateNotSetError("The observer state is not set")
        return self._state.copy()

    @property
    def measurements(self) -> DiscreteTimeArray:
        return self._measurements

    @property
    def inputs(self) -> DiscreteTimeArray:
        return self._inputs

    def check_feasibility(self, k: int):
        """
        Check that the state at time k can be estimated.

        When current time is k0, estimating x_k needs y_k0+1 to y_k and
        u_k0 to u_k-1.

        Raises:
            StateNotSetError: if no state has been set
            CausalityError: if k <= k0
            InsufficientDataError: if a measurement or an input is missing
        """
        k0 = self.get_current_time()
        if k <= k0:
            raise CausalityError(k, k0)

        missing = self._measurements.missing_in(k0 + 1, k)
        if missing is not None:
            raise InsufficientDataError('measurement', missing, k)

        if self.has_input:
            missing = self._inputs.missing_in(k0, k - 1)
            if missing is not None:
                raise InsufficientDataError('input', missing, k)

    def get_estimate_state(self, k: int) -> np.ndarray:
        """
        Run the observer loop and get the estimate of the state at time k.

        The whole span from k0 to k is checked before any step is run and
        the result is only stored once every step succeeded, so on error the
        observer is left as it was. On success k becomes the current time.

        Args:
            k: Requested time index, strictly after the current time

        Returns:
            State estimate x_k (n,)
        """
        if self._one_step is None:
            raise RuntimeError("No one-step estimator is set")

        k = int(k)
        self.check_feasibility(k)
        k0 = self._time

        snapshot = self._save_estimator()
        x = self._state
        try:
            for t in range(k0, k):
                step = EstimationStep(
                    time=t,
                    state=x.copy(),
                    measurement=self._measurements[t + 1].copy(),
                    input=self._inputs[t].copy() if self.has_input else None
                )
                x = self.check_state_vector(self._one_step(step))
        except Exception:
            logger.debug("Estimation from %d to %d aborted, restoring time %d", k0, k, k0)
            self._restore_estimator(snapshot)
            raise

        self._state = x
        self._time = k
        if self.drop_consumed:
            self._measurements.drop_before(k + 1)
            self._inputs.drop_before(k)

        logger.debug("Estimated state from time %d to %d", k0, k)
        return x.copy()

    def _save_estimator(self):
        save = getattr(self._estimator, 'save', None)
        return save() if callable(save) else None

    def _restore_estimator(self, snapshot):
        restore = getattr(self._estimator, 'restore', None)
        if snapshot is not None and callable(restore):
            restore(snapshot)
