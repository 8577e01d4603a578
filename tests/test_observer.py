"""
Unit tests for the zero-delay observer loop.
"""
import pytest
import numpy as np

from stateobs.core.errors import (
    CausalityError,
    DimensionError,
    InsufficientDataError,
    OrderingError,
    StateNotSetError,
)
from stateobs.observer import EstimationStep, ObserverBase, ZeroDelayObserver


class RecordingEstimator:
    """x_k+1 = x_k + y_k+1 + u_k[0], recording every step."""

    def __init__(self, fail_at=None):
        self.steps = []
        self.fail_at = fail_at

    def one_step_estimation(self, step: EstimationStep) -> np.ndarray:
        if step.time == self.fail_at:
            raise FloatingPointError(f"diverged at {step.time}")
        self.steps.append(step)
        u = 0.0 if step.input is None else step.input[0]
        return step.state + step.measurement + u


@pytest.fixture
def estimator():
    return RecordingEstimator()


@pytest.fixture
def observer(estimator):
    obs = ZeroDelayObserver(state_size=2, measurement_size=2, input_size=1, estimator=estimator)
    obs.set_state(np.zeros(2), 0)
    return obs


def feed(obs, first, last, with_inputs=True):
    """Measurements for (first, last] and inputs for [first, last)."""
    for k in range(first + 1, last + 1):
        obs.set_measurement(np.array([1.0, 2.0]), k)
    if with_inputs:
        for k in range(first, last):
            obs.set_input(np.array([0.5]), k)


class TestObserverBase:
    """Tests for size checks."""

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            ObserverBase(0, 2)
        with pytest.raises(ValueError):
            ObserverBase(2, 2, -1)

    def test_vector_checks(self):
        base = ObserverBase(3, 2, 1)
        assert base.check_state_vector([1, 2, 3]).dtype == np.float64
        assert base.check_measurement_vector(np.ones((2, 1))).shape == (2,)
        with pytest.raises(DimensionError):
            base.check_input_vector([1.0, 2.0])

    def test_no_input(self):
        assert not ObserverBase(3, 2).has_input


class TestStateAndBuffers:
    """Tests for setters and buffer bookkeeping."""

    def test_no_state(self, estimator):
        obs = ZeroDelayObserver(2, 2, 1, estimator)
        with pytest.raises(StateNotSetError):
            obs.get_current_time()
        with pytest.raises(StateNotSetError):
            obs.get_estimate_state(1)

    def test_set_state_replaces(self, observer):
        observer.set_state(np.array([1.0, 1.0]), 10)
        assert observer.get_current_time() == 10
        observer.set_state(np.array([2.0, 2.0]), 3)
        assert observer.get_current_time() == 3
        assert np.allclose(observer.get_state(), [2.0, 2.0])

    def test_clear_state(self, observer):
        observer.clear_state()
        assert not observer.state_is_set
        with pytest.raises(StateNotSetError):
            observer.get_state()

    def test_get_state_is_a_copy(self, observer):
        x = observer.get_state()
        x[0] = 42.0
        assert observer.get_state()[0] == 0.0

    def test_measurement_gap_is_rejected(self, observer):
        for k in range(1, 4):
            observer.set_measurement(np.ones(2), k)
        with pytest.raises(OrderingError):
            observer.set_measurement(np.ones(2), 5)
        assert observer.measurements.last_time == 3
        assert len(observer.measurements) == 3

    def test_measurement_backwards_is_rejected(self, observer):
        observer.set_measurement(np.ones(2), 1)
        observer.set_measurement(np.ones(2), 2)
        with pytest.raises(OrderingError):
            observer.set_measurement(np.ones(2), 2)
        with pytest.raises(OrderingError):
            observer.set_measurement(np.ones(2), 1)

    def test_input_gap_is_rejected(self, observer):
        observer.set_input([0.0], 0)
        with pytest.raises(OrderingError):
            observer.set_input([0.0], 2)
        assert observer.inputs.last_time == 0

    def test_clear_allows_restart(self, observer):
        observer.set_measurement(np.ones(2), 1)
        observer.set_input([0.0], 0)
        observer.clear_measurements()
        observer.clear_inputs()
        assert len(observer.measurements) == 0
        observer.set_measurement(np.ones(2), 50)
        observer.set_input([0.0], 49)
        assert observer.measurements.first_time == 50

    def test_dimension_errors(self, observer):
        with pytest.raises(DimensionError):
            observer.set_measurement(np.ones(3), 1)
        with pytest.raises(DimensionError):
            observer.set_state(np.ones(4), 0)
        assert len(observer.measurements) == 0

    def test_invalid_estimator(self):
        with pytest.raises(TypeError):
            ZeroDelayObserver(2, 2, 0, estimator=42)


class TestGetEstimateState:
    """Tests for the observer loop."""

    @pytest.mark.parametrize("k", [0, -1, -10])
    def test_causality(self, observer, estimator, k):
        feed(observer, 0, 3)
        with pytest.raises(CausalityError):
            observer.get_estimate_state(k)
        assert observer.get_current_time() == 0
        assert len(observer.measurements) == 3
        assert len(observer.inputs) == 3
        assert estimator.steps == []

    def test_causality_after_advancing(self, observer):
        feed(observer, 0, 5)
        observer.get_estimate_state(5)
        for k in (5, 4):
            with pytest.raises(CausalityError):
                observer.get_estimate_state(k)
        assert observer.get_current_time() == 5

    def test_missing_measurement(self, observer, estimator):
        observer.set_measurement(np.ones(2), 1)
        observer.set_input([0.0], 0)
        observer.set_input([0.0], 1)

        with pytest.raises(InsufficientDataError) as excinfo:
            observer.get_estimate_state(2)
        assert excinfo.value.kind == 'measurement'
        assert excinfo.value.missing == 2
        assert observer.get_current_time() == 0
        assert estimator.steps == []

        observer.set_measurement(np.ones(2), 2)
        observer.get_estimate_state(2)
        assert observer.get_current_time() == 2

    def test_missing_input(self, observer, estimator):
        feed(observer, 0, 2, with_inputs=False)
        observer.set_input([0.0], 0)

        with pytest.raises(InsufficientDataError) as excinfo:
            observer.get_estimate_state(2)
        assert excinfo.value.kind == 'input'
        assert excinfo.value.missing == 1
        assert estimator.steps == []

    def test_measurements_starting_too_late(self, observer):
        observer.set_measurement(np.ones(2), 2)
        observer.set_input([0.0], 0)
        observer.set_input([0.0], 1)
        with pytest.raises(InsufficientDataError) as excinfo:
            observer.get_estimate_state(2)
        assert excinfo.value.missing == 1

    def test_steps_receive_the_right_data(self, observer, estimator):
        for k in range(1, 4):
            observer.set_measurement(np.array([k, 10.0 * k]), k)
        for k in range(0, 3):
            observer.set_input([100.0 * k], k)

        x = observer.get_estimate_state(3)

        assert [s.time for s in estimator.steps] == [0, 1, 2]
        for step in estimator.steps:
            assert np.allclose(step.measurement, [step.time + 1, 10.0 * (step.time + 1)])
            assert np.allclose(step.input, [100.0 * step.time])
        assert np.allclose(x, [6.0 + 300.0, 60.0 + 300.0])
        assert observer.get_current_time() == 3
        assert np.allclose(observer.get_state(), x)

    def test_incremental_requests(self, observer, estimator):
        feed(observer, 0, 4)
        x2 = observer.get_estimate_state(2)
        x4 = observer.get_estimate_state(4)
        assert np.allclose(x2, [3.0, 5.0])
        assert np.allclose(x4, [6.0, 10.0])
        assert len(estimator.steps) == 4

    def test_failed_step_leaves_observer_unchanged(self):
        estimator = RecordingEstimator(fail_at=2)
        obs = ZeroDelayObserver(2, 2, 1, estimator)
        obs.set_state(np.zeros(2), 0)
        feed(obs, 0, 4)

        with pytest.raises(FloatingPointError):
            obs.get_estimate_state(4)

        assert obs.get_current_time() == 0
        assert np.allclose(obs.get_state(), np.zeros(2))
        assert len(obs.measurements) == 4
        assert len(obs.inputs) == 4

    def test_wrong_size_from_estimator(self, observer):
        observer.set_estimator(lambda step: np.zeros(5))
        feed(observer, 0, 1)
        with pytest.raises(DimensionError):
            observer.get_estimate_state(1)
        assert observer.get_current_time() == 0

    def test_system_without_input(self):
        steps = []

        def estimate(step):
            steps.append(step)
            return step.state + step.measurement

        obs = ZeroDelayObserver(1, 1, estimator=estimate)
        obs.set_state([0.0], 5)
        for k in range(6, 9):
            obs.set_measurement([1.0], k)

        assert np.allclose(obs.get_estimate_state(8), [3.0])
        assert all(s.input is None for s in steps)

    def test_consumed_data_is_dropped(self, observer):
        feed(observer, 0, 5)
        observer.get_estimate_state(3)
        assert observer.measurements.first_time == 4
        assert observer.inputs.first_time == 3

        # Order is still enforced after dropping
        with pytest.raises(OrderingError):
            observer.set_measurement(np.ones(2), 3)
        observer.set_measurement(np.ones(2), 6)

    def test_history_kept_on_request(self, estimator):
        obs = ZeroDelayObserver(2, 2, 1, estimator, drop_consumed=False)
        obs.set_state(np.zeros(2), 0)
        feed(obs, 0, 3)
        obs.get_estimate_state(3)
        assert obs.measurements.first_time == 1
        assert obs.inputs.first_time == 0

        # Resetting the state to the past can reuse the history
        obs.set_state(np.zeros(2), 1)
        assert np.allclose(obs.get_estimate_state(3), [2.0 + 1.0, 4.0 + 1.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
