"""
Unit tests for filter modules.
"""
import pytest
import numpy as np

from stateobs.core.time_array import DiscreteTimeArray
from stateobs.filter.ekf import ExtendedKalmanFilter
from stateobs.filter.reconstruction import (
    attitude_error_deg,
    gravity_direction,
    imu_attitude_trajectory_reconstruction,
)
from stateobs.observer import EstimationStep, ZeroDelayObserver
from stateobs.sensors.imu_model import IMUDynamicalSystem, ANG_VEL, ORI, POS
from stateobs.simulation import DynamicalSystemSimulator


class LinearSystem:
    """x_k+1 = A x_k + B u_k, y_k = C x_k."""

    def __init__(self, A, B, C):
        self.A, self.B, self.C = np.asarray(A), np.asarray(B), np.asarray(C)
        self.state_size = self.A.shape[0]
        self.input_size = self.B.shape[1]
        self.measurement_size = self.C.shape[0]

    def state_dynamics(self, x, u, k):
        return self.A @ x + self.B @ u

    def measure_dynamics(self, x, k):
        return self.C @ x


@pytest.fixture
def linear_system():
    dt = 0.1
    return LinearSystem(
        A=[[1.0, dt], [0.0, 1.0]],
        B=[[0.5 * dt**2], [dt]],
        C=[[1.0, 0.0]]
    )


class TestEKF:
    """Tests for Extended Kalman Filter."""

    def test_creation(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        assert ekf.state_dim == 2
        assert ekf.P.shape == (2, 2)
        assert ekf.R.shape == (1, 1)

    def test_predict(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        P_init = ekf.P.copy()

        ekf.predict(np.eye(2), 0.1 * np.eye(2))

        # Covariance should increase
        assert np.trace(ekf.P) > np.trace(P_init)

    def test_update(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        P_init = ekf.P.copy()

        H = np.array([[1.0, 0.0]])
        R = np.array([[0.1]])
        correction, P_updated = ekf.update(H, R, np.array([0.5]))

        # Covariance should decrease
        assert np.trace(P_updated) < np.trace(P_init)
        assert correction[0] > 0

    def test_finite_difference_jacobians(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        x = np.array([0.3, -1.0])
        assert np.allclose(ekf.get_a_matrix_fd(x, np.array([2.0]), 0), linear_system.A, atol=1e-6)
        assert np.allclose(ekf.get_c_matrix_fd(x, 0), linear_system.C, atol=1e-6)

    def test_explicit_jacobians_match_fd(self, linear_system):
        step = EstimationStep(time=0, state=np.array([0.0, 1.0]), measurement=np.array([0.2]), input=np.array([0.0]))

        ekf_fd = ExtendedKalmanFilter(linear_system, 0.01 * np.eye(2), 0.1 * np.eye(1))
        ekf_exact = ExtendedKalmanFilter(linear_system, 0.01 * np.eye(2), 0.1 * np.eye(1))
        ekf_exact.set_a_matrix(linear_system.A)
        ekf_exact.set_c_matrix(linear_system.C)

        assert np.allclose(ekf_fd.one_step_estimation(step), ekf_exact.one_step_estimation(step), atol=1e-6)
        assert np.allclose(ekf_fd.get_covariance(), ekf_exact.get_covariance(), atol=1e-6)

    def test_one_step_without_innovation(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        x = np.array([1.0, 2.0])
        u = np.array([0.5])
        x_next = linear_system.state_dynamics(x, u, 0)
        step = EstimationStep(time=0, state=x, measurement=linear_system.measure_dynamics(x_next, 1), input=u)

        assert np.allclose(ekf.one_step_estimation(step), x_next)
        assert np.allclose(ekf.last_innovation, 0.0)

    def test_save_restore(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        snapshot = ekf.save()
        ekf.predict(np.eye(2), np.eye(2))
        ekf.restore(snapshot)
        assert np.allclose(ekf.P, np.eye(2))

    def test_converges_on_linear_system(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system, 1e-6 * np.eye(2), 1e-4 * np.eye(1), 10.0 * np.eye(2))
        obs = ZeroDelayObserver(2, 1, 1, estimator=ekf)

        sim = DynamicalSystemSimulator(linear_system)
        sim.set_state(np.array([1.0, 0.5]), 0)
        sim.set_input(np.array([0.2]), 0)
        sim.simulate_dynamics_to(200)

        obs.set_state(np.zeros(2), 0)
        for k in range(1, 201):
            obs.set_measurement(sim.get_measurement(k), k)
            obs.set_input(sim.get_input(k - 1), k - 1)

        x_hat = obs.get_estimate_state(200)
        assert np.allclose(x_hat, sim.get_state(200), atol=1e-3)

    def test_covariance_restored_when_estimation_fails(self, linear_system):
        ekf = ExtendedKalmanFilter(linear_system)
        calls = []

        class FailingSecondStep:
            def one_step_estimation(self, step):
                calls.append(step.time)
                if len(calls) == 2:
                    raise FloatingPointError("diverged")
                return ekf.one_step_estimation(step)

            def save(self):
                return ekf.save()

            def restore(self, snapshot):
                ekf.restore(snapshot)

        obs = ZeroDelayObserver(2, 1, 1, estimator=FailingSecondStep())
        obs.set_state(np.zeros(2), 0)
        for k in range(3):
            obs.set_measurement([0.1], k + 1)
            obs.set_input([0.0], k)

        with pytest.raises(FloatingPointError):
            obs.get_estimate_state(3)
        assert np.allclose(ekf.get_covariance(), np.eye(2))
        assert obs.get_current_time() == 0


class TestIMUEstimation:
    """End-to-end estimation over the IMU model."""

    def test_zero_excitation_keeps_state(self):
        imu = IMUDynamicalSystem(sampling_period=0.01)
        ekf = ExtendedKalmanFilter(imu, 1e-4 * np.eye(18), 1e-4 * np.eye(6))
        obs = ZeroDelayObserver(18, 6, 6, estimator=ekf)

        x0 = np.zeros(18)
        x0[POS] = [1.0, -2.0, 0.5]
        x0[ORI] = [0.1, -0.2, 0.3]
        obs.set_state(x0, 0)

        y = imu.measure_dynamics(x0, 0)
        for k in range(100):
            obs.set_input(np.zeros(6), k)
            obs.set_measurement(y, k + 1)

        x100 = obs.get_estimate_state(100)

        assert obs.get_current_time() == 100
        assert np.allclose(x100[POS], x0[POS], atol=1e-6)
        assert np.allclose(x100[ORI], x0[ORI], atol=1e-6)
        assert np.allclose(x100, x0, atol=1e-6)

    def test_reconstruction_tracks_noise_free_rotation(self):
        dt = 0.01
        imu = IMUDynamicalSystem(sampling_period=dt)
        sim = DynamicalSystemSimulator(imu)

        x0 = np.zeros(18)
        x0[ANG_VEL] = [0.5, -0.2, 0.1]
        sim.set_state(x0, 0)
        sim.set_input(np.zeros(6), 0)
        sim.simulate_dynamics_to(50)

        y = sim.get_measurement_array(1, 50)
        u = DiscreteTimeArray()
        for k in range(50):
            u.push_back(np.zeros(6), k)

        xh = imu_attitude_trajectory_reconstruction(
            y, u, x0, 1e-6 * np.eye(18), 1e-6 * np.eye(18), 1e-4 * np.eye(6), dt
        )

        assert xh.first_time == 1 and xh.last_time == 50
        for k in xh:
            assert attitude_error_deg(sim.get_state(k), xh[k]) < 1e-3
        assert np.allclose(xh[50], sim.get_state(50), atol=1e-6)


class TestAttitudeHelpers:
    """Tests for gravity-based attitude comparison."""

    def test_gravity_direction(self):
        assert np.allclose(gravity_direction(np.zeros(3)), [0.0, 0.0, 1.0])

    def test_attitude_error(self):
        x = np.zeros(18)
        xh = np.zeros(18)
        assert attitude_error_deg(x, xh) == pytest.approx(0.0, abs=1e-5)
        xh[ORI] = [np.pi / 2, 0.0, 0.0]
        assert attitude_error_deg(x, xh) == pytest.approx(90.0)

    def test_yaw_is_unobservable_from_gravity(self):
        x = np.zeros(18)
        xh = np.zeros(18)
        xh[ORI] = [0.0, 0.0, 1.0]
        assert attitude_error_deg(x, xh) == pytest.approx(0.0, abs=1e-5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
