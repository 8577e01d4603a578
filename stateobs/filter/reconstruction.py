"""
Attitude and trajectory reconstruction from IMU readings.
"""
import logging
import numpy as np

from ..core.rotations import rotation_vector_to_matrix
from ..core.time_array import DiscreteTimeArray
from ..observer.zero_delay import ZeroDelayObserver
from ..sensors.imu_model import IMUDynamicalSystem, ORI
from .ekf import ExtendedKalmanFilter

logger = logging.getLogger(__name__)


def imu_attitude_trajectory_reconstruction(y: DiscreteTimeArray,
                                           u: DiscreteTimeArray,
                                           xh0: np.ndarray,
                                           p: np.ndarray,
                                           q: np.ndarray,
                                           r: np.ndarray,
                                           dt: float) -> DiscreteTimeArray:
    """
    Reconstruct the IMU state trajectory with an extended Kalman filter.

    The initial guess is set one step before the first measurement, so the
    inputs must cover [first_y - 1, last_y - 1].

    Args:
        y: Measurements (accelerometer, gyrometer)
        u: Inputs (acceleration increments)
        xh0: Initial state guess (18,)
        p: Initial state covariance (18, 18)
        q: Process noise covariance (18, 18)
        r: Measurement noise covariance (6, 6)
        dt: Sampling period

    Returns:
        Estimated states over the measurement time span
    """
    imu = IMUDynamicalSystem(sampling_period=dt)
    ekf = ExtendedKalmanFilter(imu, process_covariance=q, measurement_covariance=r, initial_covariance=p)
    observer = ZeroDelayObserver(imu.state_size, imu.measurement_size, imu.input_size, estimator=ekf)

    first, last = y.first_time, y.last_time
    observer.set_state(xh0, first - 1)

    for k, y_k in y.items():
        observer.set_measurement(y_k, k)
    for k in range(first - 1, last):
        observer.set_input(u[k], k)

    xh = DiscreteTimeArray()
    for k in range(first, last + 1):
        xh.push_back(observer.get_estimate_state(k), k)

    logger.info("Reconstructed %d states from time %d to %d", len(xh), first, last)
    return xh


def gravity_direction(rotation_vector: np.ndarray) -> np.ndarray:
    """Unit vertical axis expressed in the body frame."""
    g = rotation_vector_to_matrix(rotation_vector).T @ np.array([0.0, 0.0, 1.0])
    return g / np.linalg.norm(g)


def attitude_error_deg(x: np.ndarray, xh: np.ndarray) -> float:
    """Angle in degrees between the gravity directions of two IMU states."""
    g = gravity_direction(np.asarray(x)[ORI])
    gh = gravity_direction(np.asarray(xh)[ORI])
    return float(np.degrees(np.arccos(np.clip(g @ gh, -1.0, 1.0))))
