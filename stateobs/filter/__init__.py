"""
Filtering algorithms for stateobs.
"""
from .ekf import ExtendedKalmanFilter
from .reconstruction import (
    imu_attitude_trajectory_reconstruction,
    gravity_direction,
    attitude_error_deg,
)

__all__ = [
    'ExtendedKalmanFilter',
    'imu_attitude_trajectory_reconstruction',
    'gravity_direction',
    'attitude_error_deg',
]
