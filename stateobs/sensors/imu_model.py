"""
IMU dynamical system for state propagation and measurement prediction.

State vector (18D):
- Position in world frame: 3D
- Velocity in world frame: 3D
- Linear acceleration in world frame: 3D
- Orientation as rotation vector (body to world): 3D
- Angular velocity in body frame: 3D
- Angular acceleration in body frame: 3D

Input vector (6D): increments of linear and angular accelerations.
Measurement vector (6D): accelerometer and gyrometer readings.
"""
import numpy as np
from typing import Optional

from ..core.rotations import matrix_to_rotation_vector, rotation_vector_to_matrix
from ..kinematics.rigid_body import RigidBodyKinematics
from .noise import GaussianWhiteNoise

# State vector layout
POS = slice(0, 3)
LIN_VEL = slice(3, 6)
LIN_ACC = slice(6, 9)
ORI = slice(9, 12)
ANG_VEL = slice(12, 15)
ANG_ACC = slice(15, 18)

STATE_SIZE = 18
INPUT_SIZE = 6
MEASUREMENT_SIZE = 6


class IMUDynamicalSystem:
    """
    Rigid body carrying an IMU.

    The accelerations are part of the state and are driven by the input; the
    rest of the state follows from the rigid-body kinematics integrated over
    one sampling period.
    """

    def __init__(self,
                 sampling_period: float = 1e-3,
                 gravity_magnitude: float = 9.8):
        """
        Initialize IMU dynamical system.

        Args:
            sampling_period: Time step between two indices, in seconds
            gravity_magnitude: Gravity magnitude in m/s^2
        """
        self.dt = sampling_period
        self.gravity = np.array([0.0, 0.0, -gravity_magnitude])

        self.process_noise: Optional[GaussianWhiteNoise] = None
        self.measurement_noise: Optional[GaussianWhiteNoise] = None

    @property
    def state_size(self) -> int:
        return STATE_SIZE

    @property
    def input_size(self) -> int:
        return INPUT_SIZE

    @property
    def measurement_size(self) -> int:
        return MEASUREMENT_SIZE

    def set_sampling_period(self, dt: float):
        if dt <= 0:
            raise ValueError(f"Sampling period must be positive, got {dt}")
        self.dt = dt

    def set_process_noise(self, noise: Optional[GaussianWhiteNoise]):
        self.process_noise = noise

    def set_measurement_noise(self, noise: Optional[GaussianWhiteNoise]):
        self.measurement_noise = noise

    def state_dynamics(self, x: np.ndarray, u: Optional[np.ndarray], k: int) -> np.ndarray:
        """
        Compute x_k+1 from x_k and u_k.

        Args:
            x: State at time k (18,)
            u: Input at time k (6,), None is read as zero
            k: Time index

        Returns:
            State at time k+1 (18,)
        """
        x = np.asarray(x, dtype=np.float64)

        position = x[POS].copy()
        velocity = x[LIN_VEL].copy()
        acceleration = x[LIN_ACC].copy()
        orientation = rotation_vector_to_matrix(x[ORI])
        angular_velocity = x[ANG_VEL].copy()
        angular_acceleration = x[ANG_ACC].copy()

        RigidBodyKinematics.integrate_kinematics(
            position, velocity, acceleration,
            orientation, angular_velocity, angular_acceleration,
            self.dt
        )

        if u is not None:
            acceleration += u[0:3]
            angular_acceleration += u[3:6]

        x_next = np.concatenate([
            position,
            velocity,
            acceleration,
            matrix_to_rotation_vector(orientation),
            angular_velocity,
            angular_acceleration
        ])

        if self.process_noise is not None:
            x_next = self.process_noise.add_noise(x_next)

        return x_next

    def measure_dynamics(self, x: np.ndarray, k: int) -> np.ndarray:
        """
        Compute the IMU reading y_k from the state x_k.

        The accelerometer measures the specific force in body frame
        R^T (a - g); the gyrometer measures the body angular velocity.

        Args:
            x: State at time k (18,)
            k: Time index

        Returns:
            Measurement [accelerometer (3), gyrometer (3)]
        """
        x = np.asarray(x, dtype=np.float64)
        R = rotation_vector_to_matrix(x[ORI])

        y = np.concatenate([
            R.T @ (x[LIN_ACC] - self.gravity),
            x[ANG_VEL]
        ])

        if self.measurement_noise is not None:
            y = self.measurement_noise.add_noise(y)

        return y
