"""
Rigid-body kinematics integration.

Advances position, velocity, orientation and angular velocity by one time step.
Orientation is integrated with the exponential map so that it stays a valid
rotation at every step; angular quantities are expressed in the body frame.
"""
import numpy as np
from typing import Tuple, Union

from ..core.types import Quaternion
from ..core.rotations import (
    orthonormalize,
    rotation_vector_to_matrix,
    rotation_vector_to_quaternion,
)

Orientation = Union[np.ndarray, Quaternion]


class RigidBodyKinematics:
    """
    Integrators for the translation and rotation of a rigid body.

    Stateless: every method works on caller-owned arrays, which are updated
    in place and also returned. Arrays updated in place must be float64;
    integer arrays are not coerced and numpy raises a TypeError on them.
    """

    @staticmethod
    def integrate_kinematics(position: np.ndarray,
                             velocity: np.ndarray,
                             acceleration: np.ndarray,
                             orientation: Orientation,
                             rotation_velocity: np.ndarray,
                             rotation_acceleration: np.ndarray,
                             dt: float) -> Tuple[np.ndarray, np.ndarray, Orientation, np.ndarray]:
        """
        Integrate position/orientation and their derivatives given accelerations.

        Args:
            position: Position in world frame (3,) float64, updated in place
            velocity: Velocity in world frame (3,) float64, updated in place
            acceleration: Linear acceleration in world frame (3,)
            orientation: Rotation matrix (3, 3) or Quaternion, updated in place
            rotation_velocity: Angular velocity in body frame (3,) float64, updated in place
            rotation_acceleration: Angular acceleration in body frame (3,)
            dt: Time step, strictly positive

        Returns:
            (position, velocity, orientation, rotation_velocity) after the step
        """
        acceleration = np.asarray(acceleration, dtype=np.float64)
        rotation_acceleration = np.asarray(rotation_acceleration, dtype=np.float64)

        # p_k+1 = p_k + v_k * dt + 0.5 * a * dt^2, v_k+1 = v_k + a * dt
        position += velocity * dt + 0.5 * acceleration * dt**2
        velocity += acceleration * dt

        # Mean angular velocity over the step, second order in dt
        rotation_vector = rotation_velocity * dt + 0.5 * rotation_acceleration * dt**2
        rotation_velocity += rotation_acceleration * dt

        orientation = _compose(orientation, rotation_vector)
        return position, velocity, orientation, rotation_velocity

    @staticmethod
    def integrate_configuration(position: np.ndarray,
                                orientation: Orientation,
                                velocity: np.ndarray,
                                rotation_velocity: np.ndarray,
                                dt: float) -> Tuple[np.ndarray, Orientation]:
        """
        Integrate position/orientation given constant velocities.

        Args:
            position: Position in world frame (3,) float64, updated in place
            orientation: Rotation matrix (3, 3) or Quaternion, updated in place
            velocity: Velocity in world frame (3,)
            rotation_velocity: Angular velocity in body frame (3,)
            dt: Time step, strictly positive

        Returns:
            (position, orientation) after the step
        """
        position += np.asarray(velocity, dtype=np.float64) * dt
        rotation_vector = np.asarray(rotation_velocity, dtype=np.float64) * dt
        orientation = _compose(orientation, rotation_vector)
        return position, orientation


def _compose(orientation: Orientation, rotation_vector: np.ndarray) -> Orientation:
    """Right-multiply orientation by exp(rotation_vector) in place."""
    if isinstance(orientation, Quaternion):
        dq = rotation_vector_to_quaternion(rotation_vector)
        orientation.assign(orientation.multiply(dq))
        orientation.normalize()
        return orientation

    dR = rotation_vector_to_matrix(rotation_vector)
    orientation[:] = orthonormalize(orientation @ dR)
    return orientation


integrate_kinematics = RigidBodyKinematics.integrate_kinematics
integrate_configuration = RigidBodyKinematics.integrate_configuration
