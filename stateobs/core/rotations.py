"""
Rotation primitives shared by the kinematics integrator and the dynamics models.

Rotations are handled in two interchangeable representations:
- 3x3 rotation matrices (orthonormal, determinant +1)
- unit quaternions (w, x, y, z)

Both use the same exponential map with the same degenerate-angle threshold,
so integrating the same rotation vector gives the same rotation in either form.
"""
import numpy as np
from .types import Quaternion


# Below this angle a rotation vector is treated as the identity rotation
EPSILON_ANGLE = 1e-16


def skew_symmetric(v: np.ndarray) -> np.ndarray:
    """Create skew-symmetric matrix from vector."""
    return np.array([
        [0, -v[2], v[1]],
        [v[2], 0, -v[0]],
        [-v[1], v[0], 0]
    ])


def rotation_matrix_x(angle: float) -> np.ndarray:
    """Rotation matrix around x-axis."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [1, 0, 0],
        [0, c, -s],
        [0, s, c]
    ])


def rotation_matrix_z(angle: float) -> np.ndarray:
    """Rotation matrix around z-axis."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, -s, 0],
        [s, c, 0],
        [0, 0, 1]
    ])


def rotation_vector_to_matrix(rotation_vector: np.ndarray) -> np.ndarray:
    """
    Exponential map of a rotation vector to a rotation matrix (Rodrigues).

    Args:
        rotation_vector: Axis times angle (3,)

    Returns:
        Rotation matrix (3, 3); identity when the angle is below EPSILON_ANGLE
    """
    rotation_vector = np.asarray(rotation_vector, dtype=np.float64)
    angle = np.linalg.norm(rotation_vector)
    if angle <= EPSILON_ANGLE:
        return np.eye(3)

    K = skew_symmetric(rotation_vector / angle)
    return np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * (K @ K)


def rotation_vector_to_quaternion(rotation_vector: np.ndarray) -> Quaternion:
    """
    Exponential map of a rotation vector to a unit quaternion.

    Args:
        rotation_vector: Axis times angle (3,)

    Returns:
        Unit quaternion; identity when the angle is below EPSILON_ANGLE
    """
    rotation_vector = np.asarray(rotation_vector, dtype=np.float64)
    angle = np.linalg.norm(rotation_vector)
    if angle <= EPSILON_ANGLE:
        return Quaternion.identity()

    axis = rotation_vector / angle
    half_angle = angle / 2
    s = np.sin(half_angle)
    return Quaternion(
        w=np.cos(half_angle),
        x=axis[0] * s,
        y=axis[1] * s,
        z=axis[2] * s
    )


def quaternion_to_rotation_vector(q: Quaternion) -> np.ndarray:
    """
    Logarithm map of a unit quaternion.

    Returns:
        Rotation vector with angle in [0, pi]
    """
    w, xyz = q.w, np.array([q.x, q.y, q.z])
    # q and -q are the same rotation, keep the short way round
    if w < 0:
        w, xyz = -w, -xyz

    sin_half = np.linalg.norm(xyz)
    if sin_half <= EPSILON_ANGLE:
        return 2.0 * xyz

    angle = 2.0 * np.arctan2(sin_half, w)
    return xyz / sin_half * angle


def matrix_to_rotation_vector(R: np.ndarray) -> np.ndarray:
    """Logarithm map of a rotation matrix."""
    return quaternion_to_rotation_vector(Quaternion.from_rotation_matrix(R))


def orthonormalize(R: np.ndarray) -> np.ndarray:
    """
    Project a nearly orthonormal matrix back onto the rotation group.

    Args:
        R: 3x3 matrix close to a rotation

    Returns:
        Closest rotation matrix in the Frobenius sense
    """
    U, _, Vt = np.linalg.svd(R)
    R_ortho = U @ Vt
    if np.linalg.det(R_ortho) < 0:
        U[:, -1] = -U[:, -1]
        R_ortho = U @ Vt
    return R_ortho


def is_rotation_matrix(R: np.ndarray, atol: float = 1e-9) -> bool:
    """Check orthonormality and positive determinant."""
    R = np.asarray(R)
    if R.shape != (3, 3):
        return False
    return bool(
        np.allclose(R.T @ R, np.eye(3), atol=atol)
        and abs(np.linalg.det(R) - 1.0) <= atol
    )
