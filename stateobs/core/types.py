"""
Data type definitions for rigid-body state observation.
"""
import numpy as np
from dataclasses import dataclass


@dataclass
class Quaternion:
    """Unit quaternion representation for rotation (w, x, y, z)."""
    w: float
    x: float
    y: float
    z: float

    def __post_init__(self):
        self.w = float(self.w)
        self.x = float(self.x)
        self.y = float(self.y)
        self.z = float(self.z)
        self.normalize()

    def normalize(self) -> 'Quaternion':
        """Rescale to unit norm in place."""
        norm = np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2)
        if norm > 0:
            self.w /= norm
            self.x /= norm
            self.y /= norm
            self.z /= norm
        return self

    @property
    def norm(self) -> float:
        return float(np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2))

    def to_rotation_matrix(self) -> np.ndarray:
        """Convert quaternion to rotation matrix."""
        w, x, y, z = self.w, self.x, self.y, self.z

        return np.array([
            [1 - 2*(y*y + z*z), 2*(x*y - w*z), 2*(x*z + w*y)],
            [2*(x*y + w*z), 1 - 2*(x*x + z*z), 2*(y*z - w*x)],
            [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x*x + y*y)]
        ])

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [w, x, y, z]."""
        return np.array([self.w, self.x, self.y, self.z])

    def to_rotation_vector(self) -> np.ndarray:
        """Axis times angle, with the angle in [0, pi]."""
        from .rotations import quaternion_to_rotation_vector
        return quaternion_to_rotation_vector(self)

    def multiply(self, other: 'Quaternion') -> 'Quaternion':
        """Hamilton product self * other."""
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z

        return Quaternion(
            w=w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            x=w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            y=w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            z=w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2
        )

    def __mul__(self, other: 'Quaternion') -> 'Quaternion':
        return self.multiply(other)

    def conjugate(self) -> 'Quaternion':
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def copy(self) -> 'Quaternion':
        return Quaternion(self.w, self.x, self.y, self.z)

    def assign(self, other: 'Quaternion'):
        """Overwrite the components with those of another quaternion."""
        self.w, self.x, self.y, self.z = other.w, other.x, other.y, other.z

    def is_close(self, other: 'Quaternion', atol: float = 1e-9) -> bool:
        """True if both represent the same rotation (q and -q are equal)."""
        dot = abs(np.dot(self.to_array(), other.to_array()))
        return bool(abs(1.0 - dot) <= atol)

    @staticmethod
    def from_rotation_matrix(R: np.ndarray) -> 'Quaternion':
        """Create quaternion from rotation matrix."""
        trace = np.trace(R)

        if trace > 0:
            s = 0.5 / np.sqrt(trace + 1.0)
            w = 0.25 / s
            x = (R[2, 1] - R[1, 2]) * s
            y = (R[0, 2] - R[2, 0]) * s
            z = (R[1, 0] - R[0, 1]) * s
        elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
            s = 2.0 * np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
            w = (R[2, 1] - R[1, 2]) / s
            x = 0.25 * s
            y = (R[0, 1] + R[1, 0]) / s
            z = (R[0, 2] + R[2, 0]) / s
        elif R[1, 1] > R[2, 2]:
            s = 2.0 * np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
            w = (R[0, 2] - R[2, 0]) / s
            x = (R[0, 1] + R[1, 0]) / s
            y = 0.25 * s
            z = (R[1, 2] + R[2, 1]) / s
        else:
            s = 2.0 * np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
            w = (R[1, 0] - R[0, 1]) / s
            x = (R[0, 2] + R[2, 0]) / s
            y = (R[1, 2] + R[2, 1]) / s
            z = 0.25 * s

        return Quaternion(w, x, y, z)

    @staticmethod
    def from_rotation_vector(rotation_vector: np.ndarray) -> 'Quaternion':
        """Exponential map of a rotation vector (axis times angle)."""
        from .rotations import rotation_vector_to_quaternion
        return rotation_vector_to_quaternion(rotation_vector)

    @staticmethod
    def identity() -> 'Quaternion':
        """Return identity quaternion."""
        return Quaternion(1.0, 0.0, 0.0, 0.0)
