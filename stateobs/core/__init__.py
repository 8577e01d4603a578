"""
Core components for stateobs.
"""
from .types import Quaternion

from .rotations import (
    EPSILON_ANGLE,
    skew_symmetric,
    rotation_matrix_x,
    rotation_matrix_z,
    rotation_vector_to_matrix,
    rotation_vector_to_quaternion,
    quaternion_to_rotation_vector,
    matrix_to_rotation_vector,
    orthonormalize,
    is_rotation_matrix
)

from .time_array import DiscreteTimeArray

from .errors import (
    StateObservationError,
    CausalityError,
    InsufficientDataError,
    OrderingError,
    StateNotSetError,
    DimensionError
)

__all__ = [
    # Types
    'Quaternion',
    # Rotations
    'EPSILON_ANGLE',
    'skew_symmetric',
    'rotation_matrix_x',
    'rotation_matrix_z',
    'rotation_vector_to_matrix',
    'rotation_vector_to_quaternion',
    'quaternion_to_rotation_vector',
    'matrix_to_rotation_vector',
    'orthonormalize',
    'is_rotation_matrix',
    # Time arrays
    'DiscreteTimeArray',
    # Errors
    'StateObservationError',
    'CausalityError',
    'InsufficientDataError',
    'OrderingError',
    'StateNotSetError',
    'DimensionError',
]
