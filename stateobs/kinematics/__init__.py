"""
Rigid-body kinematics integrators.
"""
from .rigid_body import (
    RigidBodyKinematics,
    integrate_kinematics,
    integrate_configuration,
)

__all__ = [
    'RigidBodyKinematics',
    'integrate_kinematics',
    'integrate_configuration',
]
