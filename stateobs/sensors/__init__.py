"""
Sensor models for stateobs.
"""
from .imu_model import IMUDynamicalSystem
from .noise import GaussianWhiteNoise

__all__ = [
    'IMUDynamicalSystem',
    'GaussianWhiteNoise',
]
