"""
stateobs: zero-delay state observation for rigid bodies

Time-indexed recursive observers and rigid-body kinematics integrators.
"""

__version__ = "0.1.0"

from . import core
from . import kinematics
from . import observer
from . import sensors
from . import filter

__all__ = ['core', 'kinematics', 'observer', 'sensors', 'filter']
