"""
Time-indexed recursive observers.
"""
from .base import EstimationStep, ObserverBase, OneStepEstimator
from .zero_delay import ZeroDelayObserver

__all__ = [
    'EstimationStep',
    'ObserverBase',
    'OneStepEstimator',
    'ZeroDelayObserver',
]
