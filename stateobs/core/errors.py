"""
Exception hierarchy for state observation.
"""


class StateObservationError(Exception):
    """Base class of all errors raised by stateobs."""


class CausalityError(StateObservationError, ValueError):
    """Estimate requested at or before the observer's current time."""

    def __init__(self, requested: int, current: int):
        self.requested = requested
        self.current = current
        super().__init__(
            f"Cannot estimate state at time {requested}: current time is {current}, "
            f"only strictly future states can be estimated"
        )


class InsufficientDataError(StateObservationError, LookupError):
    """Measurements or inputs needed to reach the requested time are missing."""

    def __init__(self, kind: str, missing: int, requested: int):
        self.kind = kind
        self.missing = missing
        self.requested = requested
        super().__init__(
            f"Cannot estimate state at time {requested}: {kind} at time {missing} is not set"
        )


class OrderingError(StateObservationError, ValueError):
    """Time-indexed values inserted out of chronological order or with a gap."""

    def __init__(self, given: int, expected: int):
        self.given = given
        self.expected = expected
        super().__init__(
            f"Time index {given} breaks chronological order, expected {expected}"
        )


class StateNotSetError(StateObservationError, RuntimeError):
    """The observer has no state to start the estimation from."""


class DimensionError(StateObservationError, ValueError):
    """A vector does not have the size the observer was built for."""

    def __init__(self, name: str, expected: int, shape: tuple):
        self.name = name
        self.expected = expected
        self.shape = shape
        super().__init__(f"{name} vector must have size {expected}, got shape {shape}")
