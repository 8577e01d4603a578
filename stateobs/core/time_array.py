"""
Time-indexed vector sequences.

A DiscreteTimeArray stores one vector per integer time index. Indices are
contiguous: a value can only be appended right after the last one, which
is how measurement and input histories are kept.
"""
import numpy as np
from collections import deque
from typing import Deque, Iterator, Optional, Tuple

from .errors import OrderingError


class DiscreteTimeArray:
    """
    Contiguous sequence of (time index, vector) pairs.

    Consumed entries can be dropped from the front. The next expected index
    is remembered across drops so chronological order keeps being enforced;
    only clear() forgets it.
    """

    def __init__(self):
        self._values: Deque[np.ndarray] = deque()
        self._first_time: Optional[int] = None
        self._next_time: Optional[int] = None

    def push_back(self, value: np.ndarray, k: int):
        """
        Append a vector at time index k.

        Args:
            value: Vector value
            k: Time index, must be exactly one after the last index

        Raises:
            OrderingError: if k would leave a gap or go backwards
        """
        k = int(k)
        if self._next_time is not None and k != self._next_time:
            raise OrderingError(k, self._next_time)

        if not self._values:
            self._first_time = k
        self._values.append(np.array(value, dtype=np.float64))
        self._next_time = k + 1

    def __getitem__(self, k: int) -> np.ndarray:
        if k not in self:
            raise KeyError(f"No value at time index {k}")
        return self._values[k - self._first_time]

    def __contains__(self, k: int) -> bool:
        return bool(self._values) and self._first_time <= k < self._next_time

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(range(self._first_time, self._next_time) if self._values else ())

    @property
    def first_time(self) -> Optional[int]:
        """Index of the oldest stored value, None when empty."""
        return self._first_time if self._values else None

    @property
    def last_time(self) -> Optional[int]:
        """Index of the newest stored value, None when empty."""
        return self._next_time - 1 if self._values else None

    @property
    def next_time(self) -> Optional[int]:
        """Index the next pushed value must have, None when unconstrained."""
        return self._next_time

    def covers(self, first: int, last: int) -> bool:
        """True if every index in [first, last] is stored."""
        return self.missing_in(first, last) is None

    def missing_in(self, first: int, last: int) -> Optional[int]:
        """Smallest index of [first, last] that is not stored, or None."""
        if last < first:
            return None
        if not self._values or first < self._first_time:
            return first
        if last >= self._next_time:
            return max(first, self._next_time)
        return None

    def pop_front(self) -> Tuple[int, np.ndarray]:
        """Remove and return the oldest (time, value) pair."""
        if not self._values:
            raise IndexError("pop from an empty DiscreteTimeArray")
        k = self._first_time
        value = self._values.popleft()
        self._first_time = k + 1
        return k, value

    def drop_before(self, k: int):
        """Drop every value with a time index strictly below k."""
        while self._values and self._first_time < k:
            self.pop_front()

    def clear(self):
        """Remove all values and forget the expected next index."""
        self._values.clear()
        self._first_time = None
        self._next_time = None

    def items(self) -> Iterator[Tuple[int, np.ndarray]]:
        for i, value in enumerate(self._values):
            yield self._first_time + i, value

    def segment(self, first: int, last: int) -> 'DiscreteTimeArray':
        """Copy of the values with indices in [first, last]."""
        out = DiscreteTimeArray()
        for k in range(first, last + 1):
            out.push_back(self[k].copy(), k)
        return out

    def to_matrix(self) -> np.ndarray:
        """Stack values as rows, shape (len, dim)."""
        if not self._values:
            return np.empty((0, 0))
        return np.vstack(list(self._values))

    def __repr__(self) -> str:
        if not self._values:
            return "DiscreteTimeArray(empty)"
        return f"DiscreteTimeArray([{self.first_time}..{self.last_time}], {len(self)} values)"
