"""Millisecond-timestamp record IDs that never go backwards"""

import threading
import time
from typing import Callable, Iterable, List, Optional


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class MonotonicIdGenerator:
    """
    Issues string IDs from the wall clock in milliseconds, bumped by one
    whenever the clock has not advanced past the last issued (or persisted) ID.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, after: Iterable = ()) -> str:
        """
        Args:
            after: Existing IDs the new one must sort after

        Returns:
            New ID as a decimal string
        """
        return self.reserve(1, after)[0]

    def reserve(self, count: int, after: Iterable = ()) -> List[str]:
        """Issue ``count`` consecutive IDs"""
        floor = max((_as_int(existing) for existing in after), default=0)
        with self._lock:
            first = max(self._clock(), self._last + 1, floor + 1)
            self._last = first + count - 1
            return [str(first + offset) for offset in range(count)]


default_id_generator = MonotonicIdGenerator()
