"""Request Ids — per-attempt correlation identifiers.

Invariants:
    - next() never repeats within a process: the counter strictly increases
    - Format is req_<epoch-ms>_<counter>; uniqueness across restarts is not required
"""

import itertools
import time
from typing import Callable


class RequestIdGenerator:
    """Produces a distinct correlation id per call."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._counter = itertools.count(1)
        self._issued = 0

    def next(self) -> str:
        self._issued = next(self._counter)
        return f"req_{int(self._clock() * 1000)}_{self._issued}"

    @property
    def issued(self) -> int:
        """How many ids have been handed out."""
        return self._issued
