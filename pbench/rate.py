"""Rate limiter that spaces calls evenly over time."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

_NS_PER_SECOND = 1_000_000_000


class Limiter:
    """Blocks callers of wait() so that calls proceed at about rate per second.

    Time behind schedule can be caught up later, up to ten intervals.
    """

    def __init__(
        self,
        rate: int,
        clock: Callable[[], int] = time.monotonic_ns,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self._clock = clock
        self._sleep_fn = sleep
        self._lock = threading.Lock()
        self._interval = _NS_PER_SECOND // rate
        self._slack = -(10 * _NS_PER_SECOND // rate)
        self._sleep = 0
        self._last: Optional[int] = None

    def wait(self) -> None:
        """Block until the next call is allowed."""
        with self._lock:
            now = self._clock()
            if self._last is None:
                self._last = now
                return

            self._sleep += self._interval - (now - self._last)
            self._sleep = max(self._sleep, self._slack)

            if self._sleep > 0:
                self._sleep_fn(self._sleep / _NS_PER_SECOND)
                self._last = now + self._sleep
                self._sleep = 0
            else:
                self._last = now