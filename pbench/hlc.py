"""Hybrid logical clock and its timestamps."""

from __future__ import annotations

import struct
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

_INT16_MAX = 2**15 - 1
_INT64_MAX = 2**63 - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _int16(value: int) -> int:
    return ((value + 2**15) % 2**16) - 2**15


def _int64(value: int) -> int:
    return ((value + 2**63) % 2**64) - 2**63


def current_time_ms() -> int:
    """Return wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, order=True)
class Timestamp:
    """Physical time plus a 16-bit logical counter."""

    physical_time: int
    logical_time: int = 0

    def to_int64(self) -> int:
        """Pack into one integer: physical time shifted left 16, logical below."""
        return _int64((self.physical_time << 16) | self.logical_time)

    def to_bytes(self) -> bytes:
        """Return the packed integer as 8 little-endian bytes."""
        return struct.pack("<q", self.to_int64())

    @classmethod
    def from_int64(cls, value: int) -> Timestamp:
        """Unpack a value produced by to_int64."""
        return cls(value >> 16, _int16(value & 0xFFFF))

    @classmethod
    def from_bytes(cls, data: bytes) -> Timestamp:
        """Unpack the first 8 little-endian bytes. Raises struct.error if shorter."""
        (value,) = struct.unpack_from("<q", data)
        return cls.from_int64(value)

    def compare(self, other: Timestamp) -> int:
        """Return -1, 0 or 1 comparing physical then logical time."""
        return (self > other) - (self < other)

    def to_datetime(self) -> datetime:
        """Interpret the physical time as nanoseconds since the epoch (UTC)."""
        return _EPOCH + timedelta(microseconds=self.physical_time // 1000)

    def __str__(self) -> str:
        return f"<{self.physical_time}, {self.logical_time}>"


MAX_TIMESTAMP = Timestamp(_INT64_MAX, _INT16_MAX)
MIN_TIMESTAMP = Timestamp(0, 0)


class HLC:
    """Thread-safe hybrid logical clock."""

    def __init__(
        self,
        physical_time: Optional[int] = None,
        clock: Callable[[], int] = current_time_ms,
    ) -> None:
        self._clock = clock
        start = clock() if physical_time is None else physical_time
        self._current = Timestamp(start, 0)
        self._lock = threading.Lock()

    def read_clock(self) -> Timestamp:
        """Return the current timestamp without ticking."""
        return self._current

    def _tick_logical(self, base: Timestamp, logical: int) -> Timestamp:
        return Timestamp(base.physical_time, _int16(logical + 1))

    def now(self) -> Timestamp:
        """Advance the clock for a local event and return the new timestamp."""
        with self._lock:
            pt = self._clock()
            current = self._current
            if current.physical_time >= pt:
                self._current = self._tick_logical(current, current.logical_time)
            else:
                self._current = Timestamp(pt, 0)
            return self._current

    def update(self, timestamp: Timestamp) -> Timestamp:
        """Merge a received timestamp into the clock and return the new value."""
        with self._lock:
            pt = self._clock()
            current = self._current
            if pt > current.physical_time and pt > timestamp.physical_time:
                self._current = Timestamp(pt, 0)
            elif timestamp.physical_time > current.physical_time:
                self._current = Timestamp(
                    timestamp.physical_time, _int16(timestamp.logical_time + 1)
                )
            elif current.physical_time > timestamp.physical_time:
                self._current = self._tick_logical(current, current.logical_time)
            else:
                logical = max(current.logical_time, timestamp.logical_time)
                self._current = self._tick_logical(current, logical)
            return self._current