"""Consistent-hash ring keyed by MD5 digests."""

from __future__ import annotations

import bisect
import hashlib
from typing import Any


class HashRing:
    """Ring of values ordered by the MD5 digest of their bytes."""

    def __init__(self) -> None:
        self._hashes: list[bytes] = []
        self._values: list[Any] = []

    def insert(self, value: Any, data: bytes) -> None:
        """Place value on the ring at the digest of data."""
        digest = hashlib.md5(data).digest()
        position = bisect.bisect_left(self._hashes, digest)
        self._hashes.insert(position, digest)
        self._values.insert(position, value)

    def get(self, key: bytes) -> Any:
        """Return the value that owns key. Raises LookupError on an empty ring."""
        if not self._values:
            raise LookupError("hash ring is empty")
        digest = hashlib.md5(key).digest()
        # The last node is never chosen directly; lookups past it wrap to the head.
        for node_hash, value in zip(self._hashes[:-1], self._values[:-1]):
            if digest < node_hash:
                return value
        return self._values[0]

    def next(self, value: Any) -> Any:
        """Return the value following value on the ring, or None if it is absent."""
        for position, candidate in enumerate(self._values):
            if candidate == value:
                return self._values[(position + 1) % len(self._values)]
        return None

    def __str__(self) -> str:
        return "".join(f"{value} -> " for value in self._values)