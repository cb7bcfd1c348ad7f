"""Small container types: a stack, a FIFO queue and thread-safe maps and sets."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Hashable, Iterator


class Stack:
    """Last-in first-out stack."""

    def __init__(self) -> None:
        self._items: list[Any] = []

    def push(self, value: Any) -> None:
        """Put a value on top of the stack."""
        self._items.append(value)

    def pop(self) -> Any:
        """Remove and return the top value, or None when the stack is empty."""
        if not self._items:
            return None
        return self._items.pop()

    def peek(self) -> Any:
        """Return the top value without removing it, or None when empty."""
        if not self._items:
            return None
        return self._items[-1]

    def empty(self) -> bool:
        """Return True when the stack holds no values."""
        return not self._items

    def __len__(self) -> int:
        return len(self._items)


class Queue:
    """First-in first-out queue."""

    def __init__(self) -> None:
        self._items: deque[Any] = deque()

    def push(self, item: Any) -> None:
        """Append an item to the back of the queue."""
        self._items.append(item)

    def pop(self) -> Any:
        """Remove and return the front item, or None when the queue is empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)


class ConcurrentMap:
    """Dictionary guarded by a lock so it can be shared between threads."""

    def __init__(self) -> None:
        self._data: dict[Hashable, Any] = {}
        self._lock = threading.RLock()

    def get(self, key: Hashable) -> Any:
        """Return the value stored under key, or None when it is absent."""
        with self._lock:
            return self._data.get(key)

    def put(self, key: Hashable, value: Any) -> None:
        """Store value under key, replacing any previous value."""
        with self._lock:
            self._data[key] = value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def keys(self) -> list[Hashable]:
        """Return a snapshot of all keys."""
        with self._lock:
            return list(self._data)


class ConcurrentSet:
    """Set guarded by a lock so it can be shared between threads."""

    def __init__(self) -> None:
        self._data: set[Hashable] = set()
        self._lock = threading.RLock()

    def put(self, item: Hashable) -> None:
        """Add an item to the set."""
        with self._lock:
            self._data.add(item)

    def get(self) -> Any:
        """Return an arbitrary element of the set, or None when it is empty."""
        with self._lock:
            return next(iter(self._data), None)

    def __contains__(self, item: object) -> bool:
        with self._lock:
            return item in self._data

    def remove(self, item: Hashable) -> None:
        """Remove an item if present; absent items are ignored."""
        with self._lock:
            self._data.discard(item)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def to_list(self) -> list[Hashable]:
        """Return a snapshot of the elements as a list."""
        with self._lock:
            return list(self._data)


class MultiMap:
    """Two-level thread-safe map: a primary key maps to a table of secondary keys."""

    def __init__(self) -> None:
        self._data: dict[Hashable, dict[Hashable, Any]] = {}
        self._lock = threading.RLock()

    def keys(self) -> list[Hashable]:
        """Return a snapshot of the primary keys."""
        with self._lock:
            return list(self._data)

    def secondary_keys(self, key: Hashable) -> list[Hashable]:
        """Return the secondary keys stored under a primary key."""
        with self._lock:
            return list(self._data.get(key, {}))

    def get(self, key: Hashable, key2: Hashable) -> Any:
        """Return the value at (key, key2), or None when absent."""
        with self._lock:
            return self._data.get(key, {}).get(key2)

    def put(self, key: Hashable, key2: Hashable, value: Any) -> None:
        """Store a value at (key, key2)."""
        with self._lock:
            self._data.setdefault(key, {})[key2] = value

    def _iter_items(self) -> Iterator[tuple[Hashable, Hashable, Any]]:
        with self._lock:
            snapshot = [(k, k2, v) for k, inner in self._data.items() for k2, v in inner.items()]
        yield from snapshot