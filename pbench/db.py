"""Key-value commands and an in-memory, optionally multi-version, database."""

from __future__ import annotations

import base64
import hashlib
import json
import struct
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional

from pbench.config import get_config
from pbench.ids import NodeID


class CommandType(IntEnum):
    READ = 0
    WRITE = 1
    DELETE = 2
    IMMEDIATE_READ = 3
    ONE_NODE_READ = 4
    CONFIG = 5


@dataclass(eq=False)
class Command:
    """A single key-value operation issued by a client."""

    key: int = 0
    value: Optional[bytes] = None
    type: CommandType = CommandType.READ
    client_id: NodeID = NodeID(0)
    command_id: int = 0

    def empty(self) -> bool:
        """Return True when the command carries no data at all."""
        return (
            self.key == 0
            and self.value is None
            and self.client_id == 0
            and self.command_id == 0
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Command):
            return NotImplemented
        return (
            self.key == other.key
            and (self.value or b"") == (other.value or b"")
            and self.client_id == other.client_id
            and self.command_id == other.command_id
        )

    __hash__ = None  # type: ignore[assignment]

    def hash(self) -> str:
        """Return base64 of SHA-1 over the little-endian key and the value."""
        digest = hashlib.sha1()
        digest.update(struct.pack("<I", self.key & 0xFFFFFFFF))
        digest.update(self.value or b"")
        return base64.b64encode(digest.digest()).decode("ascii")

    def __str__(self) -> str:
        client = NodeID(self.client_id)
        if self.type is CommandType.READ:
            return f"Get{{key={self.key} id={client} cid={self.command_id}}}"
        if self.type is CommandType.WRITE:
            value = (self.value or b"").hex()
            return f"Put{{key={self.key} value={value} id={client} cid={self.command_id}}}"
        if self.type is CommandType.ONE_NODE_READ:
            return f"OneNodeRead{{key={self.key} id={client} cid={self.command_id}}}"
        if self.type is CommandType.IMMEDIATE_READ:
            return f"CmdImmediateRead{{key={self.key} id={client} cid={self.command_id}}}"
        return f"Delete{{key={self.key} id={client} cid={self.command_id}"


class Database:
    """Thread-safe key-value store that can keep every written value."""

    def __init__(self, multiversion: Optional[bool] = None) -> None:
        self._lock = threading.RLock()
        self._data: dict[int, bytes] = {}
        self._version = 0
        self._multiversion = get_config().multiversion if multiversion is None else multiversion
        self._history: dict[int, list[bytes]] = {}

    def execute(self, command: Command) -> Optional[bytes]:
        """Apply a command's value to its key and return the previous value."""
        with self._lock:
            previous = self._data.get(command.key)
            self._put(command.key, command.value)
            return previous

    def get(self, key: int) -> Optional[bytes]:
        """Return the current value of key, or None."""
        with self._lock:
            return self._data.get(key)

    def _put(self, key: int, value: Optional[bytes]) -> None:
        if value is None:
            return
        self._data[key] = value
        self._version += 1
        if self._multiversion:
            self._history.setdefault(key, []).append(value)

    def put(self, key: int, value: Optional[bytes]) -> None:
        """Store value under key; a None value is ignored."""
        with self._lock:
            self._put(key, value)

    def version(self, key: int) -> int:
        """Return the number of writes applied to the database."""
        with self._lock:
            return self._version

    def history(self, key: int) -> list[bytes]:
        """Return every value written to key, oldest first (multi-version only)."""
        with self._lock:
            return list(self._history.get(key, ()))

    def __str__(self) -> str:
        with self._lock:
            encoded = {
                str(key): base64.b64encode(value).decode("ascii")
                for key, value in self._data.items()
            }
        return json.dumps(encoded, sort_keys=True, separators=(",", ":"))


def conflict(gamma: Command, delta: Command) -> bool:
    """Return True if reordering the two commands may change the resulting state."""
    return gamma.key == delta.key and (
        gamma.type is not CommandType.READ or delta.type is not CommandType.READ
    )


def conflict_batch(batch1: Iterable[Command], batch2: Iterable[Command]) -> bool:
    """Return True if any command of batch1 conflicts with any of batch2."""
    second = list(batch2)
    return any(conflict(a, b) for a in batch1 for b in second)