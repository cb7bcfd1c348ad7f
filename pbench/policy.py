"""Access-pattern policies that signal when data should move to another zone."""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from pbench.ids import NodeID


class Policy(ABC):
    """Records accesses and returns the id to migrate to, or None."""

    @abstractmethod
    def hit(self, node_id: NodeID) -> Optional[NodeID]:
        """Record an access from node_id."""


class NullPolicy(Policy):
    """Never signals a migration."""

    def hit(self, node_id: NodeID) -> Optional[NodeID]:
        return None


class ConsecutivePolicy(Policy):
    """Signals after n consecutive accesses from the same id."""

    def __init__(self, n: int) -> None:
        self.n = n
        self._last: Optional[NodeID] = None
        self._hits = 0

    def hit(self, node_id: NodeID) -> Optional[NodeID]:
        if node_id == self._last:
            self._hits += 1
        else:
            self._last = node_id
            self._hits = 1
        if self._hits >= self.n:
            result = self._last
            self._last = None
            self._hits = 0
            return result
        return None


class MajorityPolicy(Policy):
    """Signals the id holding at least half of the accesses in each interval."""

    def __init__(self, interval: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = interval
        self._clock = clock
        self._hits: dict[NodeID, int] = {}
        self._sum = 0
        self._start = clock()

    def hit(self, node_id: NodeID) -> Optional[NodeID]:
        self._hits[node_id] = self._hits.get(node_id, 0) + 1
        self._sum += 1
        result = None
        if self._sum > 1 and self._clock() - self._start >= self.interval:
            half = self._sum // 2
            qualifying = [(count, nid) for nid, count in self._hits.items() if count >= half]
            if qualifying:
                result = max(qualifying, key=lambda pair: pair[0])[1]
            self._reset()
        return result

    def _reset(self) -> None:
        self._hits = dict.fromkeys(self._hits, 0)
        self._sum = 0
        self._start = self._clock()


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class EmaPolicy(Policy):
    """Exponential moving average of the accessing zone."""

    def __init__(self, alpha: float, epsilon: float = 0.1) -> None:
        self.alpha = alpha
        self.epsilon = epsilon
        self._s = 0.0
        self._zone = 0

    def hit(self, node_id: NodeID) -> Optional[NodeID]:
        if self._s == 0:
            self._s = float(node_id.zone())
            return None
        self._s = self.alpha * node_id.zone() + (1 - self.alpha) * self._s
        nearest = _round_half_away(self._s)
        if abs(self._s - nearest) > self.epsilon:
            return None
        if nearest != self._zone:
            self._zone = nearest
            return NodeID.of(nearest, 1)
        return None


def new_policy(policy: str, threshold: float) -> Policy:
    """Create a policy by name. Raises ValueError for an unknown name."""
    if policy in ("", "null"):
        return NullPolicy()
    if policy == "consecutive":
        return ConsecutivePolicy(int(threshold))
    if policy == "majority":
        return MajorityPolicy(int(threshold))
    if policy == "ema":
        return EmaPolicy(threshold)
    raise ValueError(f"unknown policy name {policy}")