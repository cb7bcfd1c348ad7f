"""Linearizability checker for the history of a single key."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pbench.graph import Graph
from pbench.operation import Operation

logger = logging.getLogger("pbench")


def _same_value(a: Optional[bytes], b: Optional[bytes]) -> bool:
    return (a or b"") == (b or b"")


class Checker:
    """Builds a happens-before graph of operations and reports reads that form cycles."""

    def __init__(self) -> None:
        self._graph = Graph()

    def _add(self, op: Operation) -> None:
        if op in self._graph:
            return  # already added by lookahead
        self._graph.add(op)
        for vertex in self._graph.vertices():
            if vertex is not op and vertex.happens_before(op):
                self._graph.add_edge(vertex, op)

    def _match(self, read: Operation) -> Optional[Operation]:
        for vertex in self._graph.vertices():
            if _same_value(read.output, vertex.input):
                return vertex
        return None

    def _merge(self, read: Operation, write: Operation) -> None:
        for source in self._graph.predecessors(read):
            if source is not write:
                self._graph.add_edge(source, write)
        if read.end < write.end:
            write.end = read.end
        self._graph.remove(read)

    def linearizable(self, history: Iterable[Operation]) -> list[Operation]:
        """Return the read operations that violate linearizability.

        Write operations may have their end time narrowed to that of a
        matching read.
        """
        self._graph = Graph()
        ordered = sorted(history, key=lambda op: op.start)
        anomalies: list[Operation] = []
        for i, op in enumerate(ordered):
            self._add(op)
            if op.input is not None:
                continue
            for later in ordered[i + 1:]:
                if not op.concurrent(later):
                    break
                if later.output is None:
                    self._add(later)

            match = self._match(op)
            if match is not None:
                self._merge(op, match)

            cycle = self._graph.cycle()
            if cycle is not None:
                logger.debug("Anomaly on object %s", op)
                anomalies.append(op)
                for u in cycle:
                    for v in cycle:
                        if v in self._graph.successors(u) and u.start > v.end:
                            self._graph.remove_edge(u, v)
        return anomalies