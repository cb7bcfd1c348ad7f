"""Directed graph with traversal, cycle detection and strongly connected components."""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Hashable, Iterator, Optional


class _Color(Enum):
    WHITE = 0  # unvisited
    GRAY = 1  # on the current path
    BLACK = 2  # finished


class Graph:
    """Directed graph over hashable vertices; self edges are not allowed."""

    def __init__(self) -> None:
        # Dicts with None values keep insertion order for deterministic traversal.
        self._succ: dict[Hashable, dict[Hashable, None]] = {}
        self._pred: dict[Hashable, dict[Hashable, None]] = {}

    def __len__(self) -> int:
        return len(self._succ)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._succ

    def add(self, vertex: Hashable) -> None:
        """Add a vertex; adding an existing vertex does nothing."""
        if vertex not in self._succ:
            self._succ[vertex] = {}
            self._pred[vertex] = {}

    def remove(self, vertex: Hashable) -> None:
        """Remove a vertex together with all edges touching it."""
        if vertex not in self._succ:
            return
        for target in self._succ.pop(vertex):
            self._pred[target].pop(vertex, None)
        for source in self._pred.pop(vertex):
            self._succ[source].pop(vertex, None)

    def add_edge(self, source: Hashable, target: Hashable) -> None:
        """Add an edge, creating missing vertices. Raises ValueError on a self edge."""
        if source == target:
            raise ValueError("graph: adding self edge")
        self.add(source)
        self.add(target)
        self._succ[source][target] = None
        self._pred[target][source] = None

    def remove_edge(self, source: Hashable, target: Hashable) -> None:
        """Remove an edge if both ends exist."""
        if source not in self._succ or target not in self._succ:
            return
        self._succ[source].pop(target, None)
        self._pred[target].pop(source, None)

    def vertices(self) -> list[Hashable]:
        """Return all vertices in insertion order."""
        return list(self._succ)

    def successors(self, vertex: Hashable) -> set[Hashable]:
        """Return the vertices reachable directly from vertex."""
        return set(self._succ.get(vertex, ()))

    def predecessors(self, vertex: Hashable) -> set[Hashable]:
        """Return the vertices with an edge into vertex."""
        return set(self._pred.get(vertex, ()))

    def _breadth_first(
        self, vertex: Hashable, edges: dict[Hashable, dict[Hashable, None]]
    ) -> list[Hashable]:
        result = []
        visited = {vertex}
        queue = deque([vertex])
        while queue:
            current = queue.popleft()
            result.append(current)
            for nxt in edges.get(current, ()):
                if nxt not in visited:
                    visited.add(nxt)
                    queue.append(nxt)
        return result

    def bfs(self, vertex: Hashable) -> list[Hashable]:
        """Return vertices in breadth-first order from vertex."""
        return self._breadth_first(vertex, self._succ)

    def bfs_reverse(self, vertex: Hashable) -> list[Hashable]:
        """Return vertices in breadth-first order following edges backwards."""
        return self._breadth_first(vertex, self._pred)

    def dfs(self, vertex: Hashable) -> list[Hashable]:
        """Return vertices in depth-first order from vertex."""
        result = []
        visited: set[Hashable] = set()
        stack = [vertex]
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                result.append(current)
            stack.extend(n for n in self._succ.get(current, ()) if n not in visited)
        return result

    def transpose(self) -> Graph:
        """Return a new graph with every edge reversed."""
        result = Graph()
        for v in self._succ:
            result._succ[v] = dict(self._pred[v])
            result._pred[v] = dict(self._succ[v])
        return result

    def cyclic(self) -> bool:
        """Return True if the graph contains a cycle."""
        return self.cycle() is not None

    def cycle(self) -> Optional[list[Hashable]]:
        """Return the vertices on the search path when the first cycle is found, or None."""
        colors = {v: _Color.WHITE for v in self._succ}
        for start in self._succ:
            if colors[start] is not _Color.WHITE:
                continue
            colors[start] = _Color.GRAY
            work: list[tuple[Hashable, Iterator[Hashable]]] = [
                (start, iter(list(self._succ[start])))
            ]
            while work:
                current, neighbours = work[-1]
                for nxt in neighbours:
                    color = colors.get(nxt, _Color.WHITE)
                    if color is _Color.GRAY:
                        return [v for v, c in colors.items() if c is _Color.GRAY]
                    if color is _Color.WHITE:
                        colors[nxt] = _Color.GRAY
                        work.append((nxt, iter(list(self._succ[nxt]))))
                        break
                else:
                    colors[current] = _Color.BLACK
                    work.pop()
        return None

    def scc(self) -> list[list[Hashable]]:
        """Return the strongly connected components (Tarjan's algorithm)."""
        index: dict[Hashable, int] = {}
        low: dict[Hashable, int] = {}
        on_stack: set[Hashable] = set()
        stack: list[Hashable] = []
        components: list[list[Hashable]] = []

        def visit(v: Hashable) -> None:
            index[v] = low[v] = len(index)
            stack.append(v)
            on_stack.add(v)

        for root in self._succ:
            if root in index:
                continue
            visit(root)
            work = [(root, iter(list(self._succ[root])))]
            while work:
                v, neighbours = work[-1]
                for w in neighbours:
                    if w not in index:
                        visit(w)
                        work.append((w, iter(list(self._succ[w]))))
                        break
                    if w in on_stack:
                        low[v] = min(low[v], index[w])
                else:
                    work.pop()
                    if work:
                        parent = work[-1][0]
                        low[parent] = min(low[parent], low[v])
                    if low[v] == index[v]:
                        component = []
                        while True:
                            w = stack.pop()
                            on_stack.discard(w)
                            component.append(w)
                            if w == v:
                                break
                        components.append(component)
        return components