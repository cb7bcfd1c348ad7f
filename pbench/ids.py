"""Node identifiers in zone.node form and ballot numbers built from them."""

from __future__ import annotations

_UINT16 = 0xFFFF
_UINT32 = 0xFFFFFFFF
_UINT64 = 0xFFFFFFFFFFFFFFFF


class NodeID(int):
    """32-bit identifier: zone in the high 16 bits, node in the low 16 bits."""

    @classmethod
    def of(cls, zone: int, node: int) -> NodeID:
        """Build an identifier from its zone and node numbers."""
        return cls(((zone << 16) | node) & _UINT32)

    @classmethod
    def parse(cls, text: str) -> NodeID:
        """Parse "zone.node". Raises ValueError on malformed input."""
        parts = text.split(".")
        if len(parts) != 2:
            raise ValueError(f"invalid id: {text!r}")
        try:
            zone, node = (int(part) for part in parts)
        except ValueError:
            raise ValueError(f"invalid id: {text!r}") from None
        return cls.of(zone, node)

    def zone(self) -> int:
        """Return the zone component."""
        return int(self) >> 16

    def node(self) -> int:
        """Return the node component."""
        return int(self) & _UINT16

    def __str__(self) -> str:
        return f"{self.zone()}.{self.node()}"

    def __repr__(self) -> str:
        return f"NodeID.of({self.zone()}, {self.node()})"


class Ballot(int):
    """64-bit ballot: counter in the high 32 bits, node id in the low 32 bits."""

    @classmethod
    def of(cls, n: int, node_id: NodeID) -> Ballot:
        """Build a ballot from a counter and the node that owns it."""
        return cls(((n << 32) | (node_id.zone() << 16) | node_id.node()) & _UINT64)

    @classmethod
    def parse(cls, text: str) -> Ballot:
        """Parse "n.zone.node"; a bare "n" carries node id 0.

        Raises ValueError when the counter or the id is malformed.
        """
        counter, sep, id_text = text.partition(".")
        try:
            n = int(counter)
        except ValueError:
            raise ValueError(f"invalid ballot counter: {counter!r}") from None
        if n < 0:
            raise ValueError(f"invalid ballot counter: {counter!r}")
        node_id = NodeID.parse(id_text) if sep else NodeID(0)
        return cls.of(n, node_id)

    def n(self) -> int:
        """Return the counter part of the ballot."""
        return int(self) >> 32

    def id(self) -> NodeID:
        """Return the node id part of the ballot."""
        low = int(self) & _UINT32
        return NodeID.of(low >> 16, low & _UINT16)

    def next(self, node_id: NodeID) -> Ballot:
        """Return the following ballot, owned by node_id."""
        return Ballot.of(self.n() + 1, node_id)

    def __str__(self) -> str:
        return f"{self.n()}.{self.id()}"

    def __repr__(self) -> str:
        return f"Ballot({self})"


def next_ballot(ballot: int, node_id: NodeID) -> int:
    """Return the ballot number after ballot, owned by node_id."""
    owner = (node_id.zone() << 16) | node_id.node()
    return (((ballot >> 32) + 1) << 32) | owner


def leader_id(ballot: int) -> NodeID:
    """Return the node id encoded in a ballot number."""
    low = ballot & _UINT32
    return NodeID.of(low >> 16, low & _UINT16)