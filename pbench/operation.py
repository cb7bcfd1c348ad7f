"""A single client operation recorded during a benchmark run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class Operation:
    """A read or write with its value and invocation/response times in nanoseconds.

    A write carries ``input`` and no ``output``; a read carries ``output`` and
    no ``input``. Operations compare by identity so they can serve as graph
    vertices.
    """

    input: Optional[bytes] = None
    output: Optional[bytes] = None
    start: int = 0
    end: int = 0

    def happens_before(self, other: Operation) -> bool:
        """Return True if this operation completed before other was invoked."""
        return self.end < other.start

    def concurrent(self, other: Operation) -> bool:
        """Return True if neither operation happens before the other."""
        return not self.happens_before(other) and not other.happens_before(self)

    def __str__(self) -> str:
        return (
            f"{{input={(self.input or b'').hex()}, output={(self.output or b'').hex()}, "
            f"start={self.start}, end={self.end}}}"
        )