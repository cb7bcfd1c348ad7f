"""Operation history of a benchmark run, grouped by key."""

from __future__ import annotations

import csv
import threading
from pathlib import Path
from typing import Optional, Union

from pbench.checker import Checker
from pbench.operation import Operation

PathLike = Union[str, Path]


def _parse_value(field: str) -> Optional[bytes]:
    if field in ("null", ""):
        return None
    return field.encode()


class History:
    """Thread-safe record of client operations, partitioned by key."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._shard: dict[int, list[Operation]] = {}
        self._operations: list[Operation] = []

    def add(
        self,
        key: int,
        input: Optional[bytes],
        output: Optional[bytes],
        start: int,
        end: int,
    ) -> Operation:
        """Record a new operation on key and return it."""
        op = Operation(input, output, start, end)
        self.add_operation(key, op)
        return op

    def add_operation(self, key: int, operation: Operation) -> None:
        """Record an existing operation on key."""
        with self._lock:
            self._shard.setdefault(key, []).append(operation)
            self._operations.append(operation)

    def linearizable(self) -> int:
        """Check each key's history and return the total number of anomalous reads."""
        with self._lock:
            partitions = [list(ops) for ops in self._shard.values()]
        return sum(len(Checker().linearizable(partition)) for partition in partitions)

    def write_file(self, path: PathLike) -> Path:
        """Write all operations, ordered by start time, to "<path>.csv".

        Each line holds hex input, hex output, start and end in seconds; a
        "PerSecond" line with mean latency (ms) and count follows each second.
        Returns the path written.
        """
        target = Path(f"{path}.csv")
        with self._lock:
            self._operations.sort(key=lambda op: op.start)
            operations = list(self._operations)

        latency = 0.0
        throughput = 0
        second = 1.0
        with open(target, "w", encoding="utf-8") as handle:
            for op in operations:
                start = op.start / 1_000_000_000.0
                end = op.end / 1_000_000_000.0
                handle.write(
                    f"{(op.input or b'').hex()},{(op.output or b'').hex()},{start:f},{end:f}\n"
                )
                latency += end - start
                throughput += 1
                if end > second:
                    handle.write(f"PerSecond {latency / throughput * 1000.0:f} {throughput}\n")
                    latency = 0.0
                    throughput = 0
                    second += 1
        return target

    def read_file(self, path: PathLike) -> None:
        """Load operations from a CSV of key,input,output,start,end records.

        "null" or an empty field means no value. Raises OSError if the file
        cannot be read and ValueError on a malformed record.
        """
        with open(path, newline="", encoding="utf-8") as handle:
            for record in csv.reader(handle):
                if len(record) < 5:
                    raise ValueError("operation history file format error")
                try:
                    key = int(record[0])
                    start = int(record[3])
                    end = int(record[4])
                except ValueError as exc:
                    raise ValueError(f"operation history file format error: {exc}") from None
                op = Operation(_parse_value(record[1]), _parse_value(record[2]), start, end)
                self.add_operation(key, op)