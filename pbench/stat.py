"""Latency statistics for benchmark results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Iterable, Union

PathLike = Union[str, Path]


def _format_float(value: float) -> str:
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


@dataclass
class Stat:
    """Sorted latencies in milliseconds and their summary figures."""

    data: list[float] = field(default_factory=list)
    size: int = 0
    mean: float = 0.0
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0
    p95: float = 0.0
    p99: float = 0.0
    p999: float = 0.0

    def write_file(self, path: PathLike) -> None:
        """Write one latency per line to path."""
        with open(path, "w", encoding="utf-8") as handle:
            handle.writelines(f"{_format_float(value)}\n" for value in self.data)

    def __str__(self) -> str:
        return (
            f"size = {self.size}\nmean = {self.mean:f}\nmin = {self.min:f}\n"
            f"max = {self.max:f}\nmedian = {self.median:f}\np95 = {self.p95:f}\n"
            f"p99 = {self.p99:f}\np999 = {self.p999:f}\n"
        )


def statistic(latencies: Iterable[Union[timedelta, float]]) -> Stat:
    """Summarise latencies given as timedeltas or seconds.

    Raises ValueError when there are no latencies.
    """
    ms = sorted(
        (lat.total_seconds() if isinstance(lat, timedelta) else float(lat)) * 1000.0
        for lat in latencies
    )
    if not ms:
        raise ValueError("no latency data")
    size = len(ms)
    return Stat(
        data=ms,
        size=size,
        mean=sum(ms) / size,
        min=ms[0],
        max=ms[-1],
        median=ms[int(0.5 * size)],
        p95=ms[int(0.95 * size)],
        p99=ms[int(0.99 * size)],
        p999=ms[int(0.999 * size)],
    )