"""Benchmark and system configuration, loaded from and saved to JSON."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from pbench.ids import NodeID

DEFAULT_CONFIG_FILE = "config.json"

PathLike = Union[str, Path]


def _field(json_name: str, kind: str, default: Any = None, *, factory: Any = None,
           derived: bool = False) -> Any:
    metadata = {"json": json_name, "kind": kind, "derived": derived}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


@dataclass
class BenchmarkConfig:
    """Workload settings for a benchmark run."""

    t: int = _field("T", "int", 60)  # running time in seconds
    n: int = _field("N", "int", 0)  # total number of requests
    k: int = _field("K", "int", 1000)  # key space
    w: float = _field("W", "float", 0.5)  # write ratio
    throttle: int = _field("Throttle", "int", 0)  # requests per second, unused if 0
    concurrency: int = _field("Concurrency", "int", 1)
    distribution: str = _field("Distribution", "str", "uniform")
    linearizability_check: bool = _field("LinearizabilityCheck", "bool", True)
    open_loop_worker: bool = _field("OpenLoopWorker", "bool", False)
    max_outstanding: int = _field("MaxOutstanding", "int", 10)
    open_loop_throttle: int = _field("OpenLoopThrottle", "int", 1)
    conflicts: int = _field("Conflicts", "int", 100)  # percentage of conflicting keys
    min: int = _field("Min", "int", 0)  # min key
    mu: float = _field("Mu", "float", 0.0)
    sigma: float = _field("Sigma", "float", 60.0)
    move: bool = _field("Move", "bool", False)
    speed: int = _field("Speed", "int", 500)  # ms per key when mu moves
    zipfian_s: float = _field("ZipfianS", "float", 2.0)
    zipfian_v: float = _field("ZipfianV", "float", 1.0)
    lambda_: float = _field("Lambda", "float", 0.01)
    size: int = _field("Size", "int", 8)  # payload size


@dataclass
class Config:
    """System configuration: node addresses, protocol knobs and benchmark settings."""

    addrs: dict[NodeID, str] = _field("Addrs", "idmap", factory=dict, derived=True)
    addrs_str: dict[str, str] = _field("address", "strmap", factory=dict)
    use_retro_log: bool = _field("use_retro_log", "bool", False)
    policy: str = _field("policy", "str", "consecutive")
    threshold: float = _field("threshold", "float", 3.0)
    thrifty: bool = _field("thrifty", "bool", False)
    buffer_size: int = _field("buffer_size", "int", 1024)
    chan_buffer_size: int = _field("chan_buffer_size", "int", 1024)
    multiversion: bool = _field("multiversion", "bool", False)
    ephemeral_leader: bool = _field("ephemeral_leader", "bool", False)
    num_relays: int = _field("num_relays", "int", 2)
    regions_peer_groups: bool = _field("regions_peer_groups", "bool", False)
    fixed_relays: bool = _field("fixed_relays", "bool", False)
    relay_slack: int = _field("relay_slack", "int", 0)
    std_pig_timeout: int = _field("std_pig_timeout", "int", 50)
    use_small_p2b: bool = _field("use_small_p2b", "bool", True)
    n: int = _field("N", "int", 0, derived=True)  # total number of nodes
    z: int = _field("Z", "int", 0, derived=True)  # total number of zones
    npz: dict[int, int] = _field("Npz", "intmap", factory=dict, derived=True)
    benchmark: BenchmarkConfig = _field("benchmark", "struct", factory=BenchmarkConfig)

    def ids(self) -> list[NodeID]:
        """Return all known node ids."""
        return list(self.addrs)

    def to_json(self) -> str:
        """Serialise the whole configuration as a JSON document."""
        return json.dumps(_encode(self))

    def __str__(self) -> str:
        return self.to_json()

    def load(self, path: PathLike = DEFAULT_CONFIG_FILE) -> None:
        """Update this configuration from a JSON file.

        Keys are matched case-insensitively; missing keys keep their values.
        Raises OSError if the file cannot be read and ValueError if it is malformed.
        """
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
        _decode_into(self, data)

        self.addrs = {NodeID.parse(id_text): addr for id_text, addr in self.addrs_str.items()}
        self.npz = dict(Counter(node_id.zone() for node_id in self.addrs))
        self.n = len(self.addrs)
        self.z = len(self.npz)

    def save(self, path: PathLike = DEFAULT_CONFIG_FILE) -> None:
        """Write the configuration to a JSON file."""
        Path(path).write_text(self.to_json() + "\n", encoding="utf-8")


def _coerce(key: str, kind: str, value: Any) -> Any:
    if kind == "bool":
        if isinstance(value, bool):
            return value
    elif kind == "int":
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif kind == "float":
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif kind == "str":
        if isinstance(value, str):
            return value
    elif kind == "strmap":
        if isinstance(value, dict) and all(isinstance(v, str) for v in value.values()):
            return dict(value)
    raise ValueError(f"config: cannot use {value!r} for field {key!r}")


def _decode_into(target: Any, data: Any) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"config: expected an object, got {data!r}")
    lookup = {
        f.metadata["json"].lower(): f
        for f in fields(target)
        if not f.metadata.get("derived")
    }
    for key, value in data.items():
        target_field = lookup.get(key.lower())
        if target_field is None or value is None:
            continue
        kind = target_field.metadata["kind"]
        if kind == "struct":
            _decode_into(getattr(target, target_field.name), value)
        else:
            setattr(target, target_field.name, _coerce(key, kind, value))


def _encode(target: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(target):
        kind = f.metadata["kind"]
        value = getattr(target, f.name)
        if kind == "struct":
            value = _encode(value)
        elif kind == "idmap":
            value = {str(int(k)): v for k, v in value.items()}
        elif kind == "intmap":
            value = {str(k): v for k, v in value.items()}
        out[f.metadata["json"]] = value
    return out


_config = Config()


def get_config() -> Config:
    """Return the process-wide configuration."""
    return _config