# pbench

Tools for benchmarking key-value stores and checking what they did.

pbench generates read/write workloads over a key space with a chosen key
distribution, records every operation with its start and end time,
summarises latencies (mean, min, max, median, p95, p99, p99.9) and checks
whether the recorded history of each key is linearizable.

It also ships building blocks for replication experiments: zone/node
identifiers and ballot numbers, leader-change policies, a hybrid logical
clock, a small optionally multi-version key-value store, a directed graph
with cycle and strongly-connected-component detection, an md5 hash ring and
a few thread-safe containers.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Checking a recorded history

A history file is CSV with one operation per line:
`key,input,output,start,end`. An empty field or `null` means "no value";
writes carry an input, reads carry an output, and the times are integers.

```
pbench-checker --log log.csv
```

`--log` defaults to `log.csv`. The command prints the total number of
anomalous reads across all keys (`0` means the execution is linearizable)
and exits with status 0; if the file cannot be read or a record is
malformed it prints the error to stderr and exits with status 1.

The same check from Python:

```python
from pbench.history import History

history = History()
history.read_file("log.csv")
print(history.linearizable())
```

`pbench.checker.Checker().linearizable(operations)` runs the check on the
operations of a single key and returns the anomalous reads themselves.
Operations are `pbench.operation.Operation(input, output, start, end)`.

## Running a benchmark

`pbench.benchmark.Benchmark` drives any object with `read(key)` and
`write(key, value)` methods; `KeyValueStore` wraps a client that has
`get(key)` and `put(key, value)` instead. Pass one store to share it between
all workers, or a list with one store per worker.

```python
from pbench.benchmark import Benchmark
from pbench.config import BenchmarkConfig


class MemoryStore:
    def __init__(self):
        self.data = {}

    def read(self, key):
        return self.data.get(key)

    def write(self, key, value):
        self.data[key] = value


config = BenchmarkConfig(t=0, n=10000, k=1000, concurrency=4,
                         distribution="normal", mu=300, sigma=50)
bench = Benchmark(MemoryStore(), config, output_dir="results", seed=1)
stat = bench.run()
print(stat)
print(bench.anomalies)
```

Settings live in `BenchmarkConfig` (when none is given, the benchmark copies
`get_config().benchmark`):

- `t` seconds of running time, or `n` operations when `t` is 0
- `k` keys starting at `min`, write ratio `w`, payload `size` in bytes
- `concurrency` workers; `open_loop_worker` with `max_outstanding` and
  `open_loop_throttle` (ms) for open-loop workers
- `throttle` operations per second (0 for no limit, see `pbench.rate.Limiter`)
- `distribution`: `"order"`, `"uniform"`, `"conflict"` (uses `conflicts`
  percent), `"normal"` (`mu`, `sigma`, with `move` and `speed` to shift `mu`
  over time), `"zipfan"` (`zipfian_s` > 1, `zipfian_v` >= 1) or
  `"exponential"` (`lambda_`); any other name raises `ValueError`
- `linearizability_check` to check the history at the end of `run()`

`Benchmark.load()` writes every key in `[min, min + k)` once and returns the
latency `Stat`. `Benchmark.run()` runs the workload, writes one latency (ms)
per line to `latency` and the operation history to `history.csv` in
`output_dir`, and returns the `Stat`; with the check on, the number of
anomalous reads is left in `anomalies`. `pbench.stat.statistic()` builds a
`Stat` from latencies given as `timedelta`s or seconds.

## Configuration

`pbench.config.Config` holds node addresses, protocol settings and the
benchmark settings. `Config.load(path)` reads JSON (keys match
case-insensitively, missing keys keep their values) and derives the node
ids, node count and nodes per zone from the `address` table;
`Config.save(path)` writes it back. Both default to `config.json`.
`get_config()` returns the process-wide instance.

`pbench.logsetup.setup(directory, level)` sends the `pbench` logger to
`<program>.<pid>.log` in `directory`, with warnings and errors also on
stderr.

## Building blocks

Identifiers in `zone.node` form and ballot numbers:

```python
from pbench.ids import NodeID, Ballot

node = NodeID.parse("1.2")
print(node.zone(), node.node())   # 1 2

ballot = Ballot.of(0, node).next(node)
print(ballot.n(), ballot.id())    # 1 1.2
```

Leader-change policies, chosen by name with
`pbench.policy.new_policy("consecutive" | "majority" | "ema" | "null", threshold)`;
`hit(node_id)` returns the id to move to, or `None`.

A hybrid logical clock:

```python
from pbench.hlc import HLC, current_time_ms

clock = HLC(current_time_ms())
stamp = clock.now()
print(stamp, stamp.to_int64())
```

A key-value store, `pbench.db.Database`, with `Command`, `conflict()` and
`conflict_batch()` alongside it.

A directed graph:

```python
from pbench.graph import Graph

g = Graph()
g.add_edge(1, 2)
g.add_edge(1, 3)
g.add_edge(2, 4)
print(g.bfs(1))      # [1, 2, 3, 4]
g.add_edge(4, 3)
g.add_edge(3, 2)
print(g.cyclic())    # True
```

An md5 hash ring:

```python
from pbench.hashring import HashRing

ring = HashRing()
ring.insert("a", b"a")
ring.insert("b", b"b")
print(ring.get(b"some key"))
print(ring.next("a"))   # b
```

`pbench.containers` has `Stack`, `Queue`, `ConcurrentMap`, `ConcurrentSet`
and `MultiMap`.

## What pbench does not do

pbench has no networking: there is no client that talks to remote replicas,
no replica server and no replication protocol. To benchmark a real system,
supply your own store object with `read`/`write` (or a client with
`get`/`put` wrapped in `KeyValueStore`). The only command is
`pbench-checker`; benchmarks are run from Python.