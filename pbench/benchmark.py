"""Workload generator that drives key-value stores and records latency and history."""

from __future__ import annotations

import dataclasses
import logging
import math
import queue
import random
import threading
import time
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union

from pbench.config import BenchmarkConfig, get_config
from pbench.history import History
from pbench.operation import Operation
from pbench.stat import Stat, statistic

logger = logging.getLogger("pbench")

PathLike = Union[str, Path]

_INT64_MAX = 2**63 - 1
_STOP = object()


class KeyValueStore:
    """Adapts a client with get/put methods to the read/write calls the benchmark makes."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def read(self, key: int) -> Optional[bytes]:
        """Return the value of key, or None when the client returns nothing."""
        value = self.client.get(key)
        return value if value else None

    def write(self, key: int, value: bytes) -> None:
        """Store value under key."""
        self.client.put(key, value)


class _Zipf:
    """Zipf sampler over [0, imax] with P(k) proportional to (v + k) ** -s."""

    def __init__(self, rng: random.Random, s: float, v: float, imax: int) -> None:
        if s <= 1.0 or v < 1.0:
            raise ValueError(f"invalid zipfian parameters s={s}, v={v}")
        self._rng = rng
        self._q = s
        self._v = v
        self._imax = float(imax)
        self._one_minus_q = 1.0 - s
        self._one_minus_q_inv = 1.0 / self._one_minus_q
        self._hxm = self._h(self._imax + 0.5)
        self._hx0_minus_hxm = self._h(0.5) - math.exp(math.log(v) * -s) - self._hxm
        self._s = 1.0 - self._hinv(self._h(1.5) - math.exp(-s * math.log(v + 1.0)))

    def _h(self, x: float) -> float:
        return math.exp(self._one_minus_q * math.log(self._v + x)) * self._one_minus_q_inv

    def _hinv(self, x: float) -> float:
        return math.exp(self._one_minus_q_inv * math.log(self._one_minus_q * x)) - self._v

    def sample(self) -> int:
        while True:
            ur = self._hxm + self._rng.random() * self._hx0_minus_hxm
            x = self._hinv(ur)
            k = math.floor(x + 0.5)
            if k - x <= self._s:
                return int(k)
            if ur >= self._h(k + 0.5) - math.exp(-math.log(k + self._v) * self._q):
                return int(k)


class Benchmark:
    """Generates keys from a distribution, issues reads and writes, and collects results.

    ``stores`` is either one store shared by all workers or one store per
    worker (as many as the configured concurrency). A store offers
    ``read(key)`` and ``write(key, value)``.
    """

    def __init__(
        self,
        stores: Any,
        config: Optional[BenchmarkConfig] = None,
        *,
        output_dir: PathLike = ".",
        seed: Optional[int] = None,
    ) -> None:
        self.config = dataclasses.replace(config if config is not None else get_config().benchmark)
        if hasattr(stores, "read"):
            self.stores = [stores] * self.config.concurrency
        else:
            self.stores = list(stores)
            if len(self.stores) != self.config.concurrency:
                raise ValueError(
                    f"expected {self.config.concurrency} stores, got {len(self.stores)}"
                )
        self.output_dir = Path(output_dir)
        self.history = History()
        self.latencies: list[float] = []
        self.anomalies: Optional[int] = None
        self._random = random.Random(seed)
        self._counter = 0
        self._zipf: Optional[_Zipf] = None
        self._zipf_params: Optional[tuple[float, float, int]] = None
        self._rate = None
        if self.config.throttle > 0:
            from pbench.rate import Limiter

            self._rate = Limiter(self.config.throttle)
        self._lock = threading.Lock()
        self._start_ns = time.perf_counter_ns()

    def _next_in_order(self) -> int:
        self._counter = (self._counter + 1) % self.config.k
        return self._counter + self.config.min

    def _zipf_sampler(self) -> _Zipf:
        params = (self.config.zipfian_s, self.config.zipfian_v, self.config.k)
        if self._zipf is None or self._zipf_params != params:
            self._zipf = _Zipf(self._random, *params)
            self._zipf_params = params
        return self._zipf

    def next_key(self) -> int:
        """Return the next key from the configured distribution.

        Raises ValueError for an unknown distribution or invalid parameters.
        """
        cfg = self.config
        rng = self._random
        distribution = cfg.distribution
        if distribution == "order":
            key = self._next_in_order()
        elif distribution == "uniform":
            key = rng.randrange(cfg.k) + cfg.min
        elif distribution == "conflict":
            key = 0 if rng.randrange(100) < cfg.conflicts else self._next_in_order()
        elif distribution == "normal":
            key = int(rng.gauss(0.0, 1.0) * cfg.sigma + cfg.mu)
            while key < 0:
                key += cfg.k
            while key > cfg.k:
                key -= cfg.k
        elif distribution == "zipfan":
            key = self._zipf_sampler().sample()
        elif distribution == "exponential":
            key = int(rng.expovariate(1.0) / cfg.lambda_)
        else:
            raise ValueError(f"unknown distribution {distribution}")

        if self._rate is not None and cfg.throttle > 0:
            self._rate.wait()
        return key

    def _execute(self, store: Any, key: int) -> None:
        op = Operation()
        write = self._random.random() < self.config.w
        value = self._random.randbytes(self.config.size) if write else None
        failure: Optional[Exception] = None
        start = time.perf_counter_ns()
        try:
            if write:
                op.input = value
                store.write(key, value)
            else:
                op.output = store.read(key)
        except Exception as exc:  # store errors are recorded, not fatal
            failure = exc
        end = time.perf_counter_ns()

        op.start = start - self._start_ns
        if failure is None:
            op.end = end - self._start_ns
            with self._lock:
                self.latencies.append((end - start) / 1_000_000_000)
        else:
            op.end = _INT64_MAX
            logger.error("%s", failure)
        self.history.add_operation(key, op)

    def _closed_loop_worker(self, feed: queue.Queue, store: Any) -> None:
        while (key := feed.get()) is not _STOP:
            self._execute(store, key)

    def _open_loop_op(self, store: Any, key: int, outstanding: threading.Semaphore) -> None:
        try:
            if self.config.open_loop_throttle > 0:
                time.sleep(self.config.open_loop_throttle / 1000)
            self._execute(store, key)
        finally:
            outstanding.release()

    def _open_loop_worker(self, feed: queue.Queue, store: Any) -> None:
        outstanding = threading.BoundedSemaphore(self.config.max_outstanding)
        pending: list[threading.Thread] = []
        while (key := feed.get()) is not _STOP:
            outstanding.acquire()
            task = threading.Thread(
                target=self._open_loop_op, args=(store, key, outstanding), daemon=True
            )
            task.start()
            pending = [p for p in pending if p.is_alive()]
            pending.append(task)
        for task in pending:
            task.join()

    def _drive(self, keys: Iterator[int], open_loop: bool) -> float:
        if open_loop and self.config.max_outstanding < 1:
            raise ValueError("max_outstanding must be at least 1")
        feed: queue.Queue = queue.Queue(maxsize=max(1, self.config.concurrency))
        target = self._open_loop_worker if open_loop else self._closed_loop_worker
        workers = [
            threading.Thread(target=target, args=(feed, store), daemon=True)
            for store in self.stores
        ]
        self._start_ns = time.perf_counter_ns()
        for worker in workers:
            worker.start()
        try:
            for key in keys:
                feed.put(key)
        finally:
            for _ in workers:
                feed.put(_STOP)
            for worker in workers:
                worker.join()
        return (time.perf_counter_ns() - self._start_ns) / 1_000_000_000

    def _workload(self) -> Iterator[int]:
        if self.config.t > 0:
            deadline = time.monotonic() + self.config.t
            while time.monotonic() < deadline:
                yield self.next_key()
        else:
            for _ in range(self.config.n):
                yield self.next_key()

    def _move_mu(self, stop: threading.Event) -> None:
        interval = self.config.speed / 1000
        while not stop.wait(interval):
            self.config.mu = float(int(self.config.mu + 1) % self.config.k)

    def load(self) -> Stat:
        """Write every key in [min, min + k) once and return the latency statistics."""
        self.config.w = 1.0
        self.config.throttle = 0
        keys = iter(range(self.config.min, self.config.min + self.config.k))
        elapsed = self._drive(keys, open_loop=False)
        stat = statistic(self.latencies)
        logger.info("Benchmark took %fs", elapsed)
        logger.info("Throughput %f", len(self.latencies) / elapsed if elapsed else 0.0)
        logger.info("%s", stat)
        return stat

    def run(self) -> Stat:
        """Run the workload, write latency and history files, and return the statistics.

        Runs for ``t`` seconds when ``t`` is positive, otherwise for ``n``
        operations. When the linearizability check is on, the number of
        anomalous reads is left in ``anomalies``.
        """
        stop = threading.Event()
        mover = None
        if self.config.move:
            mover = threading.Thread(target=self._move_mu, args=(stop,), daemon=True)
            mover.start()

        with self._lock:
            self.latencies = []
        logger.info("Benchmark Start")
        try:
            elapsed = self._drive(self._workload(), open_loop=self.config.open_loop_worker)
        finally:
            stop.set()
            if mover is not None:
                mover.join()

        stat = statistic(self.latencies)
        logger.info("Concurrency = %d", self.config.concurrency)
        logger.info("Write Ratio = %f", self.config.w)
        logger.info("Number of Keys = %d", self.config.k)
        logger.info("Benchmark Time = %fs", elapsed)
        logger.info("Throughput = %f", len(self.latencies) / elapsed if elapsed else 0.0)
        logger.info("%s", stat)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        stat.write_file(self.output_dir / "latency")
        self.history.write_file(self.output_dir / "history")

        if self.config.linearizability_check:
            self.anomalies = self.history.linearizable()
            if self.anomalies == 0:
                logger.info("The execution is linearizable.")
            else:
                logger.info("The execution is NOT linearizable.")
                logger.info("Total anomaly read operations are %d", self.anomalies)
                logger.info("Anomaly percentage is %f", self.anomalies / stat.size)
        return stat