import json

import pytest

from pbench.config import BenchmarkConfig, Config, get_config
from pbench.ids import NodeID


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_benchmark_defaults():
    b = BenchmarkConfig()
    assert b.t == 60
    assert b.n == 0
    assert b.k == 1000
    assert b.w == 0.5
    assert b.distribution == "uniform"
    assert b.linearizability_check is True
    assert b.sigma == 60
    assert b.speed == 500
    assert b.zipfian_s == 2
    assert b.lambda_ == 0.01
    assert b.size == 8
    assert b.max_outstanding == 10
    assert b.open_loop_throttle == 1


def test_config_defaults():
    c = Config()
    assert c.policy == "consecutive"
    assert c.threshold == 3
    assert c.buffer_size == 1024
    assert c.chan_buffer_size == 1024
    assert c.num_relays == 2
    assert c.std_pig_timeout == 50
    assert c.use_small_p2b is True
    assert c.ids() == []


def test_load_addresses_and_zones(tmp_path):
    addresses = {
        "1.1": "tcp://127.0.0.1:1735",
        "1.2": "tcp://127.0.0.1:1736",
        "2.1": "tcp://127.0.0.1:1737",
    }
    path = _write(tmp_path / "c.json", {"address": addresses, "policy": "majority"})
    c = Config()
    c.load(path)
    assert c.policy == "majority"
    assert c.addrs[NodeID.of(1, 1)] == addresses["1.1"]
    assert set(c.ids()) == {NodeID.parse(k) for k in addresses}
    assert c.n == len(addresses)
    assert c.npz == {1: 2, 2: 1}
    assert c.z == len(c.npz)


def test_load_benchmark_keeps_missing_defaults(tmp_path):
    path = _write(tmp_path / "c.json", {"benchmark": {"K": 50, "distribution": "order", "W": 1}})
    c = Config()
    c.load(path)
    assert c.benchmark.k == 50
    assert c.benchmark.distribution == "order"
    assert c.benchmark.w == 1.0
    assert c.benchmark.t == BenchmarkConfig().t


def test_save_load_round_trip(tmp_path):
    original = Config()
    original.addrs_str = {"1.1": "127.0.0.1:1735", "3.4": "127.0.0.1:1736"}
    original.thrifty = True
    original.benchmark.concurrency = 7
    original.benchmark.lambda_ = 0.5
    path = tmp_path / "saved.json"
    original.save(path)

    loaded = Config()
    loaded.load(path)
    assert loaded.addrs_str == original.addrs_str
    assert loaded.thrifty is True
    assert loaded.benchmark == original.benchmark
    assert loaded.n == len(original.addrs_str)


def test_to_json_uses_wire_names():
    c = Config()
    data = json.loads(c.to_json())
    assert data["benchmark"]["K"] == c.benchmark.k
    assert data["policy"] == c.policy
    assert "address" in data
    assert json.loads(str(c)) == data


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config().load(tmp_path / "absent.json")


def test_load_wrong_type_raises(tmp_path):
    path = _write(tmp_path / "c.json", {"buffer_size": "large"})
    with pytest.raises(ValueError):
        Config().load(path)


def test_load_invalid_json_raises(tmp_path):
    path = tmp_path / "c.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        Config().load(path)


def test_get_config_is_shared():
    shared = get_config()
    original = shared.benchmark.concurrency
    try:
        shared.benchmark.concurrency = original + 5
        assert get_config().benchmark.concurrency == original + 5
    finally:
        shared.benchmark.concurrency = original
    assert get_config().benchmark.concurrency == original