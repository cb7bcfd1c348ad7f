from datetime import timedelta

import pytest

from pbench.stat import Stat, statistic


def test_statistic_from_timedeltas():
    stat = statistic([timedelta(milliseconds=m) for m in range(100, 0, -1)])
    assert stat.size == 100
    assert stat.min == pytest.approx(1.0)
    assert stat.max == pytest.approx(100.0)
    assert stat.data == sorted(stat.data)
    assert stat.median == stat.data[50]


def test_statistic_percentiles_are_ordered():
    stat = statistic([0.003, 0.001, 0.010, 0.002, 0.050])
    assert stat.min <= stat.median <= stat.p95 <= stat.p99 <= stat.p999 <= stat.max
    assert stat.mean == pytest.approx(sum(stat.data) / stat.size)


def test_statistic_seconds_are_converted_to_ms():
    stat = statistic([0.25])
    assert stat.data == [250.0]
    assert stat.p999 == 250.0


def test_statistic_empty_raises():
    with pytest.raises(ValueError):
        statistic([])


def test_str_layout():
    stat = statistic([timedelta(milliseconds=2)])
    lines = str(stat).splitlines()
    assert lines[0] == "size = 1"
    assert [line.split(" = ")[0] for line in lines] == [
        "size", "mean", "min", "max", "median", "p95", "p99", "p999",
    ]


def test_write_file_round_trip(tmp_path):
    stat = Stat(data=[1.0, 2.5], size=2)
    target = tmp_path / "latency"
    stat.write_file(target)
    assert target.read_text() == "1\n2.5\n"


def test_write_file_values_parse_back(tmp_path):
    stat = statistic([0.0012345, 0.5, 2.0])
    target = tmp_path / "latency"
    stat.write_file(target)
    assert [float(line) for line in target.read_text().splitlines()] == stat.data