import struct

from pbench.checker import Checker
from pbench.operation import Operation


def le32(n):
    return struct.pack("<I", n)


n0, n1, n2, n3, n4, n42, n100 = (le32(v) for v in (0, 1, 2, 3, 4, 42, 100))


def test_single_operation_is_linearizable():
    assert len(Checker().linearizable([Operation(n42, None, 0, 24)])) == 0


def test_concurrent_write_and_read_are_linearizable():
    ops = [Operation(n42, None, 0, 5), Operation(None, n42, 3, 10)]
    assert len(Checker().linearizable(ops)) == 0


def test_no_dependency_is_linearizable():
    ops = [
        Operation(n1, None, 0, 5),
        Operation(None, n2, 6, 10),
        Operation(n3, None, 11, 15),
        Operation(None, n4, 16, 20),
    ]
    assert len(Checker().linearizable(ops)) == 0


def test_concurrent_reads_are_linearizable():
    ops = [
        Operation(n0, None, 0, 0),
        Operation(n100, None, 0, 100),
        Operation(None, n100, 5, 35),
        Operation(None, n0, 30, 60),
    ]
    assert len(Checker().linearizable(ops)) == 0


def test_non_concurrent_reads_are_not_linearizable():
    ops = [
        Operation(n0, None, 0, 0),
        Operation(n100, None, 0, 100),
        Operation(None, n100, 5, 25),
        Operation(None, n0, 30, 60),
    ]
    assert len(Checker().linearizable(ops)) != 0


def test_read_missing_previous_write_is_not_linearizable():
    ops = [
        Operation(n1, None, 0, 5),
        Operation(n2, None, 6, 10),
        Operation(None, n1, 11, 15),
    ]
    anomalies = Checker().linearizable(ops)
    assert anomalies == [ops[2]]


def test_cross_reads_are_not_linearizable():
    ops = [
        Operation(n1, None, 0, 5),
        Operation(n2, None, 0, 5),
        Operation(None, n1, 6, 10),
        Operation(None, n2, 6, 10),
    ]
    assert len(Checker().linearizable(ops)) != 0


def test_two_anomaly_reads():
    ops = [
        Operation(n1, None, 0, 5),
        Operation(n2, None, 6, 10),
        Operation(None, n1, 11, 15),
        Operation(None, n1, 12, 16),
    ]
    assert len(Checker().linearizable(ops)) == 2


def test_link_between_two_writes():
    ops = [
        Operation(n1, None, 0, 5),
        Operation(None, n1, 6, 10),
        Operation(n2, None, 7, 10),
        Operation(None, n1, 11, 15),
    ]
    assert len(Checker().linearizable(ops)) != 0


def test_non_unique_value():
    ops = [
        Operation(n1, None, 0, 5),
        Operation(n1, None, 0, 5),
        Operation(None, n1, 6, 10),
        Operation(None, n1, 6, 10),
    ]
    assert len(Checker().linearizable(ops)) == 0


def test_checker_can_be_reused():
    checker = Checker()
    bad = [
        Operation(n1, None, 0, 5),
        Operation(n2, None, 6, 10),
        Operation(None, n1, 11, 15),
    ]
    good = [Operation(n42, None, 0, 5), Operation(None, n42, 3, 10)]
    assert len(checker.linearizable(bad)) == 1
    assert len(checker.linearizable(good)) == 0


def test_input_order_does_not_matter():
    ops = [
        Operation(None, n1, 11, 15),
        Operation(n2, None, 6, 10),
        Operation(n1, None, 0, 5),
    ]
    assert Checker().linearizable(ops) == [ops[0]]