from pbench.operation import Operation


def test_happens_before_requires_strict_gap():
    first = Operation(b"\x01", None, 0, 5)
    second = Operation(None, b"\x01", 6, 10)
    touching = Operation(None, b"\x01", 5, 10)
    assert first.happens_before(second)
    assert not second.happens_before(first)
    assert not first.happens_before(touching)


def test_concurrent_is_symmetric():
    a = Operation(b"\x01", None, 0, 5)
    b = Operation(None, b"\x01", 3, 10)
    c = Operation(None, b"\x01", 11, 15)
    assert a.concurrent(b) and b.concurrent(a)
    assert not a.concurrent(c) and not c.concurrent(a)


def test_operation_is_concurrent_with_itself():
    a = Operation(b"\x01", None, 2, 4)
    assert a.concurrent(a)


def test_str_formats_hex_values():
    op = Operation(b"\x2a", None, 1, 2)
    assert str(op) == "{input=2a, output=, start=1, end=2}"


def test_identity_equality():
    a = Operation(b"\x01", None, 0, 5)
    b = Operation(b"\x01", None, 0, 5)
    assert a == a
    assert a != b
    assert len({a, b}) == 2