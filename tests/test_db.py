import base64
import json

import pytest

from pbench.config import get_config
from pbench.db import Command, CommandType, Database, conflict, conflict_batch
from pbench.ids import NodeID


def test_execute_returns_previous_value():
    db = Database(multiversion=False)
    assert db.execute(Command(key=1, value=b"a", type=CommandType.WRITE)) is None
    assert db.execute(Command(key=1, value=b"b", type=CommandType.WRITE)) == b"a"
    assert db.get(1) == b"b"


def test_execute_without_value_does_not_write():
    db = Database(multiversion=False)
    db.put(2, b"x")
    assert db.execute(Command(key=2)) == b"x"
    assert db.get(2) == b"x"
    assert db.version(2) == 1


def test_version_counts_writes():
    db = Database(multiversion=False)
    db.put(1, b"a")
    db.put(2, b"b")
    db.put(1, None)
    assert db.version(1) == 2


def test_history_multiversion():
    db = Database(multiversion=True)
    db.put(1, b"a")
    db.put(1, b"b")
    assert db.history(1) == [b"a", b"b"]
    assert db.history(9) == []


def test_history_single_version_is_empty():
    db = Database(multiversion=False)
    db.put(1, b"a")
    assert db.history(1) == []


def test_default_multiversion_from_config(monkeypatch):
    monkeypatch.setattr(get_config(), "multiversion", True)
    db = Database()
    db.put(3, b"v")
    assert db.history(3) == [b"v"]


def test_database_str_is_json():
    db = Database(multiversion=False)
    db.put(1, b"a")
    assert json.loads(str(db)) == {"1": base64.b64encode(b"a").decode()}


def test_command_empty():
    assert Command().empty() is True
    assert Command(key=1).empty() is False
    assert Command(command_id=4).empty() is False


def test_command_equality_ignores_type_and_nil_value():
    assert Command(key=1, type=CommandType.READ) == Command(key=1, type=CommandType.WRITE)
    assert Command(key=1, value=None) == Command(key=1, value=b"")
    assert Command(key=1, value=b"a") != Command(key=1, value=b"b")


def test_command_hash_properties():
    a = Command(key=5, value=b"abc", command_id=1)
    b = Command(key=5, value=b"abc", command_id=2)
    c = Command(key=5, value=b"abd")
    assert a.hash() == b.hash()
    assert a.hash() != c.hash()
    assert len(base64.b64decode(a.hash())) == 20


def test_command_str_get():
    cmd = Command(key=1, type=CommandType.READ, client_id=NodeID.of(0, 1), command_id=3)
    assert str(cmd) == "Get{key=1 id=0.1 cid=3}"


def test_command_str_put():
    cmd = Command(key=2, value=b"\x01\xff", type=CommandType.WRITE,
                  client_id=NodeID.of(1, 2), command_id=7)
    assert str(cmd) == "Put{key=2 value=01ff id=1.2 cid=7}"


def test_command_str_delete():
    cmd = Command(key=5, type=CommandType.DELETE)
    assert str(cmd) == "Delete{key=5 id=0.0 cid=0"


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (CommandType.READ, CommandType.READ, False),
        (CommandType.READ, CommandType.WRITE, True),
        (CommandType.WRITE, CommandType.READ, True),
        (CommandType.WRITE, CommandType.WRITE, True),
    ],
)
def test_conflict_same_key(a, b, expected):
    assert conflict(Command(key=1, type=a), Command(key=1, type=b)) is expected


def test_no_conflict_on_different_keys():
    assert conflict(Command(key=1, type=CommandType.WRITE),
                    Command(key=2, type=CommandType.WRITE)) is False


def test_conflict_batch():
    reads = [Command(key=1), Command(key=2)]
    writes = [Command(key=3, type=CommandType.WRITE), Command(key=2, type=CommandType.WRITE)]
    assert conflict_batch(reads, writes) is True
    assert conflict_batch(reads, reads) is False
    assert conflict_batch([], writes) is False