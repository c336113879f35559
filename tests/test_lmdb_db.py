import pytest

from ycsb.db import Field, Status
from ycsb.lmdb_db import LmdbDB, deserialize_row, deserialize_row_filter, serialize_row
from ycsb.properties import Properties
from ycsb.utils import YcsbError


def _record(prefix="v"):
    return [Field(f"field{i}", f"{prefix}{i}") for i in range(3)]


@pytest.fixture
def props(tmp_path):
    p = Properties()
    p.set("lmdb.dbpath", str(tmp_path / "db"))
    p.set("lmdb.mapsize", str(1 << 24))
    p.set("fieldcount", "3")
    return p


@pytest.fixture
def db(props):
    handle = LmdbDB(props)
    handle.init()
    yield handle
    handle.cleanup()


def test_serialize_wire_format():
    assert serialize_row([Field("a", "bc")]) == b"\x01\x00\x00\x00a\x02\x00\x00\x00bc"


def test_serialize_round_trip():
    values = _record()
    assert deserialize_row(serialize_row(values)) == values


def test_empty_row_round_trip():
    assert deserialize_row(serialize_row([])) == []


def test_filter_keeps_requested_in_order():
    data = serialize_row(_record())
    assert deserialize_row_filter(data, ["field0", "field2"]) == [
        Field("field0", "v0"),
        Field("field2", "v2"),
    ]


def test_filter_with_no_fields_is_empty():
    assert deserialize_row_filter(serialize_row(_record()), []) == []


def test_truncated_row_raises():
    data = serialize_row(_record())
    with pytest.raises(YcsbError):
        deserialize_row(data[:-1])


def test_insert_then_read(db):
    assert db.insert("usertable", "user1", _record()) == Status.OK
    assert db.read("usertable", "user1", None) == (Status.OK, _record())


def test_read_selected_field(db):
    db.insert("usertable", "user1", _record())
    assert db.read("usertable", "user1", ["field1"]) == (Status.OK, [Field("field1", "v1")])


def test_read_missing_key(db):
    assert db.read("usertable", "nokey", None) == (Status.NOT_FOUND, [])


def test_scan_returns_consecutive_records(db):
    for name in ("user1", "user2", "user3"):
        db.insert("usertable", name, _record(name))
    status, rows = db.scan("usertable", "user2", 5, None)
    assert status == Status.OK
    assert rows == [_record("user2"), _record("user3")]


def test_scan_limited_and_filtered(db):
    for name in ("user1", "user2", "user3"):
        db.insert("usertable", name, _record(name))
    status, rows = db.scan("usertable", "user1", 2, ["field0"])
    assert status == Status.OK
    assert rows == [[Field("field0", "user10")], [Field("field0", "user20")]]


def test_scan_missing_start_key(db):
    db.insert("usertable", "user1", _record())
    assert db.scan("usertable", "user0", 3, None) == (Status.NOT_FOUND, [])


def test_update_merges_fields(db):
    db.insert("usertable", "user1", _record())
    assert db.update("usertable", "user1", [Field("field1", "new")]) == Status.OK
    status, values = db.read("usertable", "user1", None)
    assert status == Status.OK
    assert values == [Field("field0", "v0"), Field("field1", "new"), Field("field2", "v2")]


def test_update_missing_key_raises(db):
    with pytest.raises(YcsbError, match="Update"):
        db.update("usertable", "nokey", [Field("field0", "x")])


def test_delete_removes_record(db):
    db.insert("usertable", "user1", _record())
    assert db.delete("usertable", "user1") == Status.OK
    assert db.read("usertable", "user1", None)[0] == Status.NOT_FOUND


def test_delete_missing_key_raises(db):
    with pytest.raises(YcsbError, match="Delete"):
        db.delete("usertable", "nokey")


def test_missing_path_raises():
    with pytest.raises(YcsbError, match="path is missing"):
        LmdbDB(Properties()).init()


def test_shared_environment_reference_counted(props):
    first = LmdbDB(props)
    second = LmdbDB(props)
    first.init()
    second.init()
    first.insert("usertable", "user1", _record())
    first.cleanup()
    assert second.read("usertable", "user1", None) == (Status.OK, _record())
    second.cleanup()
    with pytest.raises(YcsbError, match="not open"):
        second.read("usertable", "user1", None)


def test_data_persists_across_reopen(props):
    with LmdbDB(props) as writer:
        writer.insert("usertable", "user1", _record())
    with LmdbDB(props) as reader:
        assert reader.read("usertable", "user1", None) == (Status.OK, _record())