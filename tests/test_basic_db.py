import io

import pytest

from ycsb.basic_db import BasicDB
from ycsb.db import Field, Status
from ycsb.properties import Properties
from ycsb.utils import YcsbError


@pytest.fixture
def echo():
    stream = io.StringIO()
    db = BasicDB(stream=stream)
    db.init()
    return db, stream


def test_read_with_fields(echo):
    db, stream = echo
    status, result = db.read("usertable", "user1", ["field0", "field1"])
    assert status == Status.OK
    assert result == []
    assert stream.getvalue() == "READ usertable user1 [ field0 field1 ]\n"


def test_read_all_fields(echo):
    db, stream = echo
    db.read("usertable", "user1", None)
    assert stream.getvalue() == "READ usertable user1 < all fields >\n"


def test_scan(echo):
    db, stream = echo
    status, rows = db.scan("usertable", "user1", 10, ["field3"])
    assert status == Status.OK
    assert rows == []
    db.scan("usertable", "user2", 5, None)
    assert stream.getvalue() == (
        "SCAN usertable user1 10 [ field3 ]\n"
        "SCAN usertable user2 5 < all fields >\n"
    )


def test_update_and_insert(echo):
    db, stream = echo
    values = [Field("field0", "abc"), Field("field1", "xyz")]
    assert db.update("t", "k", values) == Status.OK
    assert db.insert("t", "k", values) == Status.OK
    assert stream.getvalue() == (
        "UPDATE t k [ field0=abc field1=xyz ]\n"
        "INSERT t k [ field0=abc field1=xyz ]\n"
    )


def test_delete(echo):
    db, stream = echo
    assert db.delete("t", "k") == Status.OK
    assert stream.getvalue() == "DELETE t k\n"


def test_silent_mode_prints_nothing():
    props = Properties()
    props.set("basic.silent", "true")
    stream = io.StringIO()
    db = BasicDB(props, stream)
    db.init()
    assert db.insert("t", "k", [Field("a", "b")]) == Status.OK
    assert db.delete("t", "k") == Status.OK
    assert stream.getvalue() == ""


def test_defaults_to_stdout(capsys):
    db = BasicDB()
    db.init()
    db.delete("t", "k")
    assert capsys.readouterr().out == "DELETE t k\n"


def test_use_before_init_raises():
    db = BasicDB(stream=io.StringIO())
    with pytest.raises(YcsbError):
        db.delete("t", "k")


def test_context_manager_initialises():
    stream = io.StringIO()
    with BasicDB(stream=stream) as db:
        db.delete("t", "k")
    assert stream.getvalue() == "DELETE t k\n"