import io

import pytest

from ycsb.properties import Properties
from ycsb.utils import YcsbError


def test_get_with_and_without_default():
    props = Properties()
    assert props.get("missing") == ""
    assert props.get("missing", "fallback") == "fallback"
    props.set("key", "value")
    assert props.get("key", "fallback") == "value"


def test_getitem_missing_raises():
    props = Properties()
    props.set("present", "value")
    assert props["present"] == "value"
    with pytest.raises(KeyError):
        props["nothing"]


def test_set_overwrites():
    props = Properties()
    props.set("a", "1")
    props.set("a", "2")
    assert props["a"] == "2"


def test_contains():
    props = Properties()
    props.set("present", "")
    assert "present" in props
    assert "absent" not in props


def test_load_parses_lines():
    text = "# comment line\nrecordcount = 1000\n\nno equals here\n  table=usertable  \nexpr=a=b\n"
    props = Properties()
    props.load(io.StringIO(text))
    assert props["recordcount"] == "1000"
    assert props["table"] == "usertable"
    assert props["expr"] == "a=b"
    assert "no equals here" not in props
    assert "# comment line" not in props


def test_load_skips_commented_assignment():
    props = Properties()
    props.load(io.StringIO("#hidden=1\nshown=2"))
    assert "#hidden" not in props
    assert props["shown"] == "2"


def test_load_overrides_earlier_values():
    props = Properties()
    props.set("threadcount", "1")
    props.load(io.StringIO("threadcount=4\r\n"))
    assert props["threadcount"] == "4"


def test_load_closed_stream_raises():
    stream = io.StringIO("a=b")
    stream.close()
    with pytest.raises(YcsbError, match="File not open!"):
        Properties().load(stream)