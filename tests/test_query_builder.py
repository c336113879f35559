import sqlite3

import pytest

from ycsb.query_builder import (
    build_create_table_query,
    build_delete_query,
    build_insert_query,
    build_read_query,
    build_scan_query,
    build_update_query,
)

TABLE = "usertable"
KEY = "user_id"
FIELDS = ["field0", "field1", "field2"]


def test_create_table_text():
    assert (
        build_create_table_query(TABLE, KEY, ["field0", "field1"])
        == "CREATE TABLE IF NOT EXISTS usertable (user_id TEXT PRIMARY KEY, field0 TEXT, field1 TEXT)"
    )


def test_update_text():
    assert (
        build_update_query(TABLE, KEY, ["field0", "field1"])
        == "UPDATE usertable SET field0 = ?, field1 = ? WHERE user_id = ?"
    )


def test_scan_text():
    assert (
        build_scan_query(TABLE, KEY, ["field0"])
        == "SELECT user_id, field0 FROM usertable WHERE user_id >= ? ORDER BY user_id LIMIT ?"
    )


@pytest.mark.parametrize("count", [1, 2, 5])
def test_placeholder_counts(count):
    fields = [f"f{i}" for i in range(count)]
    assert build_insert_query(TABLE, KEY, fields).count("?") == count + 1
    assert build_update_query(TABLE, KEY, fields).count("?") == count + 1
    assert build_read_query(TABLE, KEY, fields).count("?") == 1
    assert build_scan_query(TABLE, KEY, fields).count("?") == 2
    assert build_delete_query(TABLE, KEY).count("?") == 1


def test_read_lists_fields_in_order():
    query = build_read_query(TABLE, KEY, FIELDS)
    assert query.startswith("SELECT field0, field1, field2 FROM usertable")
    assert query.endswith("WHERE user_id = ?")


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    connection.execute(build_create_table_query(TABLE, KEY, FIELDS))
    yield connection
    connection.close()


def test_queries_round_trip_through_sqlite(conn):
    insert = build_insert_query(TABLE, KEY, FIELDS)
    for name in ("a", "b", "c"):
        conn.execute(insert, (name, name + "0", name + "1", name + "2"))

    row = conn.execute(build_read_query(TABLE, KEY, FIELDS), ("b",)).fetchone()
    assert row == ("b0", "b1", "b2")

    conn.execute(build_update_query(TABLE, KEY, ["field1"]), ("new", "b"))
    row = conn.execute(build_read_query(TABLE, KEY, ["field1"]), ("b",)).fetchone()
    assert row == ("new",)

    rows = conn.execute(build_scan_query(TABLE, KEY, ["field0"]), ("b", 5)).fetchall()
    assert rows == [("b", "b0"), ("c", "c0")]

    conn.execute(build_delete_query(TABLE, KEY), ("a",))
    assert conn.execute(build_read_query(TABLE, KEY, FIELDS), ("a",)).fetchone() is None


def test_insert_replaces_existing_row(conn):
    insert = build_insert_query(TABLE, KEY, FIELDS)
    conn.execute(insert, ("k", "1", "2", "3"))
    conn.execute(insert, ("k", "4", "5", "6"))
    rows = conn.execute(f"SELECT * FROM {TABLE}").fetchall()
    assert rows == [("k", "4", "5", "6")]


def test_scan_respects_limit(conn):
    insert = build_insert_query(TABLE, KEY, FIELDS)
    for name in ("k1", "k2", "k3", "k4"):
        conn.execute(insert, (name, "x", "y", "z"))
    rows = conn.execute(build_scan_query(TABLE, KEY, FIELDS), ("k1", 2)).fetchall()
    assert [row[0] for row in rows] == ["k1", "k2"]