"""Database binding that stores each record as a row of an SQLite table."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass, field
from itertools import islice
from typing import Callable, Sequence

from ycsb.core_workload import (
    FIELD_COUNT_DEFAULT,
    FIELD_COUNT_PROPERTY,
    FIELD_NAME_PREFIX,
    FIELD_NAME_PREFIX_DEFAULT,
    TABLENAME_DEFAULT,
)
from ycsb.db import DB, Field, Status
from ycsb.properties import Properties
from ycsb.query_builder import (
    build_create_table_query,
    build_delete_query,
    build_insert_query,
    build_read_query,
    build_scan_query,
    build_update_query,
)
from ycsb.utils import YcsbError, trim

__all__ = ["SqliteDB"]

PROP_DBPATH = "sqlite.dbpath"
PROP_DBPATH_DEFAULT = ""

PROP_CACHE_SIZE = "sqlite.cache_size"
PROP_CACHE_SIZE_DEFAULT = "-2000"

PROP_PAGE_SIZE = "sqlite.page_size"
PROP_PAGE_SIZE_DEFAULT = "4096"

PROP_JOURNAL_MODE = "sqlite.journal_mode"
PROP_JOURNAL_MODE_DEFAULT = "WAL"

PROP_SYNCHRONOUS = "sqlite.synchronous"
PROP_SYNCHRONOUS_DEFAULT = "NORMAL"

PROP_PRIMARY_KEY = "sqlite.primary_key"
PROP_PRIMARY_KEY_DEFAULT = "user_id"

PROP_CREATE_TABLE = "sqlite.create_table"
PROP_CREATE_TABLE_DEFAULT = "true"


@dataclass
class _Shared:
    """Connection and schema shared by every SqliteDB in the process."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    conn: sqlite3.Connection | None = None
    ref_cnt: int = 0
    key: str = ""
    field_prefix: str = ""
    field_count: int = 0
    table_name: str = ""

    def field_names(self) -> list[str]:
        return [f"{self.field_prefix}{i}" for i in range(self.field_count)]

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None


_shared = _Shared()


def _int_prop(props: Properties, name: str, default: str) -> int:
    text = props.get(name, default)
    try:
        return int(trim(text))
    except ValueError:
        raise YcsbError(f"Invalid integer for {name}: {text!r}") from None


def _text(value: object) -> str:
    return "" if value is None else str(value)


class SqliteDB(DB):
    """One client's view of the shared SQLite database; queries are prepared per client."""

    def __init__(self, props: Properties | None = None) -> None:
        super().__init__(props)
        self._read_all = ""
        self._scan_all = ""
        self._update_all = ""
        self._insert = ""
        self._delete = ""
        self._read_field: dict[str, str] = {}
        self._scan_field: dict[str, str] = {}
        self._update_field: dict[str, str] = {}

    def init(self) -> None:
        with _shared.lock:
            if _shared.ref_cnt == 0:
                self._open_db()
                try:
                    self._set_pragma()
                except BaseException:
                    _shared.close()
                    raise
            try:
                self._prepare_queries()
            except BaseException:
                if _shared.ref_cnt == 0:
                    _shared.close()
                raise
            _shared.ref_cnt += 1

    def _open_db(self) -> None:
        db_path = self.props.get(PROP_DBPATH, PROP_DBPATH_DEFAULT)
        if db_path == "":
            raise YcsbError("SQLite db path is missing")
        try:
            conn = sqlite3.connect(db_path, check_same_thread=False, isolation_level=None)
        except sqlite3.Error as err:
            raise YcsbError(f"Init open: {err}") from err
        _shared.conn = conn
        _shared.key = self.props.get(PROP_PRIMARY_KEY, PROP_PRIMARY_KEY_DEFAULT)
        _shared.field_prefix = self.props.get(FIELD_NAME_PREFIX, FIELD_NAME_PREFIX_DEFAULT)
        try:
            _shared.field_count = _int_prop(self.props, FIELD_COUNT_PROPERTY, FIELD_COUNT_DEFAULT)
        except YcsbError:
            _shared.close()
            raise
        _shared.table_name = self.props.get(TABLENAME_DEFAULT, TABLENAME_DEFAULT)

        if self.props.get(PROP_CREATE_TABLE, PROP_CREATE_TABLE_DEFAULT) == "true":
            query = build_create_table_query(
                _shared.table_name, _shared.key, _shared.field_names()
            )
            try:
                conn.execute(query)
            except sqlite3.Error as err:
                _shared.close()
                raise YcsbError(f"Create table: {err}") from err

    def _set_pragma(self) -> None:
        conn = self._connection()
        cache_size = _int_prop(self.props, PROP_CACHE_SIZE, PROP_CACHE_SIZE_DEFAULT)
        page_size = _int_prop(self.props, PROP_PAGE_SIZE, PROP_PAGE_SIZE_DEFAULT)
        journal_mode = self.props.get(PROP_JOURNAL_MODE, PROP_JOURNAL_MODE_DEFAULT)
        synchronous = self.props.get(PROP_SYNCHRONOUS, PROP_SYNCHRONOUS_DEFAULT)
        for name, value in (
            ("cache_size", cache_size),
            ("page_size", page_size),
            ("journal_mode", journal_mode),
            ("synchronous", synchronous),
        ):
            try:
                conn.execute(f"PRAGMA {name} = {value}").fetchall()
            except sqlite3.Error as err:
                raise YcsbError(f"Init exec {name}: {err}") from err

    @staticmethod
    def _connection() -> sqlite3.Connection:
        if _shared.conn is None:
            raise YcsbError("SQLite database is not open")
        return _shared.conn

    @classmethod
    def _prepare(cls, query: str) -> str:
        """Compile ``query`` without running it, so errors surface early."""
        params = (None,) * query.count("?")
        try:
            cls._connection().execute("EXPLAIN " + query, params).fetchall()
        except sqlite3.Error as err:
            raise YcsbError(f"prepare: {err}") from err
        return query

    def _prepare_queries(self) -> None:
        table, key = _shared.table_name, _shared.key
        fields = _shared.field_names()

        self._read_all = self._prepare(build_read_query(table, key, fields))
        self._read_field = {
            name: self._prepare(build_read_query(table, key, [name])) for name in fields
        }
        self._scan_all = self._prepare(build_scan_query(table, key, fields))
        self._scan_field = {
            name: self._prepare(build_scan_query(table, key, [name])) for name in fields
        }
        self._update_all = self._prepare(build_update_query(table, key, fields))
        self._update_field = {
            name: self._prepare(build_update_query(table, key, [name])) for name in fields
        }
        self._insert = self._prepare(build_insert_query(table, key, fields))
        self._delete = self._prepare(build_delete_query(table, key))

    def cleanup(self) -> None:
        with _shared.lock:
            self._read_field.clear()
            self._scan_field.clear()
            self._update_field.clear()
            self._read_all = self._scan_all = self._update_all = ""
            self._insert = self._delete = ""
            if _shared.ref_cnt <= 0:
                return
            _shared.ref_cnt -= 1
            if _shared.ref_cnt == 0:
                _shared.close()

    def _choose(
        self,
        fields: Sequence[str],
        all_query: str,
        per_field: dict[str, str],
        builder: Callable[[str, str, Sequence[str]], str],
    ) -> str:
        if len(fields) == _shared.field_count:
            return all_query
        if len(fields) == 1:
            query = per_field.get(fields[0])
            if query is not None:
                return query
        return self._prepare(builder(_shared.table_name, _shared.key, list(fields)))

    def read(
        self, table: str, key: str, fields: Sequence[str] | None
    ) -> tuple[Status, list[Field]]:
        with _shared.lock:
            conn = self._connection()
            if fields is None:
                query = self._read_all
            else:
                query = self._choose(fields, self._read_all, self._read_field, build_read_query)
            try:
                cursor = conn.execute(query, (key,))
                row = cursor.fetchone()
            except sqlite3.Error:
                return Status.ERROR, []
            if row is None:
                return Status.NOT_FOUND, []
            names = [column[0] for column in cursor.description]
            return Status.OK, [Field(name, _text(value)) for name, value in zip(names, row)]

    def scan(
        self, table: str, key: str, record_count: int, fields: Sequence[str] | None
    ) -> tuple[Status, list[list[Field]]]:
        with _shared.lock:
            conn = self._connection()
            if fields is None:
                query = self._scan_all
            else:
                query = self._choose(fields, self._scan_all, self._scan_field, build_scan_query)
            try:
                cursor = conn.execute(query, (key, record_count))
                rows = list(islice(cursor, max(record_count, 0)))
            except sqlite3.Error:
                return Status.ERROR, []
            names = [column[0] for column in cursor.description][1:]
            result = [
                [Field(name, _text(value)) for name, value in zip(names, row[1:])]
                for row in rows
            ]
            if not result:
                return Status.NOT_FOUND, []
            return Status.OK, result

    def update(self, table: str, key: str, values: list[Field]) -> Status:
        with _shared.lock:
            conn = self._connection()
            query = self._choose(
                [v.name for v in values], self._update_all, self._update_field, build_update_query
            )
            params = tuple(v.value for v in values) + (key,)
            try:
                conn.execute(query, params)
            except sqlite3.Error:
                return Status.ERROR
            return Status.OK

    def insert(self, table: str, key: str, values: list[Field]) -> Status:
        with _shared.lock:
            conn = self._connection()
            if len(values) != _shared.field_count:
                return Status.ERROR
            try:
                conn.execute(self._insert, (key, *(v.value for v in values)))
            except sqlite3.Error:
                return Status.ERROR
            return Status.OK

    def delete(self, table: str, key: str) -> Status:
        with _shared.lock:
            conn = self._connection()
            try:
                conn.execute(self._delete, (key,))
            except sqlite3.Error:
                return Status.ERROR
            return Status.OK