"""Database binding that stores each record as one serialized value in LMDB."""

from __future__ import annotations

import os
import struct
import threading
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import lmdb

from ycsb.db import DB, Field, Status
from ycsb.properties import Properties
from ycsb.utils import YcsbError, trim

__all__ = ["serialize_row", "deserialize_row", "deserialize_row_filter", "LmdbDB"]

PROP_DBPATH = "lmdb.dbpath"
PROP_DBPATH_DEFAULT = ""

PROP_MAPSIZE = "lmdb.mapsize"
PROP_MAPSIZE_DEFAULT = "-1"

PROP_NOSYNC = "lmdb.nosync"
PROP_NOSYNC_DEFAULT = "false"

PROP_NOMETASYNC = "lmdb.nometasync"
PROP_NOMETASYNC_DEFAULT = "false"

PROP_NORDAHEAD = "lmdb.noreadahead"
PROP_NORDAHEAD_DEFAULT = "false"

PROP_WRITEMAP = "lmdb.writemap"
PROP_WRITEMAP_DEFAULT = "false"

PROP_MAPASYNC = "lmdb.mapasync"
PROP_MAPASYNC_DEFAULT = "false"

_LEN = struct.Struct("<I")
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _encode(text: str) -> bytes:
    return text.encode(_ENCODING, _ERRORS)


def serialize_row(values: Sequence[Field]) -> bytes:
    """Encode fields as a sequence of length-prefixed name and value strings."""
    parts: list[bytes] = []
    for item in values:
        for text in (item.name, item.value):
            raw = _encode(text)
            parts.append(_LEN.pack(len(raw)))
            parts.append(raw)
    return b"".join(parts)


def _take(view: memoryview, pos: int) -> tuple[str, int]:
    if pos + _LEN.size > len(view):
        raise YcsbError("Corrupt row: truncated length")
    (size,) = _LEN.unpack_from(view, pos)
    pos += _LEN.size
    if pos + size > len(view):
        raise YcsbError("Corrupt row: truncated data")
    return bytes(view[pos : pos + size]).decode(_ENCODING, _ERRORS), pos + size


def _iter_fields(data: bytes) -> Iterator[Field]:
    view = memoryview(data)
    pos = 0
    while pos < len(view):
        name, pos = _take(view, pos)
        value, pos = _take(view, pos)
        yield Field(name, value)


def deserialize_row(data: bytes) -> list[Field]:
    """Decode every field of a serialized row."""
    return list(_iter_fields(data))


def deserialize_row_filter(data: bytes, fields: Sequence[str]) -> list[Field]:
    """Decode the fields named in ``fields``, which must appear in row order."""
    wanted = iter(fields)
    target = next(wanted, None)
    result: list[Field] = []
    if target is None:
        return result
    for item in _iter_fields(data):
        if item.name == target:
            result.append(item)
            target = next(wanted, None)
            if target is None:
                break
    return result


@dataclass
class _Shared:
    """The environment shared by every LmdbDB in the process."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    env: lmdb.Environment | None = None
    ref_cnt: int = 0


_shared = _Shared()


def _flag(props: Properties, name: str, default: str) -> bool:
    return props.get(name, default) == "true"


class LmdbDB(DB):
    """One client's handle on the shared LMDB environment."""

    def init(self) -> None:
        with _shared.lock:
            if _shared.ref_cnt == 0:
                _shared.env = self._open_env()
            _shared.ref_cnt += 1

    def _open_env(self) -> lmdb.Environment:
        props = self.props
        options: dict[str, object] = {
            "sync": not _flag(props, PROP_NOSYNC, PROP_NOSYNC_DEFAULT),
            "metasync": not _flag(props, PROP_NOMETASYNC, PROP_NOMETASYNC_DEFAULT),
            "readahead": not _flag(props, PROP_NORDAHEAD, PROP_NORDAHEAD_DEFAULT),
            "writemap": _flag(props, PROP_WRITEMAP, PROP_WRITEMAP_DEFAULT),
            "map_async": _flag(props, PROP_MAPASYNC, PROP_MAPASYNC_DEFAULT),
        }
        text = props.get(PROP_MAPSIZE, PROP_MAPSIZE_DEFAULT)
        try:
            map_size = int(trim(text))
        except ValueError:
            raise YcsbError(f"Invalid integer for {PROP_MAPSIZE}: {text!r}") from None
        if map_size >= 0:
            options["map_size"] = map_size

        db_path = props.get(PROP_DBPATH, PROP_DBPATH_DEFAULT)
        if db_path == "":
            raise YcsbError("LMDB db path is missing")
        try:
            os.mkdir(db_path, 0o775)
        except FileExistsError:
            pass
        except OSError as err:
            raise YcsbError(f"Init mkdir: {err.strerror}") from err
        try:
            return lmdb.open(db_path, subdir=True, create=True, mode=0o664, **options)
        except lmdb.Error as err:
            raise YcsbError(f"Init mdb_env_open: {err}") from err

    def cleanup(self) -> None:
        with _shared.lock:
            if _shared.ref_cnt <= 0:
                return
            _shared.ref_cnt -= 1
            if _shared.ref_cnt == 0 and _shared.env is not None:
                _shared.env.close()
                _shared.env = None

    @staticmethod
    def _env() -> lmdb.Environment:
        env = _shared.env
        if env is None:
            raise YcsbError("LMDB environment is not open")
        return env

    def read(
        self, table: str, key: str, fields: Sequence[str] | None
    ) -> tuple[Status, list[Field]]:
        env = self._env()
        try:
            with env.begin() as txn:
                data = txn.get(_encode(key))
        except lmdb.Error as err:
            raise YcsbError(f"Read mdb_get: {err}") from err
        if data is None:
            return Status.NOT_FOUND, []
        if fields is not None:
            return Status.OK, deserialize_row_filter(data, fields)
        return Status.OK, deserialize_row(data)

    def scan(
        self, table: str, key: str, record_count: int, fields: Sequence[str] | None
    ) -> tuple[Status, list[list[Field]]]:
        env = self._env()
        rows: list[bytes] = []
        try:
            with env.begin() as txn:
                cursor = txn.cursor()
                if not cursor.set_key(_encode(key)):
                    return Status.NOT_FOUND, []
                for _ in range(record_count):
                    rows.append(cursor.value())
                    if not cursor.next():
                        break
        except lmdb.Error as err:
            raise YcsbError(f"Scan mdb_cursor_get: {err}") from err
        if fields is not None:
            return Status.OK, [deserialize_row_filter(data, fields) for data in rows]
        return Status.OK, [deserialize_row(data) for data in rows]

    def update(self, table: str, key: str, values: list[Field]) -> Status:
        env = self._env()
        raw_key = _encode(key)
        try:
            with env.begin(write=True) as txn:
                data = txn.get(raw_key)
                if data is None:
                    raise YcsbError("Update mdb_get: MDB_NOTFOUND: No matching key/data pair found")
                current = deserialize_row(data)
                by_name = {item.name: item for item in current}
                for new_field in values:
                    existing = by_name.get(new_field.name)
                    if existing is not None:
                        existing.value = new_field.value
                txn.put(raw_key, serialize_row(current))
        except lmdb.Error as err:
            raise YcsbError(f"Update mdb_put: {err}") from err
        return Status.OK

    def insert(self, table: str, key: str, values: list[Field]) -> Status:
        env = self._env()
        data = serialize_row(values)
        try:
            with env.begin(write=True) as txn:
                txn.put(_encode(key), data)
        except lmdb.Error as err:
            raise YcsbError(f"Insert mdb_put: {err}") from err
        return Status.OK

    def delete(self, table: str, key: str) -> Status:
        env = self._env()
        try:
            with env.begin(write=True) as txn:
                if not txn.delete(_encode(key)):
                    raise YcsbError("Delete mdb_del: MDB_NOTFOUND: No matching key/data pair found")
        except lmdb.Error as err:
            raise YcsbError(f"Delete mdb_del: {err}") from err
        return Status.OK