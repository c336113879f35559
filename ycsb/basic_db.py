"""A database that performs nothing and prints each operation it is asked to do."""

from __future__ import annotations

import sys
import threading
from typing import Sequence, TextIO

from ycsb.db import DB, Field, Status
from ycsb.properties import Properties
from ycsb.utils import YcsbError

__all__ = ["BasicDB"]

PROP_SILENT = "basic.silent"
PROP_SILENT_DEFAULT = "false"


def _field_names(fields: Sequence[str] | None) -> str:
    if fields is None:
        return " < all fields >"
    return " [ " + "".join(f"{name} " for name in fields) + "]"


def _field_values(values: list[Field]) -> str:
    return " [ " + "".join(f"{v.name}={v.value} " for v in values) + "]"


class BasicDB(DB):
    """Echoes operations to ``stream`` (standard output by default) unless ``basic.silent`` is true."""

    _lock = threading.Lock()

    def __init__(self, props: Properties | None = None, stream: TextIO | None = None) -> None:
        super().__init__(props)
        self._stream = stream
        self._out: TextIO | None = None
        self._ready = False

    def init(self) -> None:
        with self._lock:
            if self.props.get(PROP_SILENT, PROP_SILENT_DEFAULT) == "true":
                self._out = None
            else:
                self._out = self._stream if self._stream is not None else sys.stdout
            self._ready = True

    def _emit(self, line: str) -> None:
        with self._lock:
            if not self._ready:
                raise YcsbError("BasicDB used before init")
            if self._out is not None:
                self._out.write(line + "\n")
                self._out.flush()

    def read(
        self, table: str, key: str, fields: Sequence[str] | None
    ) -> tuple[Status, list[Field]]:
        self._emit(f"READ {table} {key}" + _field_names(fields))
        return Status.OK, []

    def scan(
        self, table: str, key: str, record_count: int, fields: Sequence[str] | None
    ) -> tuple[Status, list[list[Field]]]:
        self._emit(f"SCAN {table} {key} {record_count}" + _field_names(fields))
        return Status.OK, []

    def update(self, table: str, key: str, values: list[Field]) -> Status:
        self._emit(f"UPDATE {table} {key}" + _field_values(values))
        return Status.OK

    def insert(self, table: str, key: str, values: list[Field]) -> Status:
        self._emit(f"INSERT {table} {key}" + _field_values(values))
        return Status.OK

    def delete(self, table: str, key: str) -> Status:
        self._emit(f"DELETE {table} {key}")
        return Status.OK