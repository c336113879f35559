"""A database decorator that times every operation and reports it."""

from __future__ import annotations

from typing import Sequence

from ycsb.db import DB, Field, Status
from ycsb.measurements import Measurements, Operation
from ycsb.sync import Timer

__all__ = ["DBWrapper"]


class DBWrapper(DB):
    """Forwards to ``db`` and records each operation's latency in ``measurements``."""

    def __init__(self, db: DB, measurements: Measurements) -> None:
        super().__init__(db.props)
        self.db = db
        self.measurements = measurements

    def init(self) -> None:
        self.db.init()

    def cleanup(self) -> None:
        self.db.cleanup()

    def _report(self, status: Status, ok_op: Operation, failed_op: Operation, elapsed: int) -> None:
        self.measurements.report(ok_op if status == Status.OK else failed_op, elapsed)

    def read(
        self, table: str, key: str, fields: Sequence[str] | None
    ) -> tuple[Status, list[Field]]:
        timer = Timer(ns=True)
        timer.start()
        status, result = self.db.read(table, key, fields)
        self._report(status, Operation.READ, Operation.READ_FAILED, timer.end())
        return status, result

    def scan(
        self, table: str, key: str, record_count: int, fields: Sequence[str] | None
    ) -> tuple[Status, list[list[Field]]]:
        timer = Timer(ns=True)
        timer.start()
        status, result = self.db.scan(table, key, record_count, fields)
        self._report(status, Operation.SCAN, Operation.SCAN_FAILED, timer.end())
        return status, result

    def update(self, table: str, key: str, values: list[Field]) -> Status:
        timer = Timer(ns=True)
        timer.start()
        status = self.db.update(table, key, values)
        self._report(status, Operation.UPDATE, Operation.UPDATE_FAILED, timer.end())
        return status

    def insert(self, table: str, key: str, values: list[Field]) -> Status:
        timer = Timer(ns=True)
        timer.start()
        status = self.db.insert(table, key, values)
        self._report(status, Operation.INSERT, Operation.INSERT_FAILED, timer.end())
        return status

    def delete(self, table: str, key: str) -> Status:
        timer = Timer(ns=True)
        timer.start()
        status = self.db.delete(table, key)
        self._report(status, Operation.DELETE, Operation.DELETE_FAILED, timer.end())
        return status