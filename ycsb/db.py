"""Database interface used by the workload; one instance per client thread."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ycsb.properties import Properties

__all__ = ["Field", "Status", "DB"]


@dataclass
class Field:
    """A named value in a record."""

    name: str
    value: str


class Status(enum.IntEnum):
    """Outcome of a database operation."""

    OK = 0
    ERROR = 1
    NOT_FOUND = 2
    NOT_IMPLEMENTED = 3


class DB(ABC):
    """Database binding; ``props`` holds the run's configuration."""

    def __init__(self, props: Properties | None = None) -> None:
        self.props = props if props is not None else Properties()

    def init(self) -> None:
        """Prepare any state needed to access the database."""

    def cleanup(self) -> None:
        """Release state acquired in :meth:`init`."""

    def __enter__(self) -> "DB":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @abstractmethod
    def read(
        self, table: str, key: str, fields: Sequence[str] | None
    ) -> tuple[Status, list[Field]]:
        """Read one record; ``fields`` of None means every field."""

    @abstractmethod
    def scan(
        self, table: str, key: str, record_count: int, fields: Sequence[str] | None
    ) -> tuple[Status, list[list[Field]]]:
        """Read up to ``record_count`` records starting at ``key``."""

    @abstractmethod
    def update(self, table: str, key: str, values: list[Field]) -> Status:
        """Overwrite the given fields of an existing record."""

    @abstractmethod
    def insert(self, table: str, key: str, values: list[Field]) -> Status:
        """Insert a record."""

    @abstractmethod
    def delete(self, table: str, key: str) -> Status:
        """Delete a record."""