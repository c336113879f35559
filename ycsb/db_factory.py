"""Registry of database bindings and construction of measured database handles."""

from __future__ import annotations

from typing import Callable

from ycsb.basic_db import BasicDB
from ycsb.db import DB
from ycsb.db_wrapper import DBWrapper
from ycsb.lmdb_db import LmdbDB
from ycsb.measurements import Measurements
from ycsb.properties import Properties
from ycsb.sqlite_db import SqliteDB
from ycsb.utils import YcsbError

__all__ = ["register_db", "create_db"]

DBCreator = Callable[[], DB]

_registry: dict[str, DBCreator] = {
    "basic": BasicDB,
    "sqlite": SqliteDB,
    "lmdb": LmdbDB,
}


def register_db(name: str, creator: DBCreator) -> bool:
    """Make ``creator`` available under ``name``, replacing any earlier binding."""
    _registry[name] = creator
    return True


def create_db(props: Properties, measurements: Measurements) -> DB:
    """Create the database named by ``dbname`` (default ``basic``), wrapped for timing."""
    name = props.get("dbname", "basic")
    creator = _registry.get(name)
    if creator is None:
        raise YcsbError(f"Unknown database name {name}")
    db = creator()
    db.props = props
    return DBWrapper(db, measurements)