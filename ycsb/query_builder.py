"""SQL text for the statements the SQLite binding prepares."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "build_create_table_query",
    "build_read_query",
    "build_insert_query",
    "build_delete_query",
    "build_update_query",
    "build_scan_query",
]


def build_create_table_query(table: str, key: str, fields: Sequence[str]) -> str:
    """Create ``table`` with a TEXT primary key and one TEXT column per field."""
    columns = "".join(f", {name} TEXT" for name in fields)
    return f"CREATE TABLE IF NOT EXISTS {table} ({key} TEXT PRIMARY KEY{columns})"


def build_read_query(table: str, key: str, fields: Sequence[str]) -> str:
    """Select ``fields`` of the row whose key equals the single parameter."""
    return f"SELECT {', '.join(fields)} FROM {table} WHERE {key} = ?"


def build_insert_query(table: str, key: str, fields: Sequence[str]) -> str:
    """Insert or replace a row; parameters are the key followed by each field."""
    columns = "".join(f", {name}" for name in fields)
    placeholders = ", ?" * len(fields)
    return f"INSERT OR REPLACE INTO {table} ({key}{columns}) VALUES (?{placeholders})"


def build_delete_query(table: str, key: str) -> str:
    """Delete the row whose key equals the single parameter."""
    return f"DELETE FROM {table} WHERE {key} = ?"


def build_update_query(table: str, key: str, fields: Sequence[str]) -> str:
    """Set ``fields``; parameters are each field's value followed by the key."""
    assignments = ", ".join(f"{name} = ?" for name in fields)
    return f"UPDATE {table} SET {assignments} WHERE {key} = ?"


def build_scan_query(table: str, key: str, fields: Sequence[str]) -> str:
    """Select the key and ``fields`` of rows from a start key on, up to a limit."""
    columns = "".join(f", {name}" for name in fields)
    return (
        f"SELECT {key}{columns} FROM {table} WHERE {key} >= ? "
        f"ORDER BY {key} LIMIT ?"
    )