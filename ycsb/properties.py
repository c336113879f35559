"""String key/value configuration store."""

from __future__ import annotations

from typing import Iterable

from ycsb.utils import YcsbError, trim

__all__ = ["Properties"]


class Properties:
    """A mapping of property names to string values."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str, default: str = "") -> str:
        """Return the value of ``key``, or ``default`` when it is unset."""
        return self._values.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def set(self, key: str, value: str) -> None:
        """Set ``key`` to ``value``, replacing any earlier value."""
        self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def load(self, stream: Iterable[str]) -> None:
        """Read ``name=value`` lines; ``#`` comments and lines without ``=`` are skipped."""
        if getattr(stream, "closed", False):
            raise YcsbError("File not open!")
        for raw in stream:
            line = raw.rstrip("\n")
            if line.startswith("#"):
                continue
            name, sep, value = line.partition("=")
            if not sep:
                continue
            self.set(trim(name), trim(value))