"""Hashing, random helpers and small string utilities shared by the benchmark."""

from __future__ import annotations

import random
import threading

__all__ = [
    "YcsbError",
    "fnv_hash64",
    "hash_value",
    "thread_local_random_int",
    "thread_local_random_double",
    "random_print_char",
    "str_to_bool",
    "trim",
]

FNV_OFFSET_BASIS_64 = 0xCBF29CE484222325
FNV_PRIME_64 = 1099511628211
_MASK_64 = (1 << 64) - 1

# The same characters the C locale treats as white space.
_WHITESPACE = " \t\n\v\f\r"

_local = threading.local()


class YcsbError(Exception):
    """Raised for any benchmark configuration or runtime failure."""


def fnv_hash64(val: int) -> int:
    """Return the 64-bit FNV-1 style hash of the low eight bytes of ``val``."""
    hashed = FNV_OFFSET_BASIS_64
    val &= _MASK_64
    for _ in range(8):
        octet = val & 0xFF
        val >>= 8
        hashed ^= octet
        hashed = (hashed * FNV_PRIME_64) & _MASK_64
    return hashed


def hash_value(val: int) -> int:
    """Hash used to scatter record keys."""
    return fnv_hash64(val)


def _rng() -> random.Random:
    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = random.Random()
        _local.rng = rng
    return rng


def thread_local_random_int() -> int:
    """Return a random integer in ``[1, 2**31 - 2]`` from a per-thread generator."""
    return _rng().randint(1, 2**31 - 2)


def thread_local_random_double(low: float = 0.0, high: float = 1.0) -> float:
    """Return a random float in ``[low, high)`` from a per-thread generator."""
    return low + (high - low) * _rng().random()


def random_print_char() -> str:
    """Return a random printable ASCII character (``!`` through ``~``)."""
    return chr(random.randrange(94) + 33)


def str_to_bool(text: str) -> bool:
    """Parse ``true``/``1`` or ``false``/``0`` (case-insensitive)."""
    lowered = text.lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise YcsbError("Invalid bool string: " + lowered)


def trim(text: str) -> str:
    """Strip leading and trailing ASCII white space."""
    return text.strip(_WHITESPACE)