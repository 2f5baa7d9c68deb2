"""Conversion of driver-native cell values into display-safe values.

Every cell leaving an adapter is one of: the ``NULL`` marker, a string, an
int/float/Decimal, or a binary placeholder string. Consumers never see raw
driver nulls or byte buffers.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Union

BINARY_SAMPLE_SIZE = 100
_PRINTABLE_CONTROL = frozenset({0x09, 0x0A, 0x0D})


class NullValue:
    """Singleton marker for SQL NULL cells."""

    _instance: NullValue | None = None

    def __new__(cls) -> NullValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NULL"

    __str__ = __repr__

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "NULL"


NULL = NullValue()

Cell = Union[NullValue, str, int, float, Decimal]


def is_binary(data: bytes) -> bool:
    """Guess whether a byte sequence is binary rather than text.

    Samples at most the first 100 bytes and counts control bytes other than
    tab, carriage return and line feed. More than one sixth of the sample
    marks the data as binary.
    """
    sample = data[:BINARY_SAMPLE_SIZE]
    if not sample:
        return False
    non_printable = sum(1 for b in sample if b < 32 and b not in _PRINTABLE_CONTROL)
    return non_printable * 6 > len(sample)


def binary_placeholder(size: int) -> str:
    return f"[BINARY DATA {size} bytes]"


def normalize_value(value: Any) -> Cell:
    """Normalize a single driver value."""
    if value is None:
        return NULL
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        if is_binary(data):
            return binary_placeholder(len(data))
        return data.decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float, Decimal, str)):
        return value
    return str(value)


def normalize_row(row: Iterable[Any]) -> list[Cell]:
    return [normalize_value(value) for value in row]


__all__ = [
    "BINARY_SAMPLE_SIZE",
    "Cell",
    "NULL",
    "NullValue",
    "binary_placeholder",
    "is_binary",
    "normalize_row",
    "normalize_value",
]
