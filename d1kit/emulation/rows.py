"""
Conversion of SQLite result rows into JSON-safe row records.

SQLite columns are dynamically typed, so a value's storage class is only known
once it has been read. Every value is tagged with its storage class and then
coerced: blobs become text, everything else passes through unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Sequence

from d1kit.domain.models import RowRecord, Scalar


class ScalarKind(str, Enum):
    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


def scalar_kind(value: Any) -> ScalarKind:
    if value is None:
        return ScalarKind.NULL
    if isinstance(value, int):
        return ScalarKind.INTEGER
    if isinstance(value, float):
        return ScalarKind.REAL
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ScalarKind.BLOB
    return ScalarKind.TEXT


def coerce_scalar(value: Any) -> Scalar:
    """
    Make a column value JSON-representable.

    Blobs are decoded as UTF-8 with undecodable bytes replaced; any value of a
    type SQLite does not natively return (e.g. from a custom converter) is
    rendered with ``str``.
    """
    kind = scalar_kind(value)
    if kind is ScalarKind.BLOB:
        return bytes(value).decode("utf-8", errors="replace")
    if kind is ScalarKind.TEXT and not isinstance(value, str):
        return str(value)
    return value


def row_to_record(columns: Sequence[str], values: Sequence[Any]) -> RowRecord:
    """Pair column names with coerced values, keeping column order."""
    return {column: coerce_scalar(value) for column, value in zip(columns, values)}


__all__ = ["ScalarKind", "coerce_scalar", "row_to_record", "scalar_kind"]
