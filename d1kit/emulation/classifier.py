"""
Read/write routing for SQL text.

SQLite hands back rows through a cursor for reads and a change count plus last
rowid for writes, while the remote service accepts any statement on one
endpoint. The emulator therefore has to pick a path before executing, and does
so with a textual check rather than a parser:

    any statement whose text contains "select" (case-insensitive) is a read.

Known misroutes, kept as-is:

* ``INSERT INTO t SELECT ...`` and other writes with a sub-select are routed
  as reads. The write still happens, but the metadata reports it as a read.
* A write whose comment or string literal mentions "select" is routed as a
  read for the same reason.
* ``INSERT ... RETURNING`` and ``PRAGMA`` statements that yield rows are routed
  as writes, so their rows are dropped.
"""

from __future__ import annotations

from enum import Enum


class StatementKind(str, Enum):
    READ = "read"
    WRITE = "write"


_READ_TOKEN = "select"


def classify_statement(sql: str) -> StatementKind:
    """Return READ if the text mentions "select" anywhere, otherwise WRITE."""
    if _READ_TOKEN in sql.lower():
        return StatementKind.READ
    return StatementKind.WRITE


def is_read_statement(sql: str) -> bool:
    return classify_statement(sql) is StatementKind.READ


__all__ = ["StatementKind", "classify_statement", "is_read_statement"]
