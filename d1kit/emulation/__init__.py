"""
Emulation helpers that make SQLite answer like the remote D1 service.

Statement routing, row coercion, and metadata synthesis live here, apart from
the session that owns connections, so each can be replaced on its own.
"""

from d1kit.emulation.classifier import StatementKind, classify_statement, is_read_statement
from d1kit.emulation.metadata import read_result, write_result
from d1kit.emulation.rows import ScalarKind, coerce_scalar, row_to_record, scalar_kind

__all__ = [
    "ScalarKind",
    "StatementKind",
    "classify_statement",
    "coerce_scalar",
    "is_read_statement",
    "read_result",
    "row_to_record",
    "scalar_kind",
    "write_result",
]
