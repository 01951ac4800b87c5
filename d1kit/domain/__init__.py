"""
Domain package for d1kit.

Exports the wire models shared by the remote adapter and the local emulator.
Keep this package focused on data definitions and validation concerns.
"""

from d1kit.domain.models import (
    ApiError,
    DatabaseEnvelope,
    DatabaseListEnvelope,
    DatabaseRecord,
    DatabaseSettings,
    DeleteEnvelope,
    DeleteResult,
    Envelope,
    QueryEnvelope,
    QueryMeta,
    QueryResult,
    ReadReplication,
    ReplicationMode,
    RowRecord,
    Scalar,
    Timings,
)

__all__ = [
    "ApiError",
    "DatabaseEnvelope",
    "DatabaseListEnvelope",
    "DatabaseRecord",
    "DatabaseSettings",
    "DeleteEnvelope",
    "DeleteResult",
    "Envelope",
    "QueryEnvelope",
    "QueryMeta",
    "QueryResult",
    "ReadReplication",
    "ReplicationMode",
    "RowRecord",
    "Scalar",
    "Timings",
]
