"""
Domain models for d1kit.

Defines the wire shapes shared by both backends: the response envelope, the
database record, and the per-statement query result. Serializing any of these
with ``model_dump(mode="json")`` yields exactly the JSON the remote service
emits, which is what lets the local emulator pass for it.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, Field, field_validator, model_validator

T = TypeVar("T")

# A column value once it has crossed the emulator boundary.
Scalar = Union[None, int, float, str]
RowRecord = Dict[str, Scalar]


class ReplicationMode(str, Enum):
    AUTO = "auto"
    DISABLED = "disabled"

    @classmethod
    def parse(cls, value: Any) -> "ReplicationMode":
        """Anything other than "auto" means replication is disabled."""
        if isinstance(value, cls):
            return value
        return cls.AUTO if value == cls.AUTO.value else cls.DISABLED


class ReadReplication(BaseModel):
    mode: ReplicationMode = ReplicationMode.DISABLED

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> ReplicationMode:
        return ReplicationMode.parse(value)


class DatabaseSettings(BaseModel):
    """Mutable settings accepted by update_database."""

    replication: ReplicationMode = ReplicationMode.DISABLED

    @field_validator("replication", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> ReplicationMode:
        return ReplicationMode.parse(value)

    def to_request_body(self) -> Dict[str, Any]:
        return {"read_replication": {"mode": self.replication.value}}


class DatabaseRecord(BaseModel):
    """
    One logical database as reported by either backend.
    """

    created_at: str = Field("", description="Creation timestamp (RFC3339).")
    file_size: int = Field(0, description="Physical size in bytes.")
    name: str = Field("", description="Human-assigned database name.")
    num_tables: int = Field(0, description="Number of user-visible tables.")
    read_replication: ReadReplication = Field(default_factory=ReadReplication)
    uuid: str = Field(..., description="Opaque, backend-minted identifier.")
    version: str = Field("", description="Backend version tag.")


class DeleteResult(BaseModel):
    pass


class Timings(BaseModel):
    sql_duration_ms: float = 0.0


class QueryMeta(BaseModel):
    changed_db: bool = False
    changes: int = 0
    duration: float = 0.0
    last_row_id: int = 0
    rows_read: int = 0
    rows_written: int = 0
    served_by_primary: bool = False
    served_by_region: str = ""
    size_after: int = 0
    timings: Optional[Timings] = None


class QueryResult(BaseModel):
    """
    Outcome of one executed statement.

    ``results`` is a list of row records for the standard query endpoint; the
    remote raw endpoint returns a columnar object here instead.
    """

    meta: QueryMeta = Field(default_factory=QueryMeta)
    results: Any = Field(default_factory=list)
    success: bool = True


class ApiError(BaseModel):
    code: int
    message: str


class Envelope(BaseModel, Generic[T]):
    """
    Uniform wrapper returned by every session operation.

    ``success`` and ``errors`` always agree: a successful envelope carries no
    errors and a failed one carries at least one.
    """

    result: Optional[T] = None
    success: bool
    messages: List[str] = Field(default_factory=list)
    errors: List[ApiError] = Field(default_factory=list)

    @field_validator("messages", "errors", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _success_matches_errors(self) -> "Envelope[T]":
        if self.success and self.errors:
            raise ValueError("a successful envelope cannot carry errors")
        if not self.success and not self.errors:
            raise ValueError("a failed envelope must carry at least one error")
        return self

    @classmethod
    def ok(cls, result: Any) -> "Envelope[T]":
        return cls(result=result, success=True)

    @classmethod
    def fail(cls, code: int, message: str, result: Any = None) -> "Envelope[T]":
        return cls(result=result, success=False, errors=[ApiError(code=code, message=message)])


DatabaseEnvelope = Envelope[DatabaseRecord]
DatabaseListEnvelope = Envelope[List[DatabaseRecord]]
DeleteEnvelope = Envelope[DeleteResult]
QueryEnvelope = Envelope[List[QueryResult]]


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
