"""
Synthesis of remote-style query metadata for locally executed statements.
"""

from __future__ import annotations

from typing import List

from d1kit.domain.models import QueryMeta, QueryResult, RowRecord, Timings
from d1kit.utils.profiler import ProfileStats


def _base_meta(stats: ProfileStats, region: str, size_after: int) -> QueryMeta:
    duration_ms = stats.duration_ms
    return QueryMeta(
        duration=duration_ms,
        served_by_primary=True,
        served_by_region=region,
        size_after=size_after,
        timings=Timings(sql_duration_ms=duration_ms),
    )


def read_result(
    rows: List[RowRecord], stats: ProfileStats, region: str, size_after: int
) -> QueryResult:
    """A read never changes the database; rows_read is the number of rows returned."""
    meta = _base_meta(stats, region, size_after)
    meta.rows_read = len(rows)
    return QueryResult(meta=meta, results=rows, success=True)


def write_result(
    affected: int, last_row_id: int | None, stats: ProfileStats, region: str, size_after: int
) -> QueryResult:
    """
    Metadata for a write.

    sqlite3 reports -1 affected rows for statements that are not DML (CREATE,
    DROP, ...); those count as zero changes.
    """
    changes = max(affected, 0)
    meta = _base_meta(stats, region, size_after)
    meta.changed_db = changes > 0
    meta.changes = changes
    meta.rows_read = changes
    meta.rows_written = changes
    meta.last_row_id = last_row_id or 0
    return QueryResult(meta=meta, results=[], success=True)


__all__ = ["read_result", "write_result"]
