"""
Local session: a SQLite stand-in for the remote D1 service.

Each logical database is one SQLite file under the configured root, named by
its UUID, with one connection held open per database until it is deleted or
the session is closed. Responses are synthesized so they have the same shape
and success/error semantics as the remote service:

* unknown identifiers, unopenable files and closed sessions raise (transport
  level), exactly where the remote adapter would raise;
* SQL errors come back as ``success: false`` envelopes carrying one error with
  code 1000, like the remote service's HTTP-200 failures.

One re-entrant lock covers the connection map and the registry for the whole
of every operation, so a connection is never used once its delete has begun.
"""

from __future__ import annotations

import sqlite3
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from d1kit.config import Settings, get_settings
from d1kit.domain.models import (
    DatabaseEnvelope,
    DatabaseListEnvelope,
    DatabaseRecord,
    DatabaseSettings,
    DeleteEnvelope,
    DeleteResult,
    QueryEnvelope,
    ReadReplication,
    ReplicationMode,
)
from d1kit.emulation.classifier import StatementKind, classify_statement
from d1kit.emulation.metadata import read_result, write_result
from d1kit.emulation.rows import row_to_record
from d1kit.errors import (
    APPLICATION_ERROR_CODE,
    ConfigurationError,
    D1Error,
    DatabaseNotFoundError,
    TransportError,
)
from d1kit.infrastructure.sqlite_store import (
    DB_SUFFIX,
    apply_statement_timeout,
    close_all,
    count_user_tables,
    database_path,
    file_size,
    open_connection,
    remove_database_files,
    resolve_root,
)
from d1kit.registry import IdentityRegistry
from d1kit.sessions.abstract import AbstractD1Session
from d1kit.utils.logging import get_logger
from d1kit.utils.profiler import profile_block

log = get_logger(__name__)

LOCAL_VERSION = "1.0.0"
UPDATE_UNSUPPORTED_MESSAGE = "There is no concept of replication modes in local sqlite"


def _rfc3339(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class _OpenDatabase:
    conn: sqlite3.Connection
    path: Path
    created_at: str


class LocalSession(AbstractD1Session):
    """
    Session emulating D1 on local SQLite files.

    Parameters
    ----------
    root : str | Path
        Directory holding one ``<uuid>.db`` file per database; created if missing.
    registry : IdentityRegistry | None
        Name registry to use; a fresh one by default.
    region : str
        Value reported as ``served_by_region`` in query metadata.
    statement_timeout_ms : int
        Per-statement deadline; 0 disables it.
    """

    backend = "local"
    supports_replication_update = False
    distinguishes_raw_results = False

    def __init__(
        self,
        root: str | Path,
        registry: Optional[IdentityRegistry] = None,
        region: str = "local",
        statement_timeout_ms: int = 30_000,
    ) -> None:
        if not str(root):
            raise ConfigurationError("DBPath cannot be empty")
        super().__init__(registry)
        self.root = resolve_root(root)
        self.region = region
        self.statement_timeout_ms = statement_timeout_ms
        self._lock = threading.RLock()
        self._open: Dict[str, _OpenDatabase] = {}
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LocalSession":
        settings = settings or get_settings()
        return cls(
            settings.local_path,
            region=settings.local_region,
            statement_timeout_ms=settings.local_statement_timeout_ms,
        )

    def _require_open_session(self) -> None:
        if self._closed:
            raise TransportError("Local session is closed")

    def _database(self, db_id: str) -> _OpenDatabase:
        self._require_open_session()
        try:
            return self._open[db_id]
        except KeyError:
            raise DatabaseNotFoundError(db_id) from None

    def _storage_path(self, db_id: str) -> Path:
        """File for `db_id`; only canonical UUID strings ever address storage."""
        try:
            canonical = str(uuid.UUID(db_id))
        except (ValueError, TypeError, AttributeError):
            raise DatabaseNotFoundError(db_id) from None
        if canonical != db_id:
            raise DatabaseNotFoundError(db_id)
        return database_path(self.root, db_id)

    def create_database(self, name: str) -> DatabaseEnvelope:
        with self._lock:
            self._require_open_session()
            db_id = str(uuid.uuid4())
            path = database_path(self.root, db_id)
            conn = open_connection(path)
            created_at = _rfc3339(datetime.now(timezone.utc))
            self._open[db_id] = _OpenDatabase(conn=conn, path=path, created_at=created_at)
            self.registry.register(name, db_id)

        log.info("Database created", extra={"backend": self.backend, "db_name": name, "db_id": db_id})
        record = DatabaseRecord(
            created_at=created_at,
            file_size=0,
            name=name,
            num_tables=0,
            read_replication=ReadReplication(mode=ReplicationMode.DISABLED),
            uuid=db_id,
            version=LOCAL_VERSION,
        )
        return DatabaseEnvelope.ok(record)

    def attach(self, db_id: str, name: Optional[str] = None) -> DatabaseEnvelope:
        """
        Open an existing database file under the root and register it.

        The registry does not survive the process, so this is how a new
        session picks up databases created earlier. `name` defaults to the
        identifier.
        """
        path = self._storage_path(db_id)
        with self._lock:
            self._require_open_session()
            if db_id not in self._open:
                try:
                    mtime = path.stat().st_mtime
                except FileNotFoundError:
                    raise DatabaseNotFoundError(db_id) from None
                conn = open_connection(path)
                try:
                    count_user_tables(conn)
                except sqlite3.Error as exc:
                    conn.close()
                    raise TransportError(f"Cannot inspect database {db_id}: {exc}") from exc
                created_at = _rfc3339(datetime.fromtimestamp(mtime, timezone.utc))
                self._open[db_id] = _OpenDatabase(conn=conn, path=path, created_at=created_at)
            self.registry.register(name or db_id, db_id)
            log.info("Database attached", extra={"backend": self.backend, "db_id": db_id})
            return self.get_database(db_id)

    def attach_existing(self) -> int:
        """Attach every database file under the root; returns how many were newly attached."""
        attached = 0
        with self._lock:
            self._require_open_session()
            for path in sorted(self.root.glob(f"*{DB_SUFFIX}")):
                db_id = path.stem
                if db_id in self._open:
                    continue
                try:
                    self.attach(db_id)
                except D1Error as exc:
                    log.debug("Skipping file", extra={"path": str(path), "error": str(exc)})
                    continue
                attached += 1
        return attached

    def delete_database(self, db_id: str) -> DeleteEnvelope:
        """
        Close the connection, forget the identifier, and remove its file.

        Deleting an identifier whose storage is already gone succeeds, so
        delete is idempotent.
        """
        with self._lock:
            self._require_open_session()
            handle = self._open.pop(db_id, None)
            self.registry.remove(db_id)
            path = handle.path if handle is not None else self._storage_path(db_id)
            if handle is not None:
                handle.conn.close()
            try:
                remove_database_files(path)
            except OSError as exc:
                raise TransportError(f"Cannot remove database storage for {db_id}: {exc}") from exc

        log.info("Database deleted", extra={"backend": self.backend, "db_id": db_id})
        return DeleteEnvelope.ok(DeleteResult())

    def update_database(self, db_id: str, settings: DatabaseSettings) -> DatabaseEnvelope:
        """Always fails: a single SQLite file has no read replicas."""
        log.warning(
            "Replication update is not supported locally",
            extra={"backend": self.backend, "db_id": db_id, "mode": settings.replication.value},
        )
        return DatabaseEnvelope.fail(APPLICATION_ERROR_CODE, UPDATE_UNSUPPORTED_MESSAGE)

    def get_database(self, db_id: str) -> DatabaseEnvelope:
        with self._lock:
            handle = self._database(db_id)
            try:
                num_tables = count_user_tables(handle.conn)
            except sqlite3.Error as exc:
                raise TransportError(f"Cannot inspect database {db_id}: {exc}") from exc
            record = DatabaseRecord(
                created_at=handle.created_at,
                file_size=file_size(handle.path),
                name=self.registry.name_for(db_id),
                num_tables=num_tables,
                read_replication=ReadReplication(mode=ReplicationMode.DISABLED),
                uuid=db_id,
                version=LOCAL_VERSION,
            )
        return DatabaseEnvelope.ok(record)

    def list_databases(self) -> DatabaseListEnvelope:
        """Records for every registered identifier; identifiers that fail `get` are skipped."""
        records: List[DatabaseRecord] = []
        with self._lock:
            self._require_open_session()
            for db_id in self.registry.ids():
                try:
                    res = self.get_database(db_id)
                except D1Error as exc:
                    log.warning("Skipping database in list", extra={"db_id": db_id, "error": str(exc)})
                    continue
                records.append(res.result)
        return DatabaseListEnvelope.ok(records)

    def execute_query(self, db_id: str, sql: str, *params: Any) -> QueryEnvelope:
        """
        Execute one statement, routed by `classify_statement`.

        Reads return their rows as column-name keyed records; writes return an
        empty result list with change count and last rowid in the metadata.
        """
        kind = classify_statement(sql)
        with self._lock:
            handle = self._database(db_id)
            log.debug("Executing statement", extra={"db_id": db_id, "kind": kind.value})
            try:
                timeout = apply_statement_timeout(handle.conn, self.statement_timeout_ms)
                with profile_block(kind.value) as stats, timeout:
                    cursor = handle.conn.execute(sql, params)
                    try:
                        if kind is StatementKind.READ:
                            columns = [col[0] for col in cursor.description or ()]
                            rows = [row_to_record(columns, values) for values in cursor]
                        else:
                            cursor.fetchall()
                            affected, last_row_id = cursor.rowcount, cursor.lastrowid
                    finally:
                        cursor.close()
            except (sqlite3.Error, sqlite3.Warning, OverflowError, UnicodeEncodeError) as exc:
                log.warning(
                    "Statement failed",
                    extra={"db_id": db_id, "kind": kind.value, "error": str(exc)},
                )
                return QueryEnvelope.fail(APPLICATION_ERROR_CODE, str(exc), result=[])
            size_after = file_size(handle.path)

        if kind is StatementKind.READ:
            result = read_result(rows, stats, self.region, size_after)
        else:
            result = write_result(affected, last_row_id, stats, self.region, size_after)
        return QueryEnvelope.ok([result])

    def execute_query_raw(self, db_id: str, sql: str, *params: Any) -> QueryEnvelope:
        """Same as `execute_query`; the columnar raw format is not emulated."""
        return self.execute_query(db_id, sql, *params)

    def close(self) -> None:
        """Close every owned connection. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            handles = list(self._open.values())
            self._open.clear()
            close_all(h.conn for h in handles)
        log.info("Local session closed", extra={"backend": self.backend, "databases": len(handles)})


__all__ = ["LOCAL_VERSION", "LocalSession", "UPDATE_UNSUPPORTED_MESSAGE"]
