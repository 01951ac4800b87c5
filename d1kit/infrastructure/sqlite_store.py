"""
SQLite storage helpers for the local emulator.

Keeps file layout, connection opening, statement deadlines and connection
teardown in one place so the session only deals with emulation logic. Each
logical database is one file, ``<root>/<db_id>.db``.
"""

from __future__ import annotations

import sqlite3
import time
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Generator, Iterable

from d1kit.errors import TransportError
from d1kit.utils.logging import get_logger

log = get_logger(__name__)

DB_SUFFIX = ".db"
_SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")
# VM instructions between deadline checks.
_PROGRESS_STEPS = 1000

_COUNT_TABLES_SQL = (
    "SELECT count(*) FROM sqlite_master "
    "WHERE type = 'table' "
    "AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
    "AND name != 'android_metadata';"
)


def resolve_root(path: str | Path) -> Path:
    """Absolute storage root, created if missing."""
    root = Path(path).expanduser().resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def database_path(root: Path, db_id: str) -> Path:
    return root / f"{db_id}{DB_SUFFIX}"


def open_connection(path: Path) -> sqlite3.Connection:
    """
    Open an autocommit connection to the database file at `path`.

    Connections are shared across threads by the session, which serializes
    access with its own lock, hence ``check_same_thread=False``.

    Raises
    ------
    TransportError
        If the engine cannot open the file.
    """
    try:
        return sqlite3.connect(str(path), check_same_thread=False, isolation_level=None)
    except sqlite3.Error as exc:
        raise TransportError(f"Cannot open database at {path}: {exc}") from exc


@contextmanager
def apply_statement_timeout(conn: sqlite3.Connection, timeout_ms: int) -> Generator[None, None, None]:
    """
    Interrupt any statement still running after `timeout_ms` milliseconds.

    The interrupted statement fails with ``sqlite3.OperationalError``. A
    timeout of zero or less disables the deadline.
    """
    if timeout_ms <= 0:
        yield
        return
    deadline = time.monotonic() + timeout_ms / 1000.0
    conn.set_progress_handler(lambda: 1 if time.monotonic() > deadline else 0, _PROGRESS_STEPS)
    try:
        yield
    finally:
        conn.set_progress_handler(None, _PROGRESS_STEPS)


def count_user_tables(conn: sqlite3.Connection) -> int:
    row = conn.execute(_COUNT_TABLES_SQL).fetchone()
    return int(row[0]) if row else 0


def file_size(path: Path) -> int:
    """Size of the database file; zero until SQLite has written it."""
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return 0


def remove_database_files(path: Path) -> None:
    """Delete the database file and any journal sidecars. Missing files are fine."""
    for candidate in (path, *(path.with_name(path.name + s) for s in _SIDECAR_SUFFIXES)):
        candidate.unlink(missing_ok=True)
    log.debug("Removed database files", extra={"path": str(path)})


def close_all(connections: Iterable[sqlite3.Connection]) -> None:
    """
    Close every connection.

    All connections are closed even if some fail; a failure is re-raised once
    every close has been attempted.
    """
    with ExitStack() as stack:
        for conn in connections:
            stack.callback(conn.close)


__all__ = [
    "DB_SUFFIX",
    "apply_statement_timeout",
    "close_all",
    "count_user_tables",
    "database_path",
    "file_size",
    "open_connection",
    "remove_database_files",
    "resolve_root",
]
