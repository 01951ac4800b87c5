"""
Infrastructure package for d1kit.

Centralizes I/O concerns: the authenticated HTTP transport for the remote
service and SQLite file/connection handling for the local emulator. Keep this
layer focused on I/O and resource management, decoupled from session logic.
"""

from d1kit.infrastructure.http_transport import DEFAULT_BASE_URL, D1Transport
from d1kit.infrastructure.sqlite_store import (
    apply_statement_timeout,
    close_all,
    count_user_tables,
    database_path,
    file_size,
    open_connection,
    remove_database_files,
    resolve_root,
)

__all__ = [
    "D1Transport",
    "DEFAULT_BASE_URL",
    "apply_statement_timeout",
    "close_all",
    "count_user_tables",
    "database_path",
    "file_size",
    "open_connection",
    "remove_database_files",
    "resolve_root",
]
