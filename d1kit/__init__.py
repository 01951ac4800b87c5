"""
d1kit - one session contract over Cloudflare D1 and a local SQLite emulator.

This package lets the same code create, inspect, query and delete named
databases against either backend:

- RemoteSession talks to the D1 REST API over HTTPS with a bearer token
- LocalSession emulates D1 on SQLite files, returning the same envelopes,
  error semantics and query metadata

The local emulator differs from the remote service in two documented ways:
replication updates always fail, and raw queries return row maps rather than
columnar results.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from d1kit.config import Settings, get_settings
from d1kit.domain.models import (
    ApiError,
    DatabaseRecord,
    DatabaseSettings,
    Envelope,
    QueryMeta,
    QueryResult,
    ReplicationMode,
)
from d1kit.errors import ConfigurationError, D1Error, DatabaseNotFoundError, TransportError
from d1kit.factory import available_backends, open_session
from d1kit.registry import IdentityRegistry
from d1kit.sessions import AbstractD1Session, D1Session, LocalSession, RemoteSession
from d1kit.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Sessions
    "AbstractD1Session",
    "D1Session",
    "LocalSession",
    "RemoteSession",
    "available_backends",
    "open_session",
    "IdentityRegistry",
    # Wire models
    "ApiError",
    "DatabaseRecord",
    "DatabaseSettings",
    "Envelope",
    "QueryMeta",
    "QueryResult",
    "ReplicationMode",
    # Errors
    "ConfigurationError",
    "D1Error",
    "DatabaseNotFoundError",
    "TransportError",
    # Logging
    "configure_logging",
    "get_logger",
]
