"""
Session contract shared by the remote adapter and the local emulator.

Both variants return the same Envelope shapes for the same operations and are
interchangeable except for two documented gaps, exposed as capability flags so
callers can check which variant they hold:

* ``supports_replication_update``: the local emulator always fails
  ``update_database`` because replication has no meaning for a single SQLite
  file.
* ``distinguishes_raw_results``: the remote raw endpoint returns columnar
  results; the local emulator answers ``execute_query_raw`` exactly like
  ``execute_query``.
"""

from __future__ import annotations

import abc
from typing import Any, ClassVar, Protocol, runtime_checkable

from d1kit.domain.models import (
    DatabaseEnvelope,
    DatabaseListEnvelope,
    DatabaseSettings,
    DeleteEnvelope,
    QueryEnvelope,
)
from d1kit.registry import IdentityRegistry


@runtime_checkable
class D1Session(Protocol):
    """
    Common interface every backend session implements.

    Attributes
    ----------
    backend : str
        Short machine-friendly backend name ("remote" or "local").
    registry : IdentityRegistry
        Name to identifier map owned by this session.
    """

    backend: str
    supports_replication_update: bool
    distinguishes_raw_results: bool
    registry: IdentityRegistry

    def create_database(self, name: str) -> DatabaseEnvelope:
        ...

    def delete_database(self, db_id: str) -> DeleteEnvelope:
        ...

    def update_database(self, db_id: str, settings: DatabaseSettings) -> DatabaseEnvelope:
        ...

    def get_database(self, db_id: str) -> DatabaseEnvelope:
        ...

    def list_databases(self) -> DatabaseListEnvelope:
        ...

    def execute_query(self, db_id: str, sql: str, *params: Any) -> QueryEnvelope:
        """
        Execute one SQL statement with positional ``?`` parameters.

        Returns
        -------
        QueryEnvelope
            One QueryResult per submitted statement, in submission order.
        """
        ...

    def execute_query_raw(self, db_id: str, sql: str, *params: Any) -> QueryEnvelope:
        ...

    def close(self) -> None:
        ...


class AbstractD1Session(abc.ABC):
    """
    ABC helper for class-based sessions.

    Subclasses set `backend` and the capability flags and implement the
    database operations. The registry may be injected; otherwise each session
    gets its own.
    """

    backend: ClassVar[str]
    supports_replication_update: ClassVar[bool] = True
    distinguishes_raw_results: ClassVar[bool] = True

    def __init__(self, registry: IdentityRegistry | None = None) -> None:
        self.registry = registry if registry is not None else IdentityRegistry()

    def database_id(self, name: str) -> str:
        """Identifier currently registered for `name` (DatabaseNotFoundError if none)."""
        return self.registry.resolve(name)

    @abc.abstractmethod
    def create_database(self, name: str) -> DatabaseEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def delete_database(self, db_id: str) -> DeleteEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update_database(
        self, db_id: str, settings: DatabaseSettings
    ) -> DatabaseEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get_database(self, db_id: str) -> DatabaseEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def list_databases(self) -> DatabaseListEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def execute_query(
        self, db_id: str, sql: str, *params: Any
    ) -> QueryEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def execute_query_raw(
        self, db_id: str, sql: str, *params: Any
    ) -> QueryEnvelope:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def __enter__(self) -> "AbstractD1Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["AbstractD1Session", "D1Session"]
