"""
Remote session: the Cloudflare D1 REST API.

Every operation is exactly one HTTP request and the service's envelope is
returned as-is. The only local state is the name registry, updated when a
create succeeds.
"""

from __future__ import annotations

from typing import Any, Optional

from d1kit.config import Settings, get_settings
from d1kit.domain.models import (
    DatabaseEnvelope,
    DatabaseListEnvelope,
    DatabaseSettings,
    DeleteEnvelope,
    QueryEnvelope,
)
from d1kit.infrastructure.http_transport import D1Transport
from d1kit.registry import IdentityRegistry
from d1kit.sessions.abstract import AbstractD1Session
from d1kit.utils.logging import get_logger

log = get_logger(__name__)


class RemoteSession(AbstractD1Session):
    """
    Session backed by the remote D1 service.

    Transport faults raise ``TransportError``; a ``success: false`` body from
    the service (bad SQL, unknown database, ...) is returned untouched.
    """

    backend = "remote"
    supports_replication_update = True
    distinguishes_raw_results = True

    def __init__(
        self,
        transport: D1Transport,
        registry: Optional[IdentityRegistry] = None,
    ) -> None:
        super().__init__(registry)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RemoteSession":
        settings = settings or get_settings()
        transport = D1Transport(
            account_id=settings.account_id,
            api_token=settings.api_token,
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            retries=settings.transport_retries,
        )
        return cls(transport)

    def create_database(self, name: str) -> DatabaseEnvelope:
        res = self._transport.request(
            "POST", self._transport.database_url(), DatabaseEnvelope, {"name": name}
        )
        if res.success and res.result is not None:
            self.registry.register(name, res.result.uuid)
            log.info("Database created", extra={"backend": self.backend, "db_name": name, "db_id": res.result.uuid})
        return res

    def delete_database(self, db_id: str) -> DeleteEnvelope:
        return self._transport.request("DELETE", self._transport.database_url(db_id), DeleteEnvelope)

    def update_database(self, db_id: str, settings: DatabaseSettings) -> DatabaseEnvelope:
        return self._transport.request(
            "PATCH",
            self._transport.database_url(db_id),
            DatabaseEnvelope,
            settings.to_request_body(),
        )

    def get_database(self, db_id: str) -> DatabaseEnvelope:
        return self._transport.request("GET", self._transport.database_url(db_id), DatabaseEnvelope)

    def list_databases(self) -> DatabaseListEnvelope:
        return self._transport.request("GET", self._transport.database_url(), DatabaseListEnvelope)

    def execute_query(self, db_id: str, sql: str, *params: Any) -> QueryEnvelope:
        return self._transport.request(
            "POST",
            self._transport.database_url(db_id, "query"),
            QueryEnvelope,
            {"sql": sql, "params": list(params)},
        )

    def execute_query_raw(self, db_id: str, sql: str, *params: Any) -> QueryEnvelope:
        return self._transport.request(
            "POST",
            self._transport.database_url(db_id, "raw"),
            QueryEnvelope,
            {"sql": sql, "params": list(params)},
        )

    def close(self) -> None:
        self._transport.close()


__all__ = ["RemoteSession"]
