"""
HTTP transport for the remote D1 REST API.

Builds one JSON request per call, attaches the bearer token, and parses the
response body into an Envelope. Any HTTP status is accepted as long as the
body is a well-formed envelope: the service reports SQL errors as
``success: false`` bodies, which are results, not transport faults.

Only connection establishment is retried (the request never reached the
server), with exponential backoff via tenacity.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from d1kit.domain.models import Envelope
from d1kit.errors import ConfigurationError, TransportError
from d1kit.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"

E = TypeVar("E", bound=Envelope)


class D1Transport:
    """
    Authenticated JSON-over-HTTP client for one Cloudflare account.

    Parameters
    ----------
    account_id : str
        Cloudflare account identifier used in every URL.
    api_token : str
        Bearer token sent in the Authorization header.
    base_url : str
        API root, without trailing slash.
    timeout_seconds : float
        Per-request timeout applied by httpx.
    retries : int
        Total attempts for requests that fail to connect.
    client : httpx.Client | None
        Pre-built client (e.g. wired to ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        account_id: str,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        retries: int = 3,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not account_id or not api_token:
            raise ConfigurationError("Invalid account ID and/or API Token")
        self.account_id = account_id
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._retries = max(retries, 1)
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def database_url(self, *parts: str) -> str:
        """URL of the account's database collection, or of a path below it."""
        url = f"{self._base_url}/accounts/{self.account_id}/d1/database"
        for part in parts:
            url += f"/{part}"
        return url

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_token}",
        }

    def _send(self, method: str, url: str, content: Optional[bytes]) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            retry=retry_if_exception_type(httpx.ConnectError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    log.warning(
                        "Retrying D1 request after connection failure",
                        extra={"method": method, "attempt": attempt.retry_state.attempt_number},
                    )
                return self._client.request(method, url, content=content, headers=self._headers())
        raise TransportError(f"{method} {url} was never attempted")  # pragma: no cover

    def request(
        self,
        method: str,
        url: str,
        envelope_type: Type[E],
        payload: Optional[Dict[str, Any]] = None,
    ) -> E:
        """
        Perform one request and parse the response into `envelope_type`.

        Raises
        ------
        TransportError
            On network failure, timeout, an unserializable payload, or a body
            that is not a valid envelope.
        """
        content = None
        if payload is not None:
            try:
                content = json.dumps(payload).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise TransportError(f"Request body is not JSON serializable: {exc}") from exc

        log.debug("D1 request", extra={"method": method, "url": url})
        try:
            response = self._send(method, url, content)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        try:
            envelope = envelope_type.model_validate_json(response.content)
        except ValidationError as exc:
            raise TransportError(
                f"Malformed response envelope from {method} {url} (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from exc

        log.debug(
            "D1 response",
            extra={"method": method, "status": response.status_code, "success": envelope.success},
        )
        return envelope

    def close(self) -> None:
        self._client.close()


__all__ = ["D1Transport", "DEFAULT_BASE_URL"]
