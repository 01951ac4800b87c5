"""
Pytest configuration for d1kit.

Provides fixtures for:
- Local sessions rooted in a temporary directory
- Remote sessions wired to an in-process httpx.MockTransport
- Settings overrides for CLI and factory tests
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Generator, List

import httpx
import pytest

from d1kit.config import Settings, get_settings
from d1kit.infrastructure.http_transport import D1Transport
from d1kit.sessions.local import LocalSession
from d1kit.sessions.remote import RemoteSession
from tests.payloads import TEST_ACCOUNT_ID, TEST_API_TOKEN, TEST_BASE_URL


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture pointing the local backend at a temporary directory.
    """
    return Settings(
        backend="local",
        account_id=TEST_ACCOUNT_ID,
        api_token=TEST_API_TOKEN,
        api_base_url=TEST_BASE_URL,
        local_path=str(tmp_path / "d1"),
        local_region="test-region",
        log_level="DEBUG",
    )


@pytest.fixture
def local_session(tmp_path: Path) -> Generator[LocalSession, None, None]:
    """
    Provide a LocalSession rooted in a per-test temporary directory.
    """
    session = LocalSession(tmp_path / "d1", region="test-region")
    try:
        yield session
    finally:
        session.close()


class RecordedRequests:
    """Captures requests seen by the mock transport."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content) if self.last.content else None


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def remote_factory() -> Generator[Callable[[Handler], tuple[RemoteSession, RecordedRequests]], None, None]:
    """
    Build RemoteSessions whose HTTP traffic is answered by `handler`.
    """
    sessions: List[RemoteSession] = []

    def _build(handler: Handler, retries: int = 1) -> tuple[RemoteSession, RecordedRequests]:
        recorded = RecordedRequests()

        def _recording_handler(request: httpx.Request) -> httpx.Response:
            recorded.requests.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_recording_handler))
        transport = D1Transport(
            TEST_ACCOUNT_ID,
            TEST_API_TOKEN,
            base_url=TEST_BASE_URL,
            retries=retries,
            client=client,
        )
        session = RemoteSession(transport)
        sessions.append(session)
        return session, recorded

    yield _build

    for session in sessions:
        session.close()


@pytest.fixture
def clear_settings_cache() -> Generator[None, None, None]:
    """
    Reset the cached Settings around a test that changes the environment.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
