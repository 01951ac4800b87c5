"""
Backend selection for d1kit sessions.

Usage:
    from d1kit.factory import open_session

    with open_session("local") as session:
        db = session.create_database("scratch").result
        session.execute_query(db.uuid, "CREATE TABLE t (id INTEGER PRIMARY KEY)")
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from d1kit.config import Settings, get_settings
from d1kit.errors import ConfigurationError
from d1kit.sessions.abstract import AbstractD1Session
from d1kit.sessions.local import LocalSession
from d1kit.sessions.remote import RemoteSession
from d1kit.utils.logging import get_logger

log = get_logger(__name__)


def _session_factories() -> Dict[str, Callable[[Settings], AbstractD1Session]]:
    """Registry of available backends."""
    return {
        "local": LocalSession.from_settings,
        "remote": RemoteSession.from_settings,
    }


def available_backends() -> List[str]:
    """List available backend names."""
    return sorted(_session_factories().keys())


def open_session(backend: Optional[str] = None, settings: Optional[Settings] = None) -> AbstractD1Session:
    """
    Build a session for `backend`.

    Parameters
    ----------
    backend : str | None
        "local" or "remote". Defaults to ``settings.backend``.
    settings : Settings | None
        Configuration to build from. Defaults to the cached environment settings.

    Raises
    ------
    ConfigurationError
        For an unknown backend, or missing credentials/paths for a known one.
    """
    settings = settings or get_settings()
    name = (backend or settings.backend).strip().lower()
    factories = _session_factories()
    if name not in factories:
        raise ConfigurationError(f"Unknown backend '{name}'. Available: {', '.join(sorted(factories))}")
    session = factories[name](settings)
    log.debug("Session opened", extra={"backend": name})
    return session


__all__ = ["available_backends", "open_session"]
