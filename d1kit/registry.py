"""
Name to identifier registry.

Each session owns one registry; it is never shared across sessions or kept at
module level. All access goes through an internal re-entrant lock so a session
may call back into the registry while already holding its own lock.
"""

from __future__ import annotations

import threading
from typing import Dict, List

from d1kit.errors import DatabaseNotFoundError


class IdentityRegistry:
    """
    Bidirectional lookup between database names and opaque identifiers.

    A name maps to at most one identifier; registering an existing name
    replaces its identifier. Nothing stops two names pointing at the same
    identifier.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids_by_name: Dict[str, str] = {}

    def register(self, name: str, db_id: str) -> None:
        with self._lock:
            # Re-insert so iteration order follows the latest registration.
            self._ids_by_name.pop(name, None)
            self._ids_by_name[name] = db_id

    def resolve(self, name: str) -> str:
        with self._lock:
            try:
                return self._ids_by_name[name]
            except KeyError:
                raise DatabaseNotFoundError(name) from None

    def remove(self, db_id: str) -> None:
        with self._lock:
            for name in [n for n, i in self._ids_by_name.items() if i == db_id]:
                del self._ids_by_name[name]

    def name_for(self, db_id: str) -> str:
        """Reverse lookup; returns an empty string for unknown identifiers."""
        with self._lock:
            for name, registered in self._ids_by_name.items():
                if registered == db_id:
                    return name
            return ""

    def ids(self) -> List[str]:
        """Distinct registered identifiers, in registration order."""
        with self._lock:
            return list(dict.fromkeys(self._ids_by_name.values()))

    def names(self) -> List[str]:
        with self._lock:
            return list(self._ids_by_name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._ids_by_name

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids_by_name)


__all__ = ["IdentityRegistry"]
