"""
Exception hierarchy for d1kit.

Only configuration and transport/connection faults are raised. Statement-level
failures (invalid SQL, constraint violations, unsupported operations) are not
exceptions: they come back as an Envelope with ``success=False``, the same way
the remote service reports them.
"""

from __future__ import annotations

# Code carried by every application-level error the local emulator reports.
APPLICATION_ERROR_CODE = 1000


class D1Error(Exception):
    """Base class for all d1kit errors."""


class ConfigurationError(D1Error, ValueError):
    """Missing or invalid credentials, paths, or backend names."""


class TransportError(D1Error):
    """The operation could not be carried out against the backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DatabaseNotFoundError(TransportError, LookupError):
    """The name or identifier does not address an open database."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Invalid db id: {key}")
        self.key = key


__all__ = [
    "APPLICATION_ERROR_CODE",
    "ConfigurationError",
    "D1Error",
    "DatabaseNotFoundError",
    "TransportError",
]
