"""
Sessions package for d1kit.

Re-exports the session contract and both backends so downstream code can
import from `d1kit.sessions` directly.
"""

from d1kit.sessions.abstract import AbstractD1Session, D1Session
from d1kit.sessions.local import LocalSession
from d1kit.sessions.remote import RemoteSession

__all__ = [
    # Contract
    "AbstractD1Session",
    "D1Session",
    # Backends
    "LocalSession",
    "RemoteSession",
]
