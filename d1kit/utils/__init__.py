"""
Utilities package for d1kit.

Exports shared helpers for logging, timing, and other cross-cutting concerns.
Keep this package lightweight and free of backend-specific logic.
"""

from d1kit.utils.logging import configure_logging, get_logger
from d1kit.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
