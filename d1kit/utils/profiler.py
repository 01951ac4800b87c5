"""
Timing utilities for d1kit.

The embedded engine reports no execution timings of its own, so the emulator
wraps each statement in `profile_block` and reports the measured wall time in
the synthesized query metadata.

Usage example:
    from d1kit.utils.profiler import profile_block

    with profile_block("select-users") as stats:
        cursor.execute(sql)

    print(stats.duration_ms)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Generator


@dataclass
class ProfileStats:
    """
    Container for timing measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000.0


@contextlib.contextmanager
def profile_block(label: str) -> Generator[ProfileStats, None, None]:
    """
    Context manager measuring the wall-clock duration of a block.

    The stats are filled in on exit, including when the block raises, so
    failed statements still report how long they ran.
    """
    stats = ProfileStats(label=label)
    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts


__all__ = ["ProfileStats", "profile_block"]
