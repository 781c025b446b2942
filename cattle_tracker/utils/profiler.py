"""
Profiling utilities for the cattle price tracker.

Wraps pipeline steps (cleanup, backfill, scrape-and-upsert) to measure:
- Wall-clock time (perf_counter)
- Resident memory before/after the step (psutil)

Usage:
    from cattle_tracker.utils.profiler import profile_block

    with profile_block("refresh") as stats:
        await service.refresh()

    print(stats.duration_seconds, stats.rss_delta_bytes)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    start_rss_bytes: Optional[int] = field(default=None)
    end_rss_bytes: Optional[int] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def rss_delta_bytes(self) -> Optional[int]:
        if self.start_rss_bytes is None or self.end_rss_bytes is None:
            return None
        return self.end_rss_bytes - self.start_rss_bytes

    def as_log_extra(self) -> dict[str, Any]:
        """Flatten the measurements into a dict suitable for `log.info(extra=...)`."""
        return {
            "step": self.label,
            "duration_seconds": round(self.duration_seconds, 3),
            "rss_delta_bytes": self.rss_delta_bytes,
            **self.extra,
        }


def _current_rss(process: psutil.Process) -> Optional[int]:
    try:
        return process.memory_info().rss
    except psutil.Error:
        return None


@contextlib.contextmanager
def profile_block(label: str) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Measurements are filled in even when the block raises, so callers can log
    the duration of failed steps as well.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    stats.start_rss_bytes = _current_rss(process)
    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stats.end_rss_bytes = _current_rss(process)


__all__ = ["ProfileStats", "profile_block"]
