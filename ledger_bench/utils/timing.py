"""
Phase timing utilities for ledger-bench.

Each benchmark phase (insert, read) is wrapped in `time_phase`, which records
wall-clock duration via `perf_counter` and a best-effort CPU percent for the
harness process via psutil.

Usage:
    from ledger_bench.utils.timing import time_phase

    with time_phase("postgres:insert") as stats:
        run_inserts()

    print(stats.duration_seconds)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Generator, Optional

import psutil


@dataclass
class PhaseStats:
    """
    Container for a single phase measurement.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    cpu_percent: Optional[float] = field(default=None)


@contextlib.contextmanager
def time_phase(label: str, track_cpu: bool = True) -> Generator[PhaseStats, None, None]:
    """
    Context manager timing a block of sequential backend calls.

    Parameters
    ----------
    label : str
        Human-friendly label for the phase.
    track_cpu : bool
        Whether to sample the harness process CPU percent around the block.

    Notes
    -----
    Duration is recorded even when the block raises, so a failing phase still
    leaves a usable measurement on the stats object.
    """
    stats = PhaseStats(label=label)
    process = psutil.Process() if track_cpu else None

    # CPU percent needs a priming call
    if process:
        process.cpu_percent(interval=None)

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = max(stats.end_ts - stats.start_ts, 0.0)
        if process:
            stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["PhaseStats", "time_phase"]
