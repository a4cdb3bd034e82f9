"""
Utilities package for ledger-bench.

Exports shared helpers for logging and phase timing.
Keep this package lightweight and free of backend-specific logic.
"""

from ledger_bench.utils.logging import configure_logging, get_logger
from ledger_bench.utils.timing import PhaseStats, time_phase

__all__ = [
    "configure_logging",
    "get_logger",
    "PhaseStats",
    "time_phase",
]
