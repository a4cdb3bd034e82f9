"""
ledger-bench - insert and point-lookup latency across three persistence backends.

Runs the same sequential workload (N single-record inserts, then N lookups by
id) against:

- PostgreSQL (relational store)
- immudb (tamper-evident ledger database)
- TigerBeetle (accounting engine, started as a local child process)

and reports wall-clock time for each phase.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from ledger_bench.backends.abstract import (
    AbstractBenchmarkBackend,
    BenchmarkBackend,
    BenchmarkResult,
    PhaseResult,
)
from ledger_bench.config import BenchmarkConfig, Settings, get_settings
from ledger_bench.orchestrator import RunConfig, available_backends, run_benchmarks
from ledger_bench.utils.logging import configure_logging, get_logger
from ledger_bench.utils.timing import PhaseStats, time_phase

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "BenchmarkConfig",
    "Settings",
    "get_settings",
    # Orchestration
    "RunConfig",
    "available_backends",
    "run_benchmarks",
    # Backend abstractions
    "AbstractBenchmarkBackend",
    "BenchmarkBackend",
    "BenchmarkResult",
    "PhaseResult",
    # Logging
    "configure_logging",
    "get_logger",
    # Timing
    "PhaseStats",
    "time_phase",
]
