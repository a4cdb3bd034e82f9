"""
Exception hierarchy for ledger-bench.

Driver errors (psycopg, grpc, tigerbeetle) propagate unwrapped; these types
cover failures the harness itself detects.
"""

from __future__ import annotations


class BenchmarkError(Exception):
    """Base exception for benchmark harness errors."""
    pass


class BackendStartupError(BenchmarkError):
    """Raised when a backend process cannot be formatted, started, or reached."""
    pass


class UnknownBackendError(BenchmarkError, ValueError):
    """Raised when a backend name is not registered."""
    pass


__all__ = [
    "BackendStartupError",
    "BenchmarkError",
    "UnknownBackendError",
]
