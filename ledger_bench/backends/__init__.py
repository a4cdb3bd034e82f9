"""
Backends package for ledger-bench.

This module re-exports the abstract interfaces and the concrete backend
classes so downstream code can import from `ledger_bench.backends` directly.
"""

from ledger_bench.backends.abstract import (
    AbstractBenchmarkBackend,
    BenchmarkBackend,
    BenchmarkResult,
    PhaseResult,
)
from ledger_bench.backends.accounting import TigerBeetleBackend
from ledger_bench.backends.ledger import ImmudbBackend
from ledger_bench.backends.relational import PostgresBackend

__all__ = [
    # Abstracts
    "AbstractBenchmarkBackend",
    "BenchmarkBackend",
    "BenchmarkResult",
    "PhaseResult",
    # Concrete backends
    "ImmudbBackend",
    "PostgresBackend",
    "TigerBeetleBackend",
]
