"""
Backend interfaces and result contracts for ledger-bench.

Concrete backends (PostgreSQL, immudb, TigerBeetle) implement the
BenchmarkBackend protocol so the orchestrator can drive them through the same
connect / prepare / insert / lookup / teardown sequence, and report phases as
PhaseResult / BenchmarkResult TypedDicts.
"""

from __future__ import annotations

import abc
from typing import Any, List, Optional, Protocol, Sequence, TypedDict, runtime_checkable

from ledger_bench.config import BenchmarkConfig


class PhaseResult(TypedDict, total=False):
    """
    Timing for one phase (insert or read) of a backend run.
    """

    operations: int
    batches: int
    duration_seconds: float
    cpu_percent: Optional[float]
    records_found: int


class BenchmarkResult(TypedDict, total=False):
    """
    Metrics returned by the orchestrator for each backend.

    `error` stays None for completed runs; a failed run raises instead of
    returning a result.
    """

    backend: str
    count: int
    batch_size: int
    insert: PhaseResult
    read: PhaseResult
    error: Optional[str]


@runtime_checkable
class BenchmarkBackend(Protocol):
    """
    Common interface all benchmark backends must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the backend.
    """

    name: str
    description: str

    def connect(self) -> None:
        """Open the backend handle (and start any server process it needs)."""
        ...

    def prepare(self, config: BenchmarkConfig) -> None:
        """Per-run setup executed right before the insert phase."""
        ...

    def insert_batch(self, offsets: Sequence[int]) -> None:
        """
        Write one record per offset.

        Parameters
        ----------
        offsets : Sequence[int]
            Positions in `[0, count)` of the records to write.
        """
        ...

    def lookup_batch(self, offsets: Sequence[int]) -> List[Any]:
        """
        Look up the records written for `offsets` and return those found.
        """
        ...

    def teardown(self) -> None:
        """Release handles and processes. Must be safe to call more than once."""
        ...


class AbstractBenchmarkBackend(abc.ABC):
    """
    ABC helper for class-based backends.

    Subclasses set `name` and `description` and implement the abstract
    methods. `prepare` defaults to a no-op.
    """

    name: str
    description: str

    @abc.abstractmethod
    def connect(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def prepare(self, config: BenchmarkConfig) -> None:
        return None

    @abc.abstractmethod
    def insert_batch(self, offsets: Sequence[int]) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def lookup_batch(self, offsets: Sequence[int]) -> List[Any]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def teardown(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractBenchmarkBackend",
    "BenchmarkBackend",
    "BenchmarkResult",
    "PhaseResult",
]
