"""
Orchestrator for bootstrapping backends, running the insert/read workload
against each one in turn, and tearing everything down.

Usage (example from CLI):
    from ledger_bench.orchestrator import RunConfig, run_benchmarks

    results = run_benchmarks(RunConfig(backend_names=["postgres"], count=100))
    print(results)

Every selected backend is connected before the first benchmark starts. A
failure at any point aborts the whole run; teardown of every backend that was
registered still happens, in reverse order.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from ledger_bench.backends.abstract import BenchmarkBackend, BenchmarkResult, PhaseResult
from ledger_bench.backends.accounting import TigerBeetleBackend
from ledger_bench.backends.ledger import ImmudbBackend
from ledger_bench.backends.relational import PostgresBackend
from ledger_bench.config import BenchmarkConfig, Settings, get_settings
from ledger_bench.domain.batching import partition
from ledger_bench.errors import UnknownBackendError
from ledger_bench.utils.logging import get_logger
from ledger_bench.utils.timing import PhaseStats, time_phase

log = get_logger(__name__)

ResultCallback = Callable[[BenchmarkResult], None]


@dataclass
class RunConfig:
    """
    Parameters for one invocation of `run_benchmarks`.

    `count` and `batch_size` fall back to settings when left as None.
    """

    backend_names: Optional[Iterable[str]] = None
    count: Optional[int] = None
    batch_size: Optional[int] = None

    def workload(self, settings: Settings) -> BenchmarkConfig:
        return BenchmarkConfig.from_settings(settings, count=self.count, batch_size=self.batch_size)


def _round_float(value: float, decimals: int = 6) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _backend_factories(settings: Settings) -> Dict[str, Callable[[], BenchmarkBackend]]:
    """Registry of available backends, in execution order."""
    return {
        "postgres": lambda: PostgresBackend(),
        "immudb": lambda: ImmudbBackend(settings=settings),
        "tigerbeetle": lambda: TigerBeetleBackend(settings=settings),
    }


def available_backends() -> List[str]:
    """List available backend names in execution order."""
    return list(_backend_factories(get_settings()).keys())


def _resolve_names(names: Optional[Iterable[str]], settings: Settings) -> List[str]:
    registered = list(_backend_factories(settings).keys())
    requested = list(names) if names is not None else ["all"]
    unknown = [name for name in requested if name != "all" and name not in registered]
    if unknown:
        raise UnknownBackendError(
            f"Unknown backend(s) {', '.join(unknown)}. Available: {', '.join(registered)}"
        )
    # "all" anywhere in the selection wins over individual names.
    if not requested or "all" in requested:
        return registered
    return requested


def _resolve_backend(name: str, settings: Settings) -> BenchmarkBackend:
    return _backend_factories(settings)[name]()


def _phase_result(stats: PhaseStats, operations: int, batches: int) -> PhaseResult:
    return PhaseResult(
        operations=operations,
        batches=batches,
        duration_seconds=_round_float(stats.duration_seconds),
        cpu_percent=_round_float(stats.cpu_percent, 1) if stats.cpu_percent is not None else None,
    )


def _teardown(backend: BenchmarkBackend) -> None:
    try:
        backend.teardown()
        log.info(f"[TEARDOWN] {backend.name}", extra={"backend": backend.name})
    except Exception:  # noqa: BLE001 - teardown of one backend must not skip the others
        log.warning(
            f"[TEARDOWN FAILED] {backend.name}", extra={"backend": backend.name}, exc_info=True
        )


def run_backend(backend: BenchmarkBackend, config: BenchmarkConfig) -> BenchmarkResult:
    """
    Run the insert phase then the read phase against a connected backend.

    Parameters
    ----------
    backend : BenchmarkBackend
        A backend whose `connect()` already succeeded.
    config : BenchmarkConfig
        Number of records and maximum batch size.

    Returns
    -------
    BenchmarkResult
        Per-phase timing for this backend.
    """
    batches = partition(config.count, config.batch_size)
    phase = "prepare"
    log.info(
        f"[BACKEND START] {backend.name}",
        extra={"backend": backend.name, "count": config.count, "batches": len(batches)},
    )
    try:
        backend.prepare(config)

        phase = "insert"
        with time_phase(f"{backend.name}:insert") as insert_stats:
            for batch in batches:
                backend.insert_batch(batch)
        log.info(
            f"[PHASE] {backend.name} insert",
            extra={"backend": backend.name, "duration": insert_stats.duration_seconds},
        )

        phase = "read"
        records_found = 0
        with time_phase(f"{backend.name}:read") as read_stats:
            for batch in batches:
                records_found += len(backend.lookup_batch(batch))
        log.info(
            f"[PHASE] {backend.name} read",
            extra={
                "backend": backend.name,
                "duration": read_stats.duration_seconds,
                "records_found": records_found,
            },
        )
    except Exception:
        log.exception(
            f"[BACKEND FAILED] {backend.name} during {phase}",
            extra={"backend": backend.name, "phase": phase},
        )
        raise

    read = _phase_result(read_stats, config.count, len(batches))
    read["records_found"] = records_found
    return BenchmarkResult(
        backend=backend.name,
        count=config.count,
        batch_size=config.batch_size,
        insert=_phase_result(insert_stats, config.count, len(batches)),
        read=read,
        error=None,
    )


def run_benchmarks(
    run_config: Optional[RunConfig] = None,
    on_result: Optional[ResultCallback] = None,
) -> List[BenchmarkResult]:
    """
    Bootstrap the selected backends, then benchmark each sequentially.

    Parameters
    ----------
    run_config : RunConfig | None
        Backend selection and workload overrides. Defaults to all backends
        with the workload from settings.
    on_result : callable | None
        Invoked with each backend's result as soon as it completes.

    Returns
    -------
    List[BenchmarkResult]
        One result per backend, in execution order.

    Raises
    ------
    Exception
        The first connection, startup, or request error, unmodified.
    """
    run_config = run_config or RunConfig()
    settings = get_settings()
    config = run_config.workload(settings)
    names = _resolve_names(run_config.backend_names, settings)

    results: List[BenchmarkResult] = []
    with contextlib.ExitStack() as stack:
        backends: List[BenchmarkBackend] = []
        for name in names:
            backend = _resolve_backend(name, settings)
            # Registered before connect so partially started backends are released.
            stack.callback(_teardown, backend)
            log.info(f"[BOOTSTRAP] Connecting to {name}", extra={"backend": name})
            try:
                backend.connect()
            except Exception:
                log.exception(f"[BOOTSTRAP FAILED] {name}", extra={"backend": name})
                raise
            backends.append(backend)

        for backend in backends:
            result = run_backend(backend, config)
            results.append(result)
            if on_result is not None:
                on_result(result)

    log.info(
        f"[ORCHESTRATOR COMPLETE] {len(names)} backend(s) benchmarked",
        extra={"backends": names, "count": config.count},
    )
    return results


__all__ = [
    "RunConfig",
    "available_backends",
    "run_backend",
    "run_benchmarks",
]
