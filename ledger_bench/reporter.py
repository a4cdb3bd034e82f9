from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from ledger_bench.backends.abstract import BenchmarkResult, PhaseResult

_UNITS = (
    (1.0, "s"),
    (1e-3, "ms"),
    (1e-6, "µs"),
)


def format_duration(seconds: float) -> str:
    """
    Render a duration with the largest unit that keeps it >= 1.

    Examples: 1.5 -> "1.500s", 0.0123 -> "12.300ms", 0 -> "0ns".
    """
    if seconds < 0:
        raise ValueError(f"duration must be non-negative, got {seconds}")
    for scale, unit in _UNITS:
        if seconds >= scale:
            return f"{seconds / scale:.3f}{unit}"
    return f"{seconds * 1e9:.0f}ns"


def _phase_line(verb: str, phase: PhaseResult) -> str:
    return f"{verb} {phase.get('operations', 0)} accounts: {format_duration(phase.get('duration_seconds', 0.0))}"


def print_backend_result(result: BenchmarkResult, console: Optional[Console] = None) -> None:
    """
    Print the header and the insert/read duration lines for one backend.
    """
    console = console or Console(highlight=False)
    console.print(f" --- {result.get('backend', 'unknown')} benchmark --- ", markup=False)
    if "insert" in result:
        console.print(_phase_line("Insert", result["insert"]), markup=False)
    if "read" in result:
        console.print(_phase_line("Read", result["read"]), markup=False)


def print_results(results: List[BenchmarkResult], console: Optional[Console] = None) -> None:
    """
    Render a summary table of every backend's insert and read durations.
    """
    console = console or Console(highlight=False)

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    table = Table(title="ledger-bench results", box=box.ROUNDED)
    table.add_column("Backend", style="cyan", no_wrap=True)
    table.add_column("Records", justify="right", style="magenta")
    table.add_column("Batch", justify="right", style="blue")
    table.add_column("Insert", justify="right", style="green")
    table.add_column("Read", justify="right", style="bold green")
    table.add_column("Found", justify="right", style="yellow")

    for res in results:
        insert = res.get("insert", {})
        read = res.get("read", {})
        table.add_row(
            res.get("backend", "unknown"),
            f"{res.get('count', 0):,}",
            str(res.get("batch_size", "")),
            format_duration(insert.get("duration_seconds", 0.0)),
            format_duration(read.get("duration_seconds", 0.0)),
            f"{read.get('records_found', 0):,}",
        )

    console.print(table)


__all__ = ["format_duration", "print_backend_result", "print_results"]
