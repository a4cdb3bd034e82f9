from __future__ import annotations

import sys
from typing import List, Optional

import typer

from ledger_bench.config import get_settings
from ledger_bench.orchestrator import RunConfig, available_backends, run_benchmarks
from ledger_bench.reporter import print_backend_result, print_results
from ledger_bench.utils.logging import configure_logging

app = typer.Typer(help="Insert and point-lookup latency across PostgreSQL, immudb and TigerBeetle.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"postgres={settings.pg_user}@{settings.pg_host}:{settings.pg_port}/{settings.pg_name} | "
        f"immudb={settings.immudb_user}@{settings.immudb_host}:{settings.immudb_port}/"
        f"{settings.immudb_database} | "
        f"tigerbeetle=cluster {settings.tb_cluster_id} @ {settings.tb_address} "
        f"(data={settings.tb_data_file}, managed={settings.tb_manage_server})"
    )
    typer.echo(f"count={settings.benchmark_count} batch={settings.benchmark_batch_size}")


@app.command()
def run(
    backend: List[str] = typer.Option(
        ["all"],
        "--backend",
        "-b",
        help="Backend to run (postgres, immudb, tigerbeetle, all); repeatable. 'list' prints names.",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=0,
        help="Override number of records to insert and read (default from settings).",
    ),
) -> None:
    """
    Connect to every selected backend, then benchmark each one in turn.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    if backend == ["list"]:
        typer.echo("Available backends: " + ", ".join(available_backends()))
        return

    typer.echo("Running benchmarks...")
    try:
        results = run_benchmarks(
            RunConfig(backend_names=backend, count=count),
            on_result=print_backend_result,
        )
    except Exception as exc:  # noqa: BLE001 - any failure aborts the run
        typer.echo(f"Benchmark aborted: {type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    print_results(results)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
