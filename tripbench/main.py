from __future__ import annotations

import asyncio
import sys
from typing import List, Optional

import typer

from tripbench.config import get_settings
from tripbench.errors import TripBenchError
from tripbench.infrastructure.db_factory import check_liveness
from tripbench.orchestrator import RunConfig, available_strategies, run_benchmarks
from tripbench.reporter import print_results
from tripbench.utils.logging import configure_logging

app = typer.Typer(help="Order aggregate query-trip benchmark CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"order_id={settings.bench_order_id} runs={settings.bench_runs} "
        f"warmup={settings.bench_warmup_runs} allocations={settings.bench_track_allocations}"
    )


@app.command("list")
def list_strategies() -> None:
    """
    List the registered strategies.
    """
    typer.echo("Available strategies: " + ", ".join(available_strategies()))


@app.command()
def run(
    strategy: List[str] = typer.Option(
        ["all"],
        "--strategy",
        "-s",
        help="Strategy to run; repeat for several (sequential, parallel, multi_result, join, all).",
    ),
    order_id: Optional[int] = typer.Option(
        None, "--order-id", "-o", help="Order identifier to fetch (default from settings)."
    ),
    runs: Optional[int] = typer.Option(
        None, "--runs", "-r", min=1, help="Measured trials per strategy (default from settings)."
    ),
    warmup: Optional[int] = typer.Option(
        None, "--warmup", "-w", min=0, help="Unmeasured warm-up runs per strategy."
    ),
    track_allocations: Optional[bool] = typer.Option(
        None,
        "--allocations/--no-allocations",
        help="Trace Python allocations per trial (slows trials down).",
    ),
    persist: bool = typer.Option(True, "--persist/--no-persist", help="Write results JSON."),
) -> None:
    """
    Check the store is reachable, then benchmark the selected strategies.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    try:
        asyncio.run(check_liveness())
    except TripBenchError as exc:
        typer.echo("[Warmup] Failed to connect to DB:", err=True)
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo("[Warmup] DB connection OK.")

    try:
        results = run_benchmarks(
            RunConfig(
                strategy_names=strategy,
                order_id=order_id,
                runs=runs,
                warmup_runs=warmup,
                track_allocations=track_allocations,
                persist=persist,
            )
        )
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    print_results(results)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
