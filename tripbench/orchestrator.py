"""
Bench driver: warm-up, measured trials, statistics, and persistence.

Usage (example from CLI):
    from tripbench.orchestrator import RunConfig, run_benchmarks

    results = run_benchmarks(RunConfig(strategy_names=["sequential", "join"], runs=50))
    print(results)

Every trial builds a fresh executor, so nothing is shared between trials. A
trial that raises is recorded as failed and the run moves on.

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive, never overwritten)
"""

from __future__ import annotations

import asyncio
import json
import statistics
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from tripbench.config import get_settings
from tripbench.domain.models import result_record_count
from tripbench.strategies.abstract import AggregateStrategy
from tripbench.strategies.join import JoinStrategy
from tripbench.strategies.multi_result import MultiResultStrategy
from tripbench.strategies.parallel import ParallelStrategy
from tripbench.strategies.sequential import SequentialStrategy
from tripbench.utils.logging import get_logger
from tripbench.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)

StrategyFactory = Callable[[int], AggregateStrategy]


@dataclass(frozen=True)
class RunConfig:
    """
    Options for one bench run. `None` falls back to the settings default.
    """

    strategy_names: Optional[Sequence[str]] = None
    order_id: Optional[int] = None
    runs: Optional[int] = None
    warmup_runs: Optional[int] = None
    track_allocations: Optional[bool] = None
    persist: bool = True
    results_dir: Optional[Path | str] = None
    dsn_override: Optional[str] = None


def _round_float(value: float, decimals: int = 3) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _describe(values: Sequence[float], decimals: int = 3) -> Dict[str, float]:
    """Median, mean, stddev, min and max of a non-empty sample."""
    return {
        "median": _round_float(statistics.median(values), decimals),
        "mean": _round_float(statistics.mean(values), decimals),
        "stddev": _round_float(statistics.stdev(values), decimals) if len(values) > 1 else 0.0,
        "min": _round_float(min(values), decimals),
        "max": _round_float(max(values), decimals),
    }


def _strategy_factories(dsn_override: Optional[str] = None) -> Dict[str, StrategyFactory]:
    """Registry of available strategies."""
    return {
        "sequential": lambda order_id: SequentialStrategy(order_id, dsn_override=dsn_override),
        "parallel": lambda order_id: ParallelStrategy(order_id, dsn_override=dsn_override),
        "multi_result": lambda order_id: MultiResultStrategy(order_id, dsn_override=dsn_override),
        "join": lambda order_id: JoinStrategy(order_id, dsn_override=dsn_override),
    }


def available_strategies() -> List[str]:
    """List available strategy names."""
    return sorted(_strategy_factories().keys())


def _resolve_strategy(
    name: str, order_id: int, dsn_override: Optional[str] = None
) -> AggregateStrategy:
    factories = _strategy_factories(dsn_override)
    if name not in factories:
        raise ValueError(f"Unknown strategy '{name}'. Available: {', '.join(sorted(factories))}")
    return factories[name](order_id)


def _archive_path(results_dir: Path) -> Path:
    """Timestamped archive path that never overwrites an earlier run."""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S.%fZ")
    candidate = results_dir / f"run-{timestamp}.json"
    suffix = 1
    while candidate.exists():
        candidate = results_dir / f"run-{timestamp}-{suffix}.json"
        suffix += 1
    return candidate


def _persist_results(payload: dict, results_dir: Path) -> Path:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    archive_path = _archive_path(results_dir)

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True, default=str)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})
    return archive_path


def _trial_record(run: int, stats: ProfileStats) -> Dict[str, Any]:
    return {
        "run": run,
        "duration_ms": _round_float(stats.duration_ms),
        "allocated_bytes": stats.allocated_bytes,
        "peak_rss_bytes": stats.peak_rss_bytes,
        "cpu_percent": _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None,
    }


async def _profiled_execute(
    strategy: AggregateStrategy, run: int, track_allocations: bool
) -> Dict[str, Any]:
    """Run one measured trial; an exception marks the trial as failed."""
    records: Optional[int] = None
    error: Optional[BaseException] = None
    with profile_block(strategy.name, track_allocations=track_allocations) as stats:
        try:
            result = await strategy.execute()
            records = result_record_count(result)
        except Exception as exc:  # noqa: BLE001 - a failed trial must not end the run
            error = exc

    trial = _trial_record(run, stats)
    trial["records"] = records
    if error is not None:
        log.exception(
            f"[TRIAL FAILED] {strategy.name} run {run}",
            exc_info=error,
            extra={"strategy": strategy.name, "run": run},
        )
        trial["error"] = str(error)
        trial["error_type"] = type(error).__name__
    return trial


def _summarize(strategy: AggregateStrategy, order_id: int, trials: List[dict]) -> dict:
    """Aggregate the trials of one strategy into a summary row."""
    succeeded = [t for t in trials if "error" not in t]
    summary: Dict[str, Any] = {
        "strategy": strategy.name,
        "description": strategy.description,
        "order_id": order_id,
        "round_trips": strategy.round_trips,
        "connections": strategy.connections,
        "runs": len(trials),
        "failed_trials": len(trials) - len(succeeded),
        "records": succeeded[0]["records"] if succeeded else None,
        "duration_ms": None,
        "allocated_bytes": None,
        "peak_rss_bytes": None,
        "individual_runs": trials,
    }
    if succeeded:
        summary["duration_ms"] = _describe([t["duration_ms"] for t in succeeded])
        allocations = [t["allocated_bytes"] for t in succeeded if t["allocated_bytes"] is not None]
        if allocations:
            summary["allocated_bytes"] = {
                k: int(v) for k, v in _describe(allocations, decimals=0).items()
            }
        rss = [t["peak_rss_bytes"] for t in succeeded if t["peak_rss_bytes"]]
        summary["peak_rss_bytes"] = max(rss) if rss else None
    return summary


async def _warmup(name: str, order_id: int, count: int, dsn_override: Optional[str]) -> None:
    for _ in range(count):
        strategy = _resolve_strategy(name, order_id, dsn_override)
        try:
            await strategy.execute()
        except Exception as exc:  # noqa: BLE001 - warm-up failures are only reported
            log.warning(f"[WARMUP] Failed for {name}", extra={"strategy": name, "error": str(exc)})
            return
    log.info(f"[WARMUP] Completed {count} warm-up run(s) for {name}", extra={"strategy": name})


async def run_benchmarks_async(config: Optional[RunConfig] = None) -> List[dict]:
    """
    Run the configured strategies and return one summary per strategy.

    Parameters
    ----------
    config : RunConfig | None
        Run options; unset fields fall back to settings. Strategy names of
        None or ["all"] run every registered strategy.

    Returns
    -------
    List[dict]
        Per-strategy summaries with latency/allocation statistics and the
        individual trials.
    """
    config = config or RunConfig()
    settings = get_settings()
    order_id = config.order_id if config.order_id is not None else settings.bench_order_id
    runs = config.runs if config.runs is not None else settings.bench_runs
    warmup_runs = (
        config.warmup_runs if config.warmup_runs is not None else settings.bench_warmup_runs
    )
    track_allocations = (
        config.track_allocations
        if config.track_allocations is not None
        else settings.bench_track_allocations
    )
    if runs < 1:
        raise ValueError("runs must be at least 1")

    names = list(config.strategy_names) if config.strategy_names else ["all"]
    if names == ["all"]:
        names = available_strategies()
    for name in names:
        # Fail on typos before any trial runs.
        _resolve_strategy(name, order_id, config.dsn_override)

    results: List[dict] = []
    for name in names:
        log.info(f"{'=' * 60}")
        log.info(f"[STRATEGY] {name.upper()}", extra={"strategy": name, "order_id": order_id})
        log.info(f"{'=' * 60}")

        if warmup_runs:
            await _warmup(name, order_id, warmup_runs, config.dsn_override)

        trials: List[dict] = []
        for run in range(1, runs + 1):
            strategy = _resolve_strategy(name, order_id, config.dsn_override)
            trials.append(await _profiled_execute(strategy, run, track_allocations))

        summary = _summarize(strategy, order_id, trials)
        results.append(summary)
        log.info(
            f"[STRATEGY COMPLETE] {name.upper()}",
            extra={
                "strategy": name,
                "runs": runs,
                "failed_trials": summary["failed_trials"],
                "median_ms": (summary["duration_ms"] or {}).get("median"),
            },
        )

    if config.persist:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "order_id": order_id,
            "runs": runs,
            "warmup_runs": warmup_runs,
            "track_allocations": track_allocations,
            "strategies": names,
            "results": results,
        }
        results_dir = config.results_dir or settings.bench_results_dir
        _persist_results(payload, Path(results_dir))

    return results


def run_benchmarks(config: Optional[RunConfig] = None) -> List[dict]:
    """Synchronous wrapper around `run_benchmarks_async` for CLI use."""
    return asyncio.run(run_benchmarks_async(config))


__all__ = [
    "RunConfig",
    "available_strategies",
    "run_benchmarks",
    "run_benchmarks_async",
]
