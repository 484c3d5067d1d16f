"""
Console report for bench results, rendered with rich.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _read_cgroup(path: str) -> Optional[str]:
    try:
        with open(path, "r") as f:
            return f.read().strip()
    except (FileNotFoundError, PermissionError):
        return None


def get_container_resources() -> Dict[str, Optional[str]]:
    """
    CPU and memory limits of the current container, when there are any.

    Environment variables win; otherwise cgroup v2 limits are read.
    """
    resources: Dict[str, Optional[str]] = {
        "cpus": os.environ.get("BENCHMARK_CPU_LIMIT"),
        "memory": os.environ.get("BENCHMARK_MEMORY_LIMIT"),
    }

    if resources["cpus"] is None:
        content = _read_cgroup("/sys/fs/cgroup/cpu.max")
        parts = content.split() if content else []
        if len(parts) == 2 and parts[0] != "max":
            try:
                resources["cpus"] = f"{int(parts[0]) / int(parts[1]):.1f}"
            except ValueError:
                pass

    if resources["memory"] is None:
        content = _read_cgroup("/sys/fs/cgroup/memory.max")
        if content and content != "max":
            try:
                resources["memory"] = f"{int(content) / (1024**2):.0f}MB"
            except ValueError:
                pass

    return resources


def _stat(summary: Dict[str, Any], key: str, field: str) -> Optional[float]:
    stats = summary.get(key)
    return stats.get(field) if isinstance(stats, dict) else None


def print_results(results: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """
    Render per-strategy summaries as a rich table, fastest median first.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    resources = get_container_resources()
    resource_parts = []
    if resources["cpus"]:
        resource_parts.append(f"CPU: {resources['cpus']} cores")
    if resources["memory"]:
        resource_parts.append(f"Memory: {resources['memory']}")

    title = "Order Aggregate Query-Trip Benchmark"
    if resource_parts:
        title = f"{title}\n[dim]Container Resources: {' │ '.join(resource_parts)}[/dim]"

    table = Table(title=title, box=box.ROUNDED, caption="Sorted by median latency (ascending)")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Trips", justify="right", style="blue")
    table.add_column("Conns", justify="right", style="blue")
    table.add_column("Records", justify="right", style="magenta")
    table.add_column("Runs\n[dim](failed)[/dim]", justify="right")
    table.add_column("Latency ms\n[dim](Median ± StdDev)[/dim]", justify="right", style="green")
    table.add_column("Min / Max ms", justify="right", style="green")
    table.add_column("Allocated KB\n[dim](Median)[/dim]", justify="right", style="yellow")

    def sort_key(summary: Dict[str, Any]) -> float:
        median = _stat(summary, "duration_ms", "median")
        return median if median is not None else float("inf")

    for res in sorted(results, key=sort_key):
        median = _stat(res, "duration_ms", "median")
        if median is None:
            latency = "[red]failed[/red]"
            spread = "-"
        else:
            latency = f"{median:.3f} ± {_stat(res, 'duration_ms', 'stddev'):.3f}"
            spread = f"{_stat(res, 'duration_ms', 'min'):.3f} / {_stat(res, 'duration_ms', 'max'):.3f}"

        allocated = _stat(res, "allocated_bytes", "median")
        allocated_str = f"{allocated / 1024:,.1f}" if allocated is not None else "N/A"

        records = res.get("records")
        failed = res.get("failed_trials", 0)
        runs = f"{res.get('runs', 0)} ({failed})" if failed else str(res.get("runs", 0))

        table.add_row(
            res.get("strategy", "Unknown"),
            str(res.get("round_trips", "-")),
            str(res.get("connections", "-")),
            str(records) if records is not None else "-",
            runs,
            latency,
            spread,
            allocated_str,
        )

    console.print(table)


__all__ = ["get_container_resources", "print_results"]
