"""
Measurement sink for the bench driver.

Profiles a single trial and records:
- Wall-clock time (perf_counter)
- Python allocations during the block (tracemalloc peak above the starting level)
- Peak RSS via a background sampling thread (psutil)
- CPU usage (psutil, best-effort snapshot)

Usage:
    from tripbench.utils.profiler import profile_block

    with profile_block("sequential") as stats:
        await executor.execute()

    print(stats.duration_ms, stats.allocated_bytes, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    allocated_bytes: Optional[int] = field(default=None)
    peak_rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000.0


@contextlib.contextmanager
def profile_block(
    label: str, sample_interval_ms: int = 5, track_allocations: bool = True
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile one trial.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling. Lower = more accurate but higher overhead.
    track_allocations : bool
        Whether to trace Python allocations with tracemalloc. Tracing slows the
        traced code down, so durations are only comparable between trials that
        share the same setting.

    Notes
    -----
    `allocated_bytes` is the tracemalloc peak reached inside the block minus the
    traced size when the block started, i.e. the extra memory the trial needed
    at its high-water mark.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        """Background thread to sample RSS at regular intervals."""
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    tracemalloc_was_running = tracemalloc.is_tracing()
    baseline_traced = 0
    if track_allocations:
        if not tracemalloc_was_running:
            tracemalloc.start()
        tracemalloc.reset_peak()
        baseline_traced, _ = tracemalloc.get_traced_memory()

    # CPU percent needs a priming call
    process.cpu_percent(interval=None)

    sampler = threading.Thread(target=_sample_memory, daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        stop_sampling.set()
        sampler.join(timeout=1.0)
        stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None
        stats.cpu_percent = process.cpu_percent(interval=None)

        if track_allocations and tracemalloc.is_tracing():
            _, peak_traced = tracemalloc.get_traced_memory()
            stats.allocated_bytes = max(peak_traced - baseline_traced, 0)
            # Stop tracemalloc only if we started it
            if not tracemalloc_was_running:
                tracemalloc.stop()


__all__ = ["ProfileStats", "profile_block"]
