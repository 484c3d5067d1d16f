"""
Utilities package for the order aggregate benchmark.

Shared helpers for logging and profiling; free of domain-specific logic.
"""

from tripbench.utils.logging import configure_logging, get_logger
from tripbench.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
