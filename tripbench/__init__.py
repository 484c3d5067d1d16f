"""
Order aggregate query-trip benchmark.

Compares four ways of loading an order with its items, shipping and payments
from PostgreSQL:

- Sequential queries on one connection (4 round-trips)
- Parallel queries on four connections (4 overlapped round-trips)
- One multi-statement request read as four result sets (1 round-trip)
- One wide LEFT JOIN returning duplicated flat rows (1 round-trip)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from tripbench.config import Settings, get_settings
from tripbench.domain.models import Aggregate, ExecutorResult, FlatJoinRow, FlatRowSet
from tripbench.orchestrator import RunConfig, available_strategies, run_benchmarks
from tripbench.strategies.abstract import AbstractAggregateStrategy, AggregateStrategy
from tripbench.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Results
    "Aggregate",
    "ExecutorResult",
    "FlatJoinRow",
    "FlatRowSet",
    # Orchestration
    "RunConfig",
    "available_strategies",
    "run_benchmarks",
    # Strategy abstractions
    "AggregateStrategy",
    "AbstractAggregateStrategy",
    # Logging
    "configure_logging",
    "get_logger",
]
