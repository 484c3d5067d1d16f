"""
Infrastructure package for the order aggregate benchmark.

Centralizes store connectivity: per-unit-of-work sessions, multi-statement
result grids, and the startup liveness check.
"""

from tripbench.infrastructure.db_factory import (
    PsycopgSession,
    ResultGrid,
    SessionFactory,
    StoreSession,
    build_dsn,
    check_liveness,
    open_session,
    session_factory,
)

__all__ = [
    "PsycopgSession",
    "ResultGrid",
    "SessionFactory",
    "StoreSession",
    "build_dsn",
    "check_liveness",
    "open_session",
    "session_factory",
]
