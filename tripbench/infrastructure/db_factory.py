"""
Store access for the order aggregate benchmark.

Every unit of work opens its own psycopg `AsyncConnection` through
`open_session()` and closes it when the `async with` block exits, on success,
error, or cancellation alike. There is deliberately no pool and no retry: a
failed connect is surfaced to the caller as StoreConnectionError.

Executors talk to the store through the small `StoreSession` protocol so tests
can substitute a recording stand-in:

    async with open_session() as session:
        rows = await session.query(ORDER_SQL, {"id": 1})
        grid = await session.query_multiple(MULTI_SQL, {"id": 1})
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Type,
    TypeVar,
)

import psycopg
from psycopg.rows import dict_row
from pydantic import BaseModel

from tripbench.config import get_settings
from tripbench.domain.decoder import Row, decode_rows
from tripbench.errors import QueryError, StoreConnectionError
from tripbench.utils.logging import get_logger

log = get_logger(__name__)

Params = Mapping[str, Any]
R = TypeVar("R", bound=BaseModel)


def build_dsn() -> str:
    """Compose a DSN string from settings."""
    settings = get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


class ResultGrid:
    """
    Ordered result sets of one multi-statement request.

    Sets must be read front to back, in the order the statements were
    submitted. Reading past the last set, or finishing while sets remain
    unread, means the request and the reader disagree on the statement
    sequence and raises QueryError.
    """

    def __init__(self, result_sets: Sequence[Sequence[Row]], sql: Optional[str] = None) -> None:
        self._result_sets = [list(rows) for rows in result_sets]
        self._position = 0
        self._sql = sql

    def __len__(self) -> int:
        return len(self._result_sets)

    @property
    def remaining(self) -> int:
        return len(self._result_sets) - self._position

    def read(self, record_type: Type[R]) -> List[R]:
        """Decode the next result set into `record_type` records."""
        if self._position >= len(self._result_sets):
            raise QueryError(
                f"Result grid exhausted after {len(self._result_sets)} set(s); "
                f"cannot read {record_type.__name__}",
                self._sql,
            )
        rows = self._result_sets[self._position]
        self._position += 1
        return decode_rows(rows, record_type)

    def ensure_consumed(self) -> None:
        if self.remaining:
            raise QueryError(
                f"{self.remaining} unread result set(s) left in grid of {len(self._result_sets)}",
                self._sql,
            )


class StoreSession(Protocol):
    """Request/response contract the executors consume."""

    async def query(self, sql: str, params: Params) -> List[Row]:
        """One round-trip returning the rows of a single statement."""
        ...

    async def query_multiple(self, sql: str, params: Params) -> ResultGrid:
        """One round-trip carrying several statements, returned as ordered result sets."""
        ...


SessionFactory = Callable[[], AsyncContextManager[StoreSession]]


class PsycopgSession:
    """
    `StoreSession` over a psycopg async connection.

    The connection is expected to use `dict_row` and client-side binding
    (`AsyncClientCursor`); the latter is what allows several parameterized
    statements in one request.
    """

    def __init__(self, conn: psycopg.AsyncConnection[Dict[str, Any]]) -> None:
        self._conn = conn

    async def query(self, sql: str, params: Params) -> List[Row]:
        async with self._conn.cursor() as cur:
            try:
                await cur.execute(sql, params)
                return await cur.fetchall()
            except psycopg.Error as exc:
                raise QueryError(f"Query failed: {exc}", sql) from exc

    async def query_multiple(self, sql: str, params: Params) -> ResultGrid:
        async with self._conn.cursor() as cur:
            try:
                await cur.execute(sql, params)
                result_sets = [await cur.fetchall()]
                while cur.nextset():
                    result_sets.append(await cur.fetchall())
            except psycopg.Error as exc:
                raise QueryError(f"Multi-statement query failed: {exc}", sql) from exc
        return ResultGrid(result_sets, sql)

    async def ping(self) -> None:
        """Trivial liveness round-trip."""
        await self.query("SELECT 1 AS ok", {})


@asynccontextmanager
async def open_session(dsn_override: Optional[str] = None) -> AsyncIterator[PsycopgSession]:
    """
    Open a fresh connection for one unit of work and close it on exit.

    Raises
    ------
    StoreConnectionError
        If the store cannot be reached or rejects the credentials.
    """
    settings = get_settings()
    try:
        conn = await psycopg.AsyncConnection.connect(
            dsn_override or build_dsn(),
            autocommit=True,
            row_factory=dict_row,
            cursor_factory=psycopg.AsyncClientCursor,
            connect_timeout=settings.db_connect_timeout,
        )
    except psycopg.Error as exc:
        raise StoreConnectionError(f"Cannot connect to the store: {exc}") from exc
    try:
        yield PsycopgSession(conn)
    finally:
        await conn.close()


def session_factory(dsn_override: Optional[str] = None) -> SessionFactory:
    """Zero-argument factory opening a new session per call."""

    def _open() -> AsyncContextManager[StoreSession]:
        return open_session(dsn_override)

    return _open


async def check_liveness(dsn_override: Optional[str] = None) -> None:
    """
    Open one exploratory connection and run `SELECT 1`.

    Any StoreConnectionError or QueryError propagates to the caller.
    """
    async with open_session(dsn_override) as session:
        await session.ping()
    log.info("[LIVENESS] Store connection OK")


__all__ = [
    "Params",
    "ResultGrid",
    "StoreSession",
    "SessionFactory",
    "PsycopgSession",
    "build_dsn",
    "open_session",
    "session_factory",
    "check_liveness",
]
