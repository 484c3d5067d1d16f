"""
Pytest configuration for the order aggregate benchmark.

Provides:
- A recording stand-in store for unit tests (counts sessions and requests,
  can inject failures and latency)
- Database connection management and seeding for integration tests
"""

from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, Generator, List, Mapping, Optional

import psycopg
import pytest

from tripbench.config import Settings
from tripbench.infrastructure.db_factory import ResultGrid
from tripbench.strategies.queries import (
    ITEMS_SQL,
    JOIN_SQL,
    MULTI_SQL,
    ORDER_SQL,
    PAYMENTS_SQL,
    SHIPPING_SQL,
)

SEEDED_ORDER_ID = 1

ORDER_ROW = {
    "order_id": SEEDED_ORDER_ID,
    "order_date": datetime(2024, 3, 1, 9, 30),
    "customer_name": "Ada Lovelace",
}
ITEM_ROWS = [
    {"product_name": "Keyboard", "quantity": 1, "unit_price": Decimal("49.90")},
    {"product_name": "Monitor", "quantity": 2, "unit_price": Decimal("199.00")},
]
SHIPPING_ROW = {
    "address": "12 Main Street",
    "city": "Athens",
    "postal_code": "10558",
    "country": "GR",
}
PAYMENT_ROWS = [
    {"payment_date": datetime(2024, 3, 1, 10, 0), "amount": Decimal("100.00"), "payment_method": "card"},
    {"payment_date": datetime(2024, 3, 2, 10, 0), "amount": Decimal("200.00"), "payment_method": "paypal"},
    {"payment_date": datetime(2024, 3, 3, 10, 0), "amount": Decimal("147.90"), "payment_method": "card"},
]

_ITEM_NULLS = dict.fromkeys(["product_name", "quantity", "unit_price"])
_SHIPPING_NULLS = dict.fromkeys(["address", "city", "postal_code", "country"])
_PAYMENT_NULLS = dict.fromkeys(["payment_date", "amount", "payment_method"])


class RecordingSession:
    """One stand-in connection; records every request sent through it."""

    def __init__(self, store: RecordingStore) -> None:
        self._store = store
        self.requests: List[tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    async def _round_trip(self, kind: str, sql: str, params: Mapping[str, Any]) -> None:
        self.requests.append((kind, sql, dict(params)))
        await asyncio.sleep(self._store.delays.get(sql, 0))
        if sql in self._store.failures:
            raise self._store.failures[sql]

    async def query(self, sql: str, params: Mapping[str, Any]) -> List[Dict[str, Any]]:
        await self._round_trip("query", sql, params)
        return [dict(row) for row in self._store.rows_for(sql, params["id"])]

    async def query_multiple(self, sql: str, params: Mapping[str, Any]) -> ResultGrid:
        await self._round_trip("multiple", sql, params)
        return ResultGrid(self._store.result_sets_for(sql, params["id"]), sql)


class RecordingStore:
    """
    In-memory store holding one order and its children.

    Statements are answered by SQL text, so the stand-in serves exactly the
    queries the executors send. Queries for any other identifier return no rows.
    """

    def __init__(
        self,
        order: Optional[Dict[str, Any]] = None,
        items: Optional[List[Dict[str, Any]]] = None,
        shipping: Optional[List[Dict[str, Any]]] = None,
        payments: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.order_id = SEEDED_ORDER_ID
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            ORDER_SQL: [order] if order is not None else [],
            ITEMS_SQL: list(items or []),
            SHIPPING_SQL: list(shipping or []),
            PAYMENTS_SQL: list(payments or []),
        }
        self.failures: Dict[str, BaseException] = {}
        self.delays: Dict[str, float] = {}
        self.multi_override: Optional[List[List[Dict[str, Any]]]] = None
        self.sessions: List[RecordingSession] = []
        self.open_sessions = 0
        self.max_open_sessions = 0

    def _join_rows(self) -> List[Dict[str, Any]]:
        if not self.tables[ORDER_SQL]:
            return []
        order = self.tables[ORDER_SQL][0]
        rows = []
        for item in self.tables[ITEMS_SQL] or [_ITEM_NULLS]:
            for shipping in self.tables[SHIPPING_SQL] or [_SHIPPING_NULLS]:
                for payment in self.tables[PAYMENTS_SQL] or [_PAYMENT_NULLS]:
                    rows.append({**order, **item, **shipping, **payment})
        return rows

    def rows_for(self, sql: str, order_id: int) -> List[Dict[str, Any]]:
        if order_id != self.order_id:
            return []
        if sql == JOIN_SQL:
            return self._join_rows()
        return self.tables[sql]

    def result_sets_for(self, sql: str, order_id: int) -> List[List[Dict[str, Any]]]:
        assert sql == MULTI_SQL
        if self.multi_override is not None:
            return self.multi_override
        return [
            self.rows_for(statement, order_id)
            for statement in (ORDER_SQL, ITEMS_SQL, SHIPPING_SQL, PAYMENTS_SQL)
        ]

    @asynccontextmanager
    async def session(self) -> AsyncIterator[RecordingSession]:
        session = RecordingSession(self)
        self.sessions.append(session)
        self.open_sessions += 1
        self.max_open_sessions = max(self.max_open_sessions, self.open_sessions)
        try:
            yield session
        finally:
            session.closed = True
            self.open_sessions -= 1

    @property
    def requests(self) -> List[tuple[str, str, Dict[str, Any]]]:
        return [request for session in self.sessions for request in session.requests]


@pytest.fixture
def store() -> RecordingStore:
    """Order 1 with 2 items, one shipping row and 3 payments."""
    return RecordingStore(
        order=ORDER_ROW, items=ITEM_ROWS, shipping=[SHIPPING_ROW], payments=PAYMENT_ROWS
    )


@pytest.fixture
def make_store():
    """Factory for stores with custom contents."""
    return RecordingStore


# Integration fixtures


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "order_tripbench"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def seeded_orders(db_connection: psycopg.Connection, test_dsn: str) -> int:
    """
    Create the schema and seed 50 deterministic orders.

    Returns the number of orders seeded.
    """
    from scripts.seed_orders import _copy_into_db, _ensure_schema, _generate_orders

    _ensure_schema(test_dsn, truncate=True)
    _copy_into_db(test_dsn, _generate_orders(50, seed=42))

    with db_connection.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM orders;")
        count = cur.fetchone()[0]

    return count
