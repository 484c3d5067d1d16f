"""
Schema and seed data for the order aggregate benchmark.

Creates the four tables if they are missing and loads deterministic
pseudo-random orders with Postgres COPY. Order 1 always has two items, one
shipping row and three payments, the shape the default benchmark targets.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

import psycopg
import typer

from tripbench.infrastructure.db_factory import build_dsn

app = typer.Typer(help="Create the order tables and load seed data into Postgres (COPY).")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS orders (
    order_id      INTEGER PRIMARY KEY,
    order_date    TIMESTAMP NOT NULL,
    customer_name TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS order_items (
    order_id     INTEGER NOT NULL REFERENCES orders (order_id),
    product_name TEXT NOT NULL,
    quantity     INTEGER NOT NULL,
    unit_price   NUMERIC(18, 2) NOT NULL
);
CREATE TABLE IF NOT EXISTS shipping_details (
    order_id    INTEGER NOT NULL REFERENCES orders (order_id),
    address     TEXT NOT NULL,
    city        TEXT NOT NULL,
    postal_code TEXT NOT NULL,
    country     TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS payments (
    order_id       INTEGER NOT NULL REFERENCES orders (order_id),
    payment_date   TIMESTAMP NOT NULL,
    amount         NUMERIC(18, 2) NOT NULL,
    payment_method TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_order_items_order_id ON order_items (order_id);
CREATE INDEX IF NOT EXISTS ix_shipping_details_order_id ON shipping_details (order_id);
CREATE INDEX IF NOT EXISTS ix_payments_order_id ON payments (order_id);
"""

TRUNCATE_SQL = "TRUNCATE TABLE payments, shipping_details, order_items, orders;"

_CUSTOMERS = ["Ada Lovelace", "Grace Hopper", "Alan Turing", "Edsger Dijkstra", "Barbara Liskov"]
_PRODUCTS = ["Keyboard", "Monitor", "Mouse", "Laptop Stand", "USB-C Hub", "Headset"]
_CITIES = [("Athens", "GR"), ("Lisbon", "PT"), ("Berlin", "DE"), ("Toronto", "CA")]
_METHODS = ["card", "paypal", "bank_transfer", "gift_card"]


@dataclass
class SeedOrder:
    order_id: int
    order_date: datetime
    customer_name: str
    items: List[Tuple[str, int, Decimal]] = field(default_factory=list)
    shipping: Optional[Tuple[str, str, str, str]] = None
    payments: List[Tuple[datetime, Decimal, str]] = field(default_factory=list)


def _generate_orders(count: int, seed: int, max_children: int = 4) -> List[SeedOrder]:
    """
    Build `count` orders with ids 1..count.

    Order 1 has exactly 2 items, a shipping row and 3 payments; the rest get
    0..max_children items and payments and a shipping row about two thirds of
    the time.
    """
    rng = random.Random(seed)
    base = datetime(2024, 1, 1)
    orders: List[SeedOrder] = []
    for order_id in range(1, count + 1):
        order_date = base + timedelta(minutes=rng.randint(0, 525_600))
        if order_id == 1:
            item_count, payment_count, shipped = 2, 3, True
        else:
            item_count = rng.randint(0, max_children)
            payment_count = rng.randint(0, max_children)
            shipped = rng.random() < 0.66

        order = SeedOrder(order_id, order_date, rng.choice(_CUSTOMERS))
        for _ in range(item_count):
            price = Decimal(rng.randint(100, 50_000)) / 100
            order.items.append((rng.choice(_PRODUCTS), rng.randint(1, 5), price))
        if shipped:
            city, country = rng.choice(_CITIES)
            street = f"{rng.randint(1, 200)} Main Street"
            order.shipping = (street, city, f"{rng.randint(10000, 99999)}", country)
        for n in range(payment_count):
            amount = Decimal(rng.randint(100, 20_000)) / 100
            order.payments.append((order_date + timedelta(hours=n + 1), amount, rng.choice(_METHODS)))
        orders.append(order)
    return orders


def _copy_into_db(dsn: str, orders: List[SeedOrder]) -> int:
    """Load the orders and their children with COPY; returns the order count."""
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            with cur.copy("COPY orders (order_id, order_date, customer_name) FROM STDIN") as copy:
                for order in orders:
                    copy.write_row((order.order_id, order.order_date, order.customer_name))
            with cur.copy(
                "COPY order_items (order_id, product_name, quantity, unit_price) FROM STDIN"
            ) as copy:
                for order in orders:
                    for item in order.items:
                        copy.write_row((order.order_id, *item))
            with cur.copy(
                "COPY shipping_details (order_id, address, city, postal_code, country) FROM STDIN"
            ) as copy:
                for order in orders:
                    if order.shipping:
                        copy.write_row((order.order_id, *order.shipping))
            with cur.copy(
                "COPY payments (order_id, payment_date, amount, payment_method) FROM STDIN"
            ) as copy:
                for order in orders:
                    for payment in order.payments:
                        copy.write_row((order.order_id, *payment))
        conn.commit()
    return len(orders)


def _ensure_schema(dsn: str, truncate: bool) -> None:
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
            if truncate:
                cur.execute(TRUNCATE_SQL)
        conn.commit()


@app.command()
def main(
    orders: int = typer.Option(1_000, "--orders", "-n", min=1, help="Number of orders to create."),
    seed: int = typer.Option(42, "--seed", help="RNG seed for deterministic data."),
    truncate: bool = typer.Option(True, "--truncate/--append", help="Empty the tables first."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Override DSN (default from settings)."),
) -> None:
    """
    Create the schema (if needed) and load seed orders.
    """
    target = dsn or build_dsn()
    start = time.perf_counter()
    try:
        _ensure_schema(target, truncate)
        loaded = _copy_into_db(target, _generate_orders(orders, seed))
    except psycopg.Error as exc:
        typer.echo(f"Seeding failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Loaded {loaded} orders in {time.perf_counter() - start:.2f}s.")


if __name__ == "__main__":
    app()
