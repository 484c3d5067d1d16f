"""
Domain models for the order aggregate benchmark.

Each record mirrors the columns selected from one table (see
`scripts/seed_orders.py` for the schema). Field names equal column names so the
row decoder can map result rows onto records without a translation table.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple, Union

from pydantic import BaseModel, Field

_RECORD_CONFIG = {
    "frozen": True,
    "extra": "forbid",
    "arbitrary_types_allowed": False,
}


class Order(BaseModel):
    """
    Root of the aggregate; exactly one per identifier.
    """

    order_id: int = Field(..., description="Primary key of `orders`.")
    order_date: datetime = Field(..., description="When the order was placed.")
    customer_name: str = Field(..., description="Display name of the customer.")

    model_config = _RECORD_CONFIG


class OrderItem(BaseModel):
    product_name: str
    quantity: int
    unit_price: Decimal

    model_config = _RECORD_CONFIG


class Shipping(BaseModel):
    address: str
    city: str
    postal_code: str
    country: str

    model_config = _RECORD_CONFIG


class Payment(BaseModel):
    payment_date: datetime
    amount: Decimal
    payment_method: str

    model_config = _RECORD_CONFIG


class Aggregate(BaseModel):
    """
    An order with its items, optional shipping, and payments.

    Built fresh per invocation and never mutated; items and payments keep the
    order in which the store returned them.
    """

    order: Order
    items: Tuple[OrderItem, ...] = ()
    shipping: Optional[Shipping] = None
    payments: Tuple[Payment, ...] = ()

    model_config = {"frozen": True}

    @property
    def record_count(self) -> int:
        """Number of records composed into this aggregate."""
        return 1 + len(self.items) + (1 if self.shipping else 0) + len(self.payments)


class FlatJoinRow(BaseModel):
    """
    One row of the wide LEFT JOIN.

    Order fields are repeated on every row. Item, shipping and payment columns
    are NULL when the order has no matching row on that side of the join.
    """

    order_id: int
    order_date: datetime
    customer_name: str
    product_name: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    payment_date: Optional[datetime] = None
    amount: Optional[Decimal] = None
    payment_method: Optional[str] = None

    model_config = _RECORD_CONFIG


FlatRowSet = Tuple[FlatJoinRow, ...]

# What a strategy executor hands back to the bench driver.
ExecutorResult = Union[Aggregate, FlatRowSet]


def result_record_count(result: ExecutorResult) -> int:
    """Records materialized by an executor: composed records or raw join rows."""
    if isinstance(result, Aggregate):
        return result.record_count
    return len(result)


__all__ = [
    "Order",
    "OrderItem",
    "Shipping",
    "Payment",
    "Aggregate",
    "FlatJoinRow",
    "FlatRowSet",
    "ExecutorResult",
    "result_record_count",
]
