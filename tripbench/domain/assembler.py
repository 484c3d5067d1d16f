"""
Aggregate assembler.

Pure in-memory composition of decoded records into an `Aggregate`, plus the
row-count reductions the executors apply before composing.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, TypeVar

from tripbench.domain.models import (
    Aggregate,
    FlatJoinRow,
    Order,
    OrderItem,
    Payment,
    Shipping,
)
from tripbench.errors import AmbiguousOrderError, AmbiguousShippingError, MissingOrderError

T = TypeVar("T")


def single(orders: Sequence[Order], order_id: Optional[int] = None) -> Order:
    """Exactly-one reduction for the order header."""
    if not orders:
        raise MissingOrderError(order_id)
    if len(orders) > 1:
        raise AmbiguousOrderError(order_id, len(orders))
    return orders[0]


def single_or_none(
    shippings: Sequence[Shipping], order_id: Optional[int] = None
) -> Optional[Shipping]:
    """Zero-or-one reduction for shipping details."""
    if len(shippings) > 1:
        raise AmbiguousShippingError(order_id, len(shippings))
    return shippings[0] if shippings else None


def assemble(
    order: Optional[Order],
    items: Iterable[OrderItem],
    shipping: Optional[Shipping],
    payments: Iterable[Payment],
) -> Aggregate:
    """
    Compose one aggregate from its parts.

    Raises
    ------
    MissingOrderError
        If `order` is None (the identifier does not exist in the store).
    """
    if order is None:
        raise MissingOrderError()
    return Aggregate(
        order=order,
        items=tuple(items),
        shipping=shipping,
        payments=tuple(payments),
    )


def assemble_from_records(
    orders: Sequence[Order],
    items: Sequence[OrderItem],
    shippings: Sequence[Shipping],
    payments: Sequence[Payment],
    order_id: Optional[int] = None,
) -> Aggregate:
    """Apply the order/shipping reductions to decoded result sets, then assemble."""
    order = single(orders, order_id)
    shipping = single_or_none(shippings, order.order_id)
    return assemble(order, items, shipping, payments)


def _distinct(values: Iterable[Optional[T]]) -> list[T]:
    seen: set[T] = set()
    ordered: list[T] = []
    for value in values:
        if value is None or value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


def reshape_join_rows(rows: Sequence[FlatJoinRow]) -> Aggregate:
    """
    Fold the duplicated rows of the wide join back into an aggregate.

    Item, shipping and payment values are de-duplicated in first-seen order.
    The join carries no per-row identity, so two identical items (or payments)
    collapse into one: the result has set semantics for those collections.
    """
    if not rows:
        raise MissingOrderError()
    head = rows[0]
    order = Order(
        order_id=head.order_id,
        order_date=head.order_date,
        customer_name=head.customer_name,
    )
    items = _distinct(
        OrderItem(
            product_name=row.product_name,
            quantity=row.quantity,
            unit_price=row.unit_price,
        )
        if row.product_name is not None
        else None
        for row in rows
    )
    shippings = _distinct(
        Shipping(
            address=row.address,
            city=row.city,
            postal_code=row.postal_code,
            country=row.country,
        )
        if row.address is not None
        else None
        for row in rows
    )
    payments = _distinct(
        Payment(
            payment_date=row.payment_date,
            amount=row.amount,
            payment_method=row.payment_method,
        )
        if row.payment_date is not None
        else None
        for row in rows
    )
    return assemble(order, items, single_or_none(shippings, order.order_id), payments)


__all__ = [
    "single",
    "single_or_none",
    "assemble",
    "assemble_from_records",
    "reshape_join_rows",
]
