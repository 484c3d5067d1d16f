"""
Sequential strategy: four round-trips, one after another, on one connection.

Baseline for the round-trip cost: every query waits for the previous response.
"""

from __future__ import annotations

from tripbench.domain.assembler import assemble, single, single_or_none
from tripbench.domain.decoder import decode_rows
from tripbench.domain.models import Aggregate, Order, OrderItem, Payment, Shipping
from tripbench.strategies.abstract import AbstractAggregateStrategy
from tripbench.strategies.queries import ITEMS_SQL, ORDER_SQL, PAYMENTS_SQL, SHIPPING_SQL
from tripbench.utils.logging import get_logger

log = get_logger(__name__)


class SequentialStrategy(AbstractAggregateStrategy):
    """
    Issue the order, items, shipping and payments queries in that order.

    A failure in any step propagates immediately and the remaining queries are
    not sent. That includes a missing order: the header is reduced to exactly
    one row before the items are requested.
    """

    name: str = "sequential"
    description: str = "Four queries, one connection, awaited one after another (4 trips)."
    round_trips: int = 4
    connections: int = 1

    async def execute(self) -> Aggregate:
        params = self.params
        async with self._sessions() as session:
            order = single(decode_rows(await session.query(ORDER_SQL, params), Order), self.order_id)
            items = decode_rows(await session.query(ITEMS_SQL, params), OrderItem)
            shippings = decode_rows(await session.query(SHIPPING_SQL, params), Shipping)
            shipping = single_or_none(shippings, self.order_id)
            payments = decode_rows(await session.query(PAYMENTS_SQL, params), Payment)

        log.debug("Sequential fetch complete", extra={"order_id": self.order_id})
        return assemble(order, items, shipping, payments)


__all__ = ["SequentialStrategy"]
