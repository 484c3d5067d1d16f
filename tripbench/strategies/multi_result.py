"""
Multi-result-set strategy: four statements in one request, one round-trip.

The statements are sent back to back in a single request and the response is
read as a grid of result sets in submission order: order, items, shipping,
payments.
"""

from __future__ import annotations

from tripbench.domain.assembler import assemble, single, single_or_none
from tripbench.domain.models import Aggregate, Order, OrderItem, Payment, Shipping
from tripbench.strategies.abstract import AbstractAggregateStrategy
from tripbench.strategies.queries import MULTI_SQL
from tripbench.utils.logging import get_logger

log = get_logger(__name__)


class MultiResultStrategy(AbstractAggregateStrategy):
    """
    Read four result sets from one multi-statement request.

    The grid rejects reads past its end and unread trailing sets, and the
    decoder rejects a set whose columns do not match the expected record, so a
    reader out of step with the statement order fails instead of misassigning
    fields.
    """

    name: str = "multi_result"
    description: str = "One request with four statements, read as four result sets (1 trip)."
    round_trips: int = 1
    connections: int = 1

    async def execute(self) -> Aggregate:
        async with self._sessions() as session:
            grid = await session.query_multiple(MULTI_SQL, self.params)

        order = single(grid.read(Order), self.order_id)
        items = grid.read(OrderItem)
        shipping = single_or_none(grid.read(Shipping), self.order_id)
        payments = grid.read(Payment)
        grid.ensure_consumed()

        log.debug("Multi-result fetch complete", extra={"order_id": self.order_id})
        return assemble(order, items, shipping, payments)


__all__ = ["MultiResultStrategy"]
