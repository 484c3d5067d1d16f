"""
Parallel strategy: four round-trips overlapped on four connections.

Each query runs as its own task with its own connection, so no connection ever
carries two statements at once. `asyncio.gather(..., return_exceptions=True)`
is the join barrier: assembly, or error reporting, starts only once every
branch has settled.

Failure policy: the executor never returns a partial aggregate. Once all
branches have settled, every failure is collected into a ParallelBranchError
(chained from the first failing branch in branch order). Waiting for the
siblings of a failed branch means their connections are closed before the
error reaches the caller.
"""

from __future__ import annotations

import asyncio
from typing import List, Tuple, Type

from pydantic import BaseModel

from tripbench.domain.assembler import assemble_from_records
from tripbench.domain.decoder import decode_rows
from tripbench.domain.models import Aggregate, Order, OrderItem, Payment, Shipping
from tripbench.errors import ParallelBranchError
from tripbench.strategies.abstract import AbstractAggregateStrategy
from tripbench.strategies.queries import ITEMS_SQL, ORDER_SQL, PAYMENTS_SQL, SHIPPING_SQL
from tripbench.utils.logging import get_logger

log = get_logger(__name__)

# (branch name, statement, record type); order matters for error reporting only.
_BRANCHES: Tuple[Tuple[str, str, Type[BaseModel]], ...] = (
    ("order", ORDER_SQL, Order),
    ("items", ITEMS_SQL, OrderItem),
    ("shipping", SHIPPING_SQL, Shipping),
    ("payments", PAYMENTS_SQL, Payment),
)


class ParallelStrategy(AbstractAggregateStrategy):
    """
    Fan the four queries out over four independent connections.

    Cancelling `execute()` cancels all branches together; each branch closes
    its own connection on the way out.
    """

    name: str = "parallel"
    description: str = "Four queries on four connections, overlapped with asyncio.gather (4 trips)."
    round_trips: int = 4
    connections: int = 4

    async def _branch(self, sql: str, record_type: Type[BaseModel]) -> List[BaseModel]:
        async with self._sessions() as session:
            rows = await session.query(sql, self.params)
        return decode_rows(rows, record_type)

    async def execute(self) -> Aggregate:
        outcomes = await asyncio.gather(
            *(self._branch(sql, record_type) for _, sql, record_type in _BRANCHES),
            return_exceptions=True,
        )

        failures = [
            (name, outcome)
            for (name, _, _), outcome in zip(_BRANCHES, outcomes)
            if isinstance(outcome, BaseException)
        ]
        if failures:
            log.debug(
                "Parallel fetch failed",
                extra={"order_id": self.order_id, "failed_branches": [n for n, _ in failures]},
            )
            raise ParallelBranchError(failures) from failures[0][1]

        orders, items, shippings, payments = outcomes
        return assemble_from_records(orders, items, shippings, payments, self.order_id)


__all__ = ["ParallelStrategy"]
