"""
Join strategy: one wide LEFT JOIN, one round-trip, no assembly.

The server shapes the result; the price is fan-out duplication. With both
one-to-many sides non-empty the row count is items x payments, each row
repeating the order and shipping columns. An order with no items or payments
still yields one row, with NULLs on the empty side.

The measured output is the duplicated row set itself. Callers who want an
aggregate can fold it with `tripbench.domain.assembler.reshape_join_rows`.
"""

from __future__ import annotations

from tripbench.domain.decoder import decode_rows
from tripbench.domain.models import FlatJoinRow, FlatRowSet
from tripbench.strategies.abstract import AbstractAggregateStrategy
from tripbench.strategies.queries import JOIN_SQL
from tripbench.utils.logging import get_logger

log = get_logger(__name__)


class JoinStrategy(AbstractAggregateStrategy):
    name: str = "join"
    description: str = "Single LEFT JOIN across the four tables, raw duplicated rows (1 trip)."
    round_trips: int = 1
    connections: int = 1

    async def execute(self) -> FlatRowSet:
        async with self._sessions() as session:
            rows = await session.query(JOIN_SQL, self.params)

        flat_rows = tuple(decode_rows(rows, FlatJoinRow))
        log.debug("Join fetch complete", extra={"order_id": self.order_id, "rows": len(flat_rows)})
        return flat_rows


__all__ = ["JoinStrategy"]
