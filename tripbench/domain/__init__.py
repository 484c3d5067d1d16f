"""
Domain package: records, the row decoder, and the aggregate assembler.

Pure code only; no I/O happens in this package.
"""

from tripbench.domain.assembler import (
    assemble,
    assemble_from_records,
    reshape_join_rows,
    single,
    single_or_none,
)
from tripbench.domain.decoder import decode_row, decode_rows
from tripbench.domain.models import (
    Aggregate,
    ExecutorResult,
    FlatJoinRow,
    FlatRowSet,
    Order,
    OrderItem,
    Payment,
    Shipping,
)

__all__ = [
    "Aggregate",
    "ExecutorResult",
    "FlatJoinRow",
    "FlatRowSet",
    "Order",
    "OrderItem",
    "Payment",
    "Shipping",
    "assemble",
    "assemble_from_records",
    "decode_row",
    "decode_rows",
    "reshape_join_rows",
    "single",
    "single_or_none",
]
