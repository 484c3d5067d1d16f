"""
Error hierarchy for the order aggregate benchmark.

Driver-level failures are translated at the session boundary so executors and
the bench driver only ever see these types (with the original exception chained).
"""

from __future__ import annotations

from typing import Sequence


class TripBenchError(Exception):
    """Base class for every error raised by the benchmark core."""


class StoreConnectionError(TripBenchError):
    """The store could not be reached or refused the credentials."""


class QueryError(TripBenchError):
    """A statement failed in the driver or the response had an unexpected shape."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


class DecodeError(TripBenchError):
    """A row did not match the fields of the record it was decoded into."""

    def __init__(self, record_type: str, detail: str) -> None:
        super().__init__(f"Cannot decode row into {record_type}: {detail}")
        self.record_type = record_type
        self.detail = detail


class MissingOrderError(TripBenchError):
    """No order exists for the requested identifier."""

    def __init__(self, order_id: int | None = None) -> None:
        super().__init__(f"Order {order_id} not found" if order_id is not None else "Order not found")
        self.order_id = order_id


class IntegrityViolation(TripBenchError):
    """The store returned more rows than the relation allows."""

    def __init__(self, entity: str, order_id: int | None, count: int) -> None:
        super().__init__(f"Expected at most one {entity} row for order {order_id}, got {count}")
        self.entity = entity
        self.order_id = order_id
        self.count = count


class AmbiguousOrderError(IntegrityViolation):
    def __init__(self, order_id: int | None, count: int) -> None:
        super().__init__("order", order_id, count)


class AmbiguousShippingError(IntegrityViolation):
    def __init__(self, order_id: int | None, count: int) -> None:
        super().__init__("shipping", order_id, count)


class ParallelBranchError(TripBenchError):
    """
    One or more branches of a parallel fan-out failed.

    Raised only after every branch has settled. ``failures`` keeps every
    ``(branch, exception)`` pair in branch order; ``first`` is the first of them.
    """

    def __init__(self, failures: Sequence[tuple[str, BaseException]]) -> None:
        if not failures:
            raise ValueError("ParallelBranchError requires at least one failure")
        self.failures = tuple(failures)
        branch, first = self.failures[0]
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(
            f"{len(self.failures)} parallel branch(es) failed [{names}]; "
            f"first ({branch}): {type(first).__name__}: {first}"
        )

    @property
    def first(self) -> BaseException:
        return self.failures[0][1]


__all__ = [
    "TripBenchError",
    "StoreConnectionError",
    "QueryError",
    "DecodeError",
    "MissingOrderError",
    "IntegrityViolation",
    "AmbiguousOrderError",
    "AmbiguousShippingError",
    "ParallelBranchError",
]
