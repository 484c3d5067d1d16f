"""
Abstract executor interfaces for the order aggregate benchmark.

Concrete strategies (sequential, parallel, multi_result, join) implement
`AbstractAggregateStrategy`. An executor is bound to one order identifier at
construction and exposes `execute()`, a zero-argument coroutine returning an
`ExecutorResult`: an `Aggregate`, or the raw `FlatRowSet` for the join strategy.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from tripbench.domain.models import ExecutorResult
from tripbench.infrastructure.db_factory import SessionFactory, session_factory


@runtime_checkable
class AggregateStrategy(Protocol):
    """
    Common interface all strategy executors must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the approach.
    round_trips : int
        Requests sent to the store per invocation.
    connections : int
        Connections opened per invocation.
    """

    name: str
    description: str
    round_trips: int
    connections: int

    async def execute(self) -> ExecutorResult:
        """Fetch the order and return the strategy's measured output."""
        ...


class AbstractAggregateStrategy(abc.ABC):
    """
    Base class holding the order identifier and the session factory.

    Subclasses set the class attributes and implement `execute`.
    """

    name: str
    description: str
    round_trips: int
    connections: int

    def __init__(
        self,
        order_id: int,
        sessions: Optional[SessionFactory] = None,
        dsn_override: Optional[str] = None,
    ) -> None:
        self.order_id = order_id
        self._sessions = sessions or session_factory(dsn_override)

    @property
    def params(self) -> Dict[str, Any]:
        return {"id": self.order_id}

    @abc.abstractmethod
    async def execute(self) -> ExecutorResult:  # pragma: no cover - interface only
        """Run the strategy once and return its output."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order_id={self.order_id})"


__all__ = ["AggregateStrategy", "AbstractAggregateStrategy"]
