"""
Strategies package for the order aggregate benchmark.

Re-exports the executor interfaces and the four concrete strategies so
downstream code can import from `tripbench.strategies` directly.
"""

from tripbench.strategies.abstract import AbstractAggregateStrategy, AggregateStrategy
from tripbench.strategies.join import JoinStrategy
from tripbench.strategies.multi_result import MultiResultStrategy
from tripbench.strategies.parallel import ParallelStrategy
from tripbench.strategies.sequential import SequentialStrategy

__all__ = [
    # Abstracts
    "AbstractAggregateStrategy",
    "AggregateStrategy",
    # Concrete strategies
    "JoinStrategy",
    "MultiResultStrategy",
    "ParallelStrategy",
    "SequentialStrategy",
]
