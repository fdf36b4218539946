"""Graph adapters — weighted graph views over value graphs."""

from valuegraph.adapters._base import BaseValueGraphAdapter
from valuegraph.adapters.immutable import (
    GRAPH_IS_IMMUTABLE,
    MUTATING_OPERATIONS,
    ImmutableValueGraphAdapter,
    read_only,
)

__all__ = [
    "GRAPH_IS_IMMUTABLE",
    "MUTATING_OPERATIONS",
    "BaseValueGraphAdapter",
    "ImmutableValueGraphAdapter",
    "read_only",
]
