"""Value graph layer — rustworkx-backed storage, edge identities, protocols."""

from valuegraph.graph._rustworkx import (
    ImmutableValueGraph,
    MutableValueGraph,
    ValueGraphBuilder,
    copy_of,
)
from valuegraph.graph.protocols import (
    MutableValueGraphView,
    SupportsClone,
    SupportsSerialization,
    ValueGraphView,
    WeightedGraph,
)
from valuegraph.graph.types import EndpointPair, GraphType

__all__ = [
    "EndpointPair",
    "GraphType",
    "ImmutableValueGraph",
    "MutableValueGraph",
    "MutableValueGraphView",
    "SupportsClone",
    "SupportsSerialization",
    "ValueGraphBuilder",
    "ValueGraphView",
    "WeightedGraph",
    "copy_of",
]
