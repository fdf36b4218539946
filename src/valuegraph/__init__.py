"""valuegraph: weighted graph adapters over immutable value graphs.

Read-only views, weight conversion, cloning, and a compact wire format.
"""

__version__ = "0.1.0"

from valuegraph.adapters import BaseValueGraphAdapter, ImmutableValueGraphAdapter
from valuegraph.config import AdapterOptions
from valuegraph.exceptions import (
    ConverterNotPersistableError,
    GraphFormatError,
    NoSuchEdgeError,
    NoSuchNodeError,
    StructuralCopyError,
    UnsupportedGraphShapeError,
    UnsupportedOperationError,
    ValueGraphError,
)
from valuegraph.graph import (
    EndpointPair,
    GraphType,
    ImmutableValueGraph,
    MutableValueGraph,
    ValueGraphBuilder,
    ValueGraphView,
    WeightedGraph,
)

__all__ = [
    "AdapterOptions",
    "BaseValueGraphAdapter",
    "ConverterNotPersistableError",
    "EndpointPair",
    "GraphFormatError",
    "GraphType",
    "ImmutableValueGraph",
    "ImmutableValueGraphAdapter",
    "MutableValueGraph",
    "NoSuchEdgeError",
    "NoSuchNodeError",
    "StructuralCopyError",
    "UnsupportedGraphShapeError",
    "UnsupportedOperationError",
    "ValueGraphBuilder",
    "ValueGraphError",
    "ValueGraphView",
    "WeightedGraph",
    "__version__",
]
