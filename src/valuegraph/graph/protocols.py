"""Graph protocols — runtime-checkable interfaces for value graphs and adapters.

Split into the storage-side view (``ValueGraphView``) consumed by adapters
and the general-purpose weighted graph contract (``WeightedGraph``) that
adapters expose.  Clone and serialization are opt-in capability protocols
detected via ``isinstance()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Set as AbstractSet

    from valuegraph.graph.types import EndpointPair, GraphType


@runtime_checkable
class ValueGraphView(Protocol):
    """Read contract of a value graph — nodes, valued edges, adjacency.

    Every storage backend wrapped by an adapter must implement this.
    """

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def is_directed(self) -> bool: ...
    @property
    def allows_self_loops(self) -> bool: ...

    # ------------------------------------------------------------------
    # Nodes and edges
    # ------------------------------------------------------------------

    def nodes(self) -> AbstractSet[Any]: ...
    def edges(self) -> AbstractSet[EndpointPair]: ...
    def has_edge_connecting(self, node_u: Any, node_v: Any) -> bool: ...
    def edge_value(self, node_u: Any, node_v: Any) -> Any | None: ...

    # ------------------------------------------------------------------
    # Adjacency
    # ------------------------------------------------------------------

    def successors(self, node: Any) -> AbstractSet[Any]: ...
    def predecessors(self, node: Any) -> AbstractSet[Any]: ...
    def incident_edges(self, node: Any) -> AbstractSet[EndpointPair]: ...
    def degree(self, node: Any) -> int: ...
    def in_degree(self, node: Any) -> int: ...
    def out_degree(self, node: Any) -> int: ...


@runtime_checkable
class MutableValueGraphView(ValueGraphView, Protocol):
    """Opt-in: structural mutation of a value graph."""

    def add_node(self, node: Any) -> bool: ...
    def put_edge_value(self, node_u: Any, node_v: Any, value: Any) -> Any | None: ...
    def remove_node(self, node: Any) -> bool: ...
    def remove_edge(self, node_u: Any, node_v: Any) -> Any | None: ...


@runtime_checkable
class WeightedGraph(Protocol):
    """General-purpose weighted graph contract exposed by adapters.

    Edges are identified by ``EndpointPair``.  Read-only implementations
    raise ``UnsupportedOperationError`` from every write method.
    """

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def vertex_set(self) -> AbstractSet[Any]: ...
    def edge_set(self) -> AbstractSet[EndpointPair]: ...
    def contains_vertex(self, vertex: Any) -> bool: ...
    def contains_edge(self, edge: EndpointPair) -> bool: ...
    def contains_edge_between(self, source: Any, target: Any) -> bool: ...
    def get_edge(self, source: Any, target: Any) -> EndpointPair | None: ...
    def get_all_edges(self, source: Any, target: Any) -> set[EndpointPair] | None: ...
    def get_edge_source(self, edge: EndpointPair) -> Any: ...
    def get_edge_target(self, edge: EndpointPair) -> Any: ...
    def get_edge_weight(self, edge: EndpointPair) -> float: ...
    def edges_of(self, vertex: Any) -> set[EndpointPair]: ...
    def incoming_edges_of(self, vertex: Any) -> set[EndpointPair]: ...
    def outgoing_edges_of(self, vertex: Any) -> set[EndpointPair]: ...
    def degree_of(self, vertex: Any) -> int: ...
    def in_degree_of(self, vertex: Any) -> int: ...
    def out_degree_of(self, vertex: Any) -> int: ...
    def get_type(self) -> GraphType: ...

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: Any) -> bool: ...
    def add_edge(self, source: Any, target: Any, edge: EndpointPair | None = None) -> Any: ...
    def remove_vertex(self, vertex: Any) -> bool: ...
    def remove_edge(self, edge_or_source: Any, target: Any = None) -> Any: ...
    def remove_all_edges(self, edges: Any) -> bool: ...
    def remove_all_vertices(self, vertices: Any) -> bool: ...
    def set_edge_weight(self, edge: EndpointPair, weight: float) -> None: ...


@runtime_checkable
class SupportsClone(Protocol):
    """Opt-in: independent structural clone."""

    def clone(self) -> Any: ...


@runtime_checkable
class SupportsSerialization(Protocol):
    """Opt-in: byte-stream persistence."""

    def write_to(self, stream: BinaryIO) -> None: ...
    def to_bytes(self) -> bytes: ...
