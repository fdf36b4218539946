"""BaseValueGraphAdapter — shared read path of value graph adapters."""

from __future__ import annotations

import pickle
from collections.abc import Set
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from valuegraph.config import AdapterOptions
from valuegraph.exceptions import ConverterNotPersistableError, NoSuchEdgeError
from valuegraph.graph.types import EndpointPair, GraphType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from valuegraph.graph.protocols import ValueGraphView

V = TypeVar("V")
W = TypeVar("W")


class _ReadOnlySetView(Set):
    """Live read-only set over whatever *source* currently returns."""

    __slots__ = ("_source",)

    def __init__(self, source: Callable[[], Set[Any]]) -> None:
        self._source = source

    def __contains__(self, item: object) -> bool:
        return item in self._source()

    def __iter__(self) -> Iterator[Any]:
        return iter(self._source())

    def __len__(self) -> int:
        return len(self._source())

    def __repr__(self) -> str:
        return f"{{{', '.join(repr(x) for x in self)}}}"


class BaseValueGraphAdapter(Generic[V, W]):
    """Weighted graph view over a value graph.

    Edges are identified by :class:`EndpointPair`; weights are derived by
    applying *value_converter* to the value stored on each edge.  All queries
    delegate to the wrapped *value_graph*; nothing is copied.

    Concurrent reads are safe only if the wrapped graph and the converter
    are themselves safe for concurrent reads.
    """

    def __init__(
        self,
        value_graph: ValueGraphView,
        value_converter: Callable[[W], float],
        *,
        options: AdapterOptions | None = None,
    ) -> None:
        self._options = options or AdapterOptions()
        if not callable(value_converter):
            msg = f"value_converter must be callable, got {type(value_converter).__name__}"
            raise TypeError(msg)
        if self._options.check_converter:
            _check_persistable(value_converter, self._options.pickle_protocol)
        self._value_graph = value_graph
        self._value_converter = value_converter
        self._vertex_set_view: _ReadOnlySetView | None = None
        self._edge_set_view: _ReadOnlySetView | None = None

    @property
    def value_graph(self) -> ValueGraphView:
        """The wrapped value graph."""
        return self._value_graph

    @property
    def value_converter(self) -> Callable[[W], float]:
        return self._value_converter

    @property
    def options(self) -> AdapterOptions:
        return self._options

    # ------------------------------------------------------------------
    # Vertex and edge sets
    # ------------------------------------------------------------------

    def vertex_set(self) -> Set[V]:
        """Live read-only view of the vertices."""
        if self._vertex_set_view is None:
            self._vertex_set_view = _ReadOnlySetView(lambda: self._value_graph.nodes())
        return self._vertex_set_view

    def edge_set(self) -> Set[EndpointPair]:
        """Live read-only view of the edges."""
        if self._edge_set_view is None:
            self._edge_set_view = _ReadOnlySetView(lambda: self._value_graph.edges())
        return self._edge_set_view

    def contains_vertex(self, vertex: V) -> bool:
        """Return ``True`` if *vertex* is in the graph.  Unhashable values never are."""
        try:
            return vertex in self._value_graph.nodes()
        except TypeError:
            return False

    def contains_edge(self, edge: EndpointPair) -> bool:
        """Return ``True`` if *edge* is in the graph.

        A pair whose orderedness does not match the graph's directedness is
        never contained.
        """
        if not isinstance(edge, EndpointPair) or edge.is_ordered != self._value_graph.is_directed:
            return False
        return self._value_graph.has_edge_connecting(edge.node_u, edge.node_v)

    def contains_edge_between(self, source: V, target: V) -> bool:
        return self._value_graph.has_edge_connecting(source, target)

    def get_edge(self, source: V, target: V) -> EndpointPair | None:
        """The edge from *source* to *target*, or ``None``."""
        if not self._value_graph.has_edge_connecting(source, target):
            return None
        return self._pair(source, target)

    def get_all_edges(self, source: V, target: V) -> set[EndpointPair] | None:
        """All edges between the vertices: ``None`` if either is absent."""
        nodes = self._value_graph.nodes()
        if source not in nodes or target not in nodes:
            return None
        edge = self.get_edge(source, target)
        return {edge} if edge is not None else set()

    def get_edge_source(self, edge: EndpointPair) -> V:
        self._require_edge(edge)
        return edge.node_u

    def get_edge_target(self, edge: EndpointPair) -> V:
        self._require_edge(edge)
        return edge.node_v

    def get_edge_weight(self, edge: EndpointPair) -> float:
        """Weight of *edge*: the converter applied to the edge's value.

        Raises ``NoSuchEdgeError`` if the edge is absent.
        """
        self._require_edge(edge)
        value = self._value_graph.edge_value(edge.node_u, edge.node_v)
        return self._value_converter(value)

    # ------------------------------------------------------------------
    # Incidence and degree
    # ------------------------------------------------------------------

    def edges_of(self, vertex: V) -> set[EndpointPair]:
        """All edges touching *vertex*.  Raises ``NoSuchNodeError`` if absent."""
        return set(self._value_graph.incident_edges(vertex))

    def incoming_edges_of(self, vertex: V) -> set[EndpointPair]:
        if not self._value_graph.is_directed:
            return self.edges_of(vertex)
        return {
            EndpointPair.ordered(pred, vertex) for pred in self._value_graph.predecessors(vertex)
        }

    def outgoing_edges_of(self, vertex: V) -> set[EndpointPair]:
        if not self._value_graph.is_directed:
            return self.edges_of(vertex)
        return {
            EndpointPair.ordered(vertex, succ) for succ in self._value_graph.successors(vertex)
        }

    def degree_of(self, vertex: V) -> int:
        """Number of edge ends at *vertex*; a self-loop counts twice."""
        return self._value_graph.degree(vertex)

    def in_degree_of(self, vertex: V) -> int:
        return self._value_graph.in_degree(vertex)

    def out_degree_of(self, vertex: V) -> int:
        return self._value_graph.out_degree(vertex)

    # ------------------------------------------------------------------
    # Graph-level
    # ------------------------------------------------------------------

    def get_type(self) -> GraphType:
        """Shape of the wrapped graph: simple, weighted, modifiable."""
        return GraphType.for_view(
            directed=self._value_graph.is_directed,
            allows_self_loops=self._value_graph.allows_self_loops,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(vertices={len(self.vertex_set())}, "
            f"edges={len(self.edge_set())})"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _pair(self, source: V, target: V) -> EndpointPair:
        return EndpointPair.of(source, target, directed=self._value_graph.is_directed)

    def _require_edge(self, edge: EndpointPair) -> None:
        if not self.contains_edge(edge):
            msg = f"No such edge in graph: {edge!r}"
            raise NoSuchEdgeError(msg)


def _check_persistable(converter: Callable[..., float], protocol: int) -> None:
    """Raise ``ConverterNotPersistableError`` if *converter* cannot be pickled."""
    try:
        pickle.dumps(converter, protocol=protocol)
    except (pickle.PicklingError, AttributeError, TypeError) as e:
        msg = (
            f"Weight converter {converter!r} cannot be pickled; use a module-level "
            "function or pass AdapterOptions(check_converter=False)"
        )
        raise ConverterNotPersistableError(msg) from e
