"""Rustworkx-backed value graphs — mutable builder and immutable snapshot."""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

import rustworkx

from valuegraph.exceptions import NoSuchNodeError
from valuegraph.graph.types import EndpointPair

if TYPE_CHECKING:
    from collections.abc import Iterator

    from valuegraph.graph.protocols import ValueGraphView


class _EdgeSet(Set):
    """Live, read-only set of the edges of a rustworkx value graph."""

    __slots__ = ("_owner",)

    def __init__(self, owner: _RustworkxValueGraph) -> None:
        self._owner = owner

    def __contains__(self, edge: object) -> bool:
        if not isinstance(edge, EndpointPair) or edge.is_ordered != self._owner.is_directed:
            return False
        return self._owner.has_edge_connecting(edge.node_u, edge.node_v)

    def __iter__(self) -> Iterator[EndpointPair]:
        owner = self._owner
        for src_idx, tgt_idx in owner._graph.edge_list():
            yield owner._pair(owner._idx_to_node[src_idx], owner._idx_to_node[tgt_idx])

    def __len__(self) -> int:
        return self._owner._graph.num_edges()

    def __repr__(self) -> str:
        return f"{{{', '.join(repr(e) for e in self)}}}"


class _RustworkxValueGraph:
    """Shared read path over a ``rustworkx.PyDiGraph`` or ``rustworkx.PyGraph``.

    Nodes are arbitrary hashable objects mapped to rustworkx indices; the
    edge payload is the caller's value.  At most one edge joins any ordered
    (directed) or unordered (undirected) node pair.
    """

    def __init__(self, *, directed: bool, allows_self_loops: bool) -> None:
        self._directed = directed
        self._allows_self_loops = allows_self_loops
        self._graph: rustworkx.PyDiGraph | rustworkx.PyGraph = (
            rustworkx.PyDiGraph(multigraph=False)
            if directed
            else rustworkx.PyGraph(multigraph=False)
        )
        self._node_to_idx: dict[Any, int] = {}
        self._idx_to_node: dict[int, Any] = {}

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def is_directed(self) -> bool:
        return self._directed

    @property
    def allows_self_loops(self) -> bool:
        return self._allows_self_loops

    # ------------------------------------------------------------------
    # Nodes and edges
    # ------------------------------------------------------------------

    def nodes(self) -> Set[Any]:
        """Live read-only view of the nodes, in insertion order."""
        return self._node_to_idx.keys()

    def edges(self) -> Set[EndpointPair]:
        """Live read-only view of the edges, in insertion order."""
        return _EdgeSet(self)

    def has_edge_connecting(self, node_u: Any, node_v: Any) -> bool:
        """Return ``True`` if the edge exists.  ``False`` if nodes are missing."""
        u_idx = self._node_to_idx.get(node_u)
        v_idx = self._node_to_idx.get(node_v)
        if u_idx is None or v_idx is None:
            return False
        return self._graph.has_edge(u_idx, v_idx)

    def edge_value(self, node_u: Any, node_v: Any) -> Any | None:
        """Value of the edge between the nodes, or ``None`` if there is no edge."""
        if not self.has_edge_connecting(node_u, node_v):
            return None
        return self._graph.get_edge_data(self._node_to_idx[node_u], self._node_to_idx[node_v])

    # ------------------------------------------------------------------
    # Adjacency
    # ------------------------------------------------------------------

    def successors(self, node: Any) -> frozenset[Any]:
        idx = self._require_node(node)
        if self._directed:
            indices = self._graph.successor_indices(idx)
        else:
            indices = self._graph.neighbors(idx)
        return frozenset(self._idx_to_node[i] for i in indices)

    def predecessors(self, node: Any) -> frozenset[Any]:
        idx = self._require_node(node)
        if self._directed:
            indices = self._graph.predecessor_indices(idx)
        else:
            indices = self._graph.neighbors(idx)
        return frozenset(self._idx_to_node[i] for i in indices)

    def incident_edges(self, node: Any) -> frozenset[EndpointPair]:
        """Edges touching *node*, including a self-loop if present."""
        idx = self._require_node(node)
        if self._directed:
            pairs = [
                EndpointPair.ordered(self._idx_to_node[s], self._idx_to_node[t])
                for s, t, _ in [*self._graph.in_edges(idx), *self._graph.out_edges(idx)]
            ]
            return frozenset(pairs)
        result = {
            EndpointPair.unordered(node, self._idx_to_node[n])
            for n in self._graph.neighbors(idx)
        }
        if self._graph.has_edge(idx, idx):
            result.add(EndpointPair.unordered(node, node))
        return frozenset(result)

    def degree(self, node: Any) -> int:
        """Number of edge ends at *node*; a self-loop counts twice."""
        idx = self._require_node(node)
        if self._directed:
            return self._graph.in_degree(idx) + self._graph.out_degree(idx)
        others = sum(1 for n in self._graph.neighbors(idx) if n != idx)
        return others + (2 if self._graph.has_edge(idx, idx) else 0)

    def in_degree(self, node: Any) -> int:
        if not self._directed:
            return self.degree(node)
        return self._graph.in_degree(self._require_node(node))

    def out_degree(self, node: Any) -> int:
        if not self._directed:
            return self.degree(node)
        return self._graph.out_degree(self._require_node(node))

    # ------------------------------------------------------------------
    # Graph-level
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()

    def edge_items(self) -> Iterator[tuple[EndpointPair, Any]]:
        """Yield ``(pair, value)`` for every edge in insertion order."""
        for src_idx, tgt_idx, value in self._graph.weighted_edge_list():
            yield self._pair(self._idx_to_node[src_idx], self._idx_to_node[tgt_idx]), value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _RustworkxValueGraph):
            return NotImplemented
        return (
            self._directed == other._directed
            and set(self.nodes()) == set(other.nodes())
            and dict(self.edge_items()) == dict(other.edge_items())
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        kind = "directed" if self._directed else "undirected"
        return (
            f"{type(self).__name__}({kind}, nodes={self.node_count}, edges={self.edge_count})"
        )

    # ------------------------------------------------------------------
    # Internal mutation (public only on MutableValueGraph)
    # ------------------------------------------------------------------

    def _add_node(self, node: Any) -> bool:
        if node in self._node_to_idx:
            return False
        idx = self._graph.add_node(node)
        self._node_to_idx[node] = idx
        self._idx_to_node[idx] = node
        return True

    def _put_edge_value(self, node_u: Any, node_v: Any, value: Any) -> Any | None:
        if node_u == node_v and not self._allows_self_loops:
            msg = f"Cannot add self-loop on node {node_u!r}; graph does not allow self-loops"
            raise ValueError(msg)
        self._add_node(node_u)
        self._add_node(node_v)
        u_idx = self._node_to_idx[node_u]
        v_idx = self._node_to_idx[node_v]
        if self._graph.has_edge(u_idx, v_idx):
            previous = self._graph.get_edge_data(u_idx, v_idx)
            self._graph.update_edge(u_idx, v_idx, value)
            return previous
        self._graph.add_edge(u_idx, v_idx, value)
        return None

    def _remove_node(self, node: Any) -> bool:
        idx = self._node_to_idx.pop(node, None)
        if idx is None:
            return False
        self._graph.remove_node(idx)
        del self._idx_to_node[idx]
        return True

    def _remove_edge(self, node_u: Any, node_v: Any) -> Any | None:
        if not self.has_edge_connecting(node_u, node_v):
            return None
        u_idx = self._node_to_idx[node_u]
        v_idx = self._node_to_idx[node_v]
        previous = self._graph.get_edge_data(u_idx, v_idx)
        self._graph.remove_edge(u_idx, v_idx)
        return previous

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _pair(self, node_u: Any, node_v: Any) -> EndpointPair:
        return EndpointPair(node_u, node_v, self._directed)

    def _require_node(self, node: Any) -> int:
        """Return the rustworkx index for *node*, or raise ``NoSuchNodeError``."""
        try:
            return self._node_to_idx[node]
        except KeyError:
            msg = f"Node not found: {node!r}"
            raise NoSuchNodeError(msg) from None

    def _copy_from(self, view: ValueGraphView) -> None:
        for node in view.nodes():
            self._add_node(node)
        for edge in view.edges():
            value = view.edge_value(edge.node_u, edge.node_v)
            self._put_edge_value(edge.node_u, edge.node_v, value)


class MutableValueGraph(_RustworkxValueGraph):
    """Value graph that accepts structural mutation.

    Used as a scratch builder; call :meth:`freeze` to obtain an
    :class:`ImmutableValueGraph` snapshot.
    """

    def add_node(self, node: Any) -> bool:
        """Add *node*.  Returns ``False`` if it was already present."""
        return self._add_node(node)

    def put_edge_value(self, node_u: Any, node_v: Any, value: Any) -> Any | None:
        """Add or replace the edge value.  Returns the previous value, if any.

        Auto-creates missing endpoint nodes.  Raises ``ValueError`` for a
        self-loop when the graph does not allow them.
        """
        return self._put_edge_value(node_u, node_v, value)

    def remove_node(self, node: Any) -> bool:
        """Remove *node* and its incident edges.  Returns ``False`` if absent."""
        return self._remove_node(node)

    def remove_edge(self, node_u: Any, node_v: Any) -> Any | None:
        """Remove the edge and return its value, or ``None`` if absent."""
        return self._remove_edge(node_u, node_v)

    def freeze(self) -> ImmutableValueGraph:
        """Return an immutable snapshot; later mutation here does not affect it."""
        return ImmutableValueGraph.copy_of(self)


class ImmutableValueGraph(_RustworkxValueGraph):
    """Value graph whose topology and values never change after construction."""

    @classmethod
    def copy_of(cls, view: ValueGraphView) -> ImmutableValueGraph:
        """Immutable copy of *view*.  Returns *view* itself if already immutable."""
        if isinstance(view, ImmutableValueGraph):
            return view
        graph = cls(directed=view.is_directed, allows_self_loops=view.allows_self_loops)
        graph._copy_from(view)
        return graph


@dataclass(frozen=True, slots=True)
class ValueGraphBuilder:
    """Fluent factory for :class:`MutableValueGraph`.

    Example::

        graph = ValueGraphBuilder.directed().allowing_self_loops(True).build()
    """

    is_directed: bool
    allows_self_loops: bool = False

    @classmethod
    def directed(cls) -> ValueGraphBuilder:
        return cls(is_directed=True)

    @classmethod
    def undirected(cls) -> ValueGraphBuilder:
        return cls(is_directed=False)

    @classmethod
    def from_graph(cls, view: ValueGraphView) -> ValueGraphBuilder:
        """Builder matching the shape (not the contents) of *view*."""
        return cls(is_directed=view.is_directed, allows_self_loops=view.allows_self_loops)

    def allowing_self_loops(self, allowed: bool) -> ValueGraphBuilder:
        return replace(self, allows_self_loops=allowed)

    def build(self) -> MutableValueGraph:
        return MutableValueGraph(
            directed=self.is_directed, allows_self_loops=self.allows_self_loops,
        )


def copy_of(view: ValueGraphView) -> MutableValueGraph:
    """Mutable structural copy of *view*: same shape, nodes, edges and values.

    Nodes and edges are re-inserted in the view's iteration order.
    """
    graph = ValueGraphBuilder.from_graph(view).build()
    graph._copy_from(view)
    return graph
