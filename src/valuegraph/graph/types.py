"""Graph value types — edge identities and shape descriptors."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from valuegraph.exceptions import GraphFormatError

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True, eq=False)
class EndpointPair:
    """The two nodes identifying an edge.

    Ordered pairs (directed graphs) compare positionally, so
    ``(u, v) != (v, u)``.  Unordered pairs (undirected graphs) compare as
    two-element multisets, so ``(u, v) == (v, u)``.  An ordered pair never
    equals an unordered one.

    Attributes:
        node_u: First endpoint; the source when ordered.
        node_v: Second endpoint; the target when ordered.
        is_ordered: Whether the pair belongs to a directed graph.
    """

    node_u: Any
    node_v: Any
    is_ordered: bool = True

    @classmethod
    def ordered(cls, source: Any, target: Any) -> EndpointPair:
        """Pair for a directed edge *source* -> *target*."""
        return cls(source, target, True)

    @classmethod
    def unordered(cls, node_u: Any, node_v: Any) -> EndpointPair:
        """Pair for an undirected edge between *node_u* and *node_v*."""
        return cls(node_u, node_v, False)

    @classmethod
    def of(cls, node_u: Any, node_v: Any, *, directed: bool) -> EndpointPair:
        return cls(node_u, node_v, directed)

    @property
    def source(self) -> Any:
        """Source node.  Raises ``ValueError`` for unordered pairs."""
        if not self.is_ordered:
            msg = "Cannot call source() on an unordered EndpointPair"
            raise ValueError(msg)
        return self.node_u

    @property
    def target(self) -> Any:
        """Target node.  Raises ``ValueError`` for unordered pairs."""
        if not self.is_ordered:
            msg = "Cannot call target() on an unordered EndpointPair"
            raise ValueError(msg)
        return self.node_v

    def adjacent_node(self, node: Any) -> Any:
        """Return the endpoint opposite *node*."""
        if node == self.node_u:
            return self.node_v
        if node == self.node_v:
            return self.node_u
        msg = f"EndpointPair {self!r} does not contain node {node!r}"
        raise ValueError(msg)

    def __iter__(self) -> Iterator[Any]:
        yield self.node_u
        yield self.node_v

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EndpointPair):
            return NotImplemented
        if self.is_ordered != other.is_ordered:
            return False
        if self.node_u == other.node_u and self.node_v == other.node_v:
            return True
        if self.is_ordered:
            return False
        return self.node_u == other.node_v and self.node_v == other.node_u

    def __hash__(self) -> int:
        if self.is_ordered:
            return hash((True, self.node_u, self.node_v))
        return hash((False, frozenset((self.node_u, self.node_v))))

    def __repr__(self) -> str:
        if self.is_ordered:
            return f"<{self.node_u!r} -> {self.node_v!r}>"
        return f"[{self.node_u!r}, {self.node_v!r}]"


# Wire flag bits for GraphType
_DIRECTED = 0x01
_UNDIRECTED = 0x02
_SELF_LOOPS = 0x04
_MULTIPLE_EDGES = 0x08
_WEIGHTED = 0x10
_MODIFIABLE = 0x20
_ALL_FLAGS = _DIRECTED | _UNDIRECTED | _SELF_LOOPS | _MULTIPLE_EDGES | _WEIGHTED | _MODIFIABLE


@dataclass(frozen=True, slots=True)
class GraphType:
    """Read-only summary of a graph's shape.

    A graph that is both directed and undirected is *mixed*.

    Attributes:
        directed: Graph has directed edges.
        undirected: Graph has undirected edges.
        allows_self_loops: Edges from a node to itself are permitted.
        allows_multiple_edges: More than one edge per node pair is permitted.
        weighted: Edges carry numeric weights.
        modifiable: The graph accepts structural mutation.
    """

    directed: bool
    undirected: bool
    allows_self_loops: bool = False
    allows_multiple_edges: bool = False
    weighted: bool = False
    modifiable: bool = True

    @classmethod
    def for_view(cls, *, directed: bool, allows_self_loops: bool) -> GraphType:
        """Descriptor of a weighted simple graph over a value graph view."""
        return cls(
            directed=directed,
            undirected=not directed,
            allows_self_loops=allows_self_loops,
            allows_multiple_edges=False,
            weighted=True,
            modifiable=True,
        )

    @property
    def is_mixed(self) -> bool:
        return self.directed and self.undirected

    @property
    def is_simple(self) -> bool:
        """No self-loops and no multiple edges."""
        return not self.allows_self_loops and not self.allows_multiple_edges

    def as_unmodifiable(self) -> GraphType:
        return replace(self, modifiable=False)

    def as_modifiable(self) -> GraphType:
        return replace(self, modifiable=True)

    def as_weighted(self) -> GraphType:
        return replace(self, weighted=True)

    # ------------------------------------------------------------------
    # Wire form
    # ------------------------------------------------------------------

    def to_flags(self) -> int:
        """Pack the descriptor into a single flag byte."""
        flags = 0
        if self.directed:
            flags |= _DIRECTED
        if self.undirected:
            flags |= _UNDIRECTED
        if self.allows_self_loops:
            flags |= _SELF_LOOPS
        if self.allows_multiple_edges:
            flags |= _MULTIPLE_EDGES
        if self.weighted:
            flags |= _WEIGHTED
        if self.modifiable:
            flags |= _MODIFIABLE
        return flags

    @classmethod
    def from_flags(cls, flags: int) -> GraphType:
        """Unpack a flag byte written by :meth:`to_flags`.

        Raises ``GraphFormatError`` on unknown bits or when neither
        directedness bit is set.
        """
        if flags & ~_ALL_FLAGS:
            msg = f"Unknown graph type flags: {flags:#04x}"
            raise GraphFormatError(msg)
        if not flags & (_DIRECTED | _UNDIRECTED):
            msg = f"Graph type flags name no edge direction: {flags:#04x}"
            raise GraphFormatError(msg)
        return cls(
            directed=bool(flags & _DIRECTED),
            undirected=bool(flags & _UNDIRECTED),
            allows_self_loops=bool(flags & _SELF_LOOPS),
            allows_multiple_edges=bool(flags & _MULTIPLE_EDGES),
            weighted=bool(flags & _WEIGHTED),
            modifiable=bool(flags & _MODIFIABLE),
        )
