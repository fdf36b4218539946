"""ImmutableValueGraphAdapter — read-only weighted graph over an immutable value graph."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any, BinaryIO, TypeVar

from valuegraph.adapters._base import BaseValueGraphAdapter, V, W
from valuegraph.exceptions import (
    GraphFormatError,
    StructuralCopyError,
    UnsupportedGraphShapeError,
    UnsupportedOperationError,
)
from valuegraph.graph._rustworkx import ImmutableValueGraph, ValueGraphBuilder, copy_of
from valuegraph.serialization import GraphReader, GraphWriter

if TYPE_CHECKING:
    from collections.abc import Callable

    from valuegraph.config import AdapterOptions
    from valuegraph.graph.protocols import ValueGraphView
    from valuegraph.graph.types import GraphType

logger = logging.getLogger(__name__)

GRAPH_IS_IMMUTABLE = "Graph is immutable"

MUTATING_OPERATIONS = (
    "add_vertex",
    "add_edge",
    "remove_vertex",
    "remove_edge",
    "remove_all_edges",
    "remove_all_vertices",
    "set_edge_weight",
)

_C = TypeVar("_C", bound=type)


def _rejecting(name: str) -> Callable[..., Any]:
    def method(self: Any, *args: Any, **kwargs: Any) -> Any:
        raise UnsupportedOperationError(GRAPH_IS_IMMUTABLE)

    method.__name__ = name
    method.__doc__ = "Always raises ``UnsupportedOperationError``; the graph is immutable."
    return method


def read_only(*operations: str) -> Callable[[_C], _C]:
    """Class decorator: make each named method raise ``UnsupportedOperationError``."""

    def decorate(cls: _C) -> _C:
        for name in operations:
            method = _rejecting(name)
            method.__qualname__ = f"{cls.__qualname__}.{name}"
            setattr(cls, name, method)
        return cls

    return decorate


@read_only(*MUTATING_OPERATIONS)
class ImmutableValueGraphAdapter(BaseValueGraphAdapter[V, W]):
    """Unmodifiable weighted graph over an :class:`ImmutableValueGraph`.

    Every mutating method raises ``UnsupportedOperationError`` before any
    side effect.  Weights come from the converter, so the graph is weighted.

    Example::

        value_graph = ValueGraphBuilder.directed().allowing_self_loops(True).build()
        value_graph.put_edge_value("v1", "v2", MyValue(5.0))
        graph = ImmutableValueGraphAdapter(
            ImmutableValueGraph.copy_of(value_graph),
            operator.attrgetter("value"),
        )
        graph.get_edge_weight(EndpointPair.ordered("v1", "v2"))  # 5.0

    The converter must be picklable for :meth:`write_to` to succeed; this is
    checked at construction unless ``AdapterOptions.check_converter`` is off.

    Any other view passed in is snapshotted with
    :meth:`ImmutableValueGraph.copy_of`, so later changes to it are not seen.
    """

    def __init__(
        self,
        value_graph: ValueGraphView,
        value_converter: Callable[[W], float],
        *,
        options: AdapterOptions | None = None,
    ) -> None:
        super().__init__(
            ImmutableValueGraph.copy_of(value_graph), value_converter, options=options
        )

    def get_type(self) -> GraphType:
        return super().get_type().as_unmodifiable()

    # ------------------------------------------------------------------
    # Clone
    # ------------------------------------------------------------------

    def clone(self) -> ImmutableValueGraphAdapter[V, W]:
        """Independent copy owning a freshly built value graph.

        The converter is shared.  Raises ``StructuralCopyError`` if the copy
        of the wrapped graph fails.
        """
        try:
            value_graph = ImmutableValueGraph.copy_of(copy_of(self._value_graph))
        except Exception as e:
            logger.error(
                "Structural copy failed for %s: %s", type(self).__name__, e, exc_info=True
            )
            msg = f"Cannot copy value graph: {e}"
            raise StructuralCopyError(msg) from e
        new = type(self)(value_graph, self._value_converter, options=self._options)
        logger.debug("Cloned graph with %d vertices", len(new.vertex_set()))
        return new

    __copy__ = clone

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def write_to(self, stream: BinaryIO) -> None:
        """Write the converter, graph type, vertices and valued edges to *stream*.

        Stream errors propagate; a failure part-way leaves *stream* in an
        indeterminate state.
        """
        writer = GraphWriter(stream, protocol=self._options.pickle_protocol)
        writer.write_header()
        writer.write_object(self._value_converter)
        writer.write_type(self.get_type())

        vertices = self.vertex_set()
        writer.write_int(len(vertices))
        for vertex in vertices:
            writer.write_object(vertex)

        edges = self.edge_set()
        writer.write_int(len(edges))
        for edge in edges:
            writer.write_object(edge.node_u)
            writer.write_object(edge.node_v)
            writer.write_object(self._value_graph.edge_value(edge.node_u, edge.node_v))

        logger.debug("Wrote graph with %d vertices and %d edges", len(vertices), len(edges))

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write_to(buffer)
        return buffer.getvalue()

    @classmethod
    def read_from(
        cls,
        stream: BinaryIO,
        *,
        options: AdapterOptions | None = None,
    ) -> ImmutableValueGraphAdapter[Any, Any]:
        """Rebuild an adapter from a stream written by :meth:`write_to`.

        Raises ``UnsupportedGraphShapeError`` if the persisted type allows
        multiple edges or is mixed, and ``GraphFormatError`` on malformed
        input.  No adapter is produced on failure.
        """
        reader = GraphReader(stream)
        reader.read_header()
        value_converter = reader.read_object()
        graph_type = reader.read_type()
        if graph_type.is_mixed or graph_type.allows_multiple_edges:
            msg = f"Graph type not supported: {graph_type}"
            raise UnsupportedGraphShapeError(msg)

        if graph_type.directed:
            builder = ValueGraphBuilder.directed()
        else:
            builder = ValueGraphBuilder.undirected()
        scratch = builder.allowing_self_loops(graph_type.allows_self_loops).build()

        n = reader.read_int()
        for _ in range(n):
            scratch.add_node(reader.read_object())

        m = reader.read_int()
        for _ in range(m):
            source = reader.read_object()
            target = reader.read_object()
            value = reader.read_object()
            try:
                scratch.put_edge_value(source, target, value)
            except ValueError as e:
                msg = f"Invalid edge {source!r} - {target!r} in stream: {e}"
                raise GraphFormatError(msg) from e

        logger.debug("Read graph with %d vertices and %d edges", n, m)
        return cls(scratch.freeze(), value_converter, options=options)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        options: AdapterOptions | None = None,
    ) -> ImmutableValueGraphAdapter[Any, Any]:
        return cls.read_from(io.BytesIO(data), options=options)

    def __reduce__(self) -> tuple[Any, ...]:
        return (_restore, (type(self), self.to_bytes()))


def _restore(
    cls: type[ImmutableValueGraphAdapter[Any, Any]], data: bytes,
) -> ImmutableValueGraphAdapter[Any, Any]:
    """Unpickling hook: rebuild the adapter from its wire form."""
    return cls.from_bytes(data)
