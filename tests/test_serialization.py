"""Tests for the wire codec and adapter serialization round trips."""

from __future__ import annotations

import io
import pickle
import struct
from typing import TYPE_CHECKING, Any

import pytest

from valuegraph.adapters import ImmutableValueGraphAdapter
from valuegraph.config import AdapterOptions
from valuegraph.exceptions import (
    GraphFormatError,
    UnsupportedGraphShapeError,
)
from valuegraph.graph import EndpointPair, GraphType, ValueGraphBuilder
from valuegraph.serialization import FORMAT_VERSION, MAGIC, GraphReader, GraphWriter

if TYPE_CHECKING:
    from valuegraph.graph import MutableValueGraph


# ======================================================================
# Helpers
# ======================================================================


def _half(value: float) -> float:
    return value / 2.0


def _weights(graph: ImmutableValueGraphAdapter) -> dict[EndpointPair, float]:
    return {e: graph.get_edge_weight(e) for e in graph.edge_set()}


def _stream_with_type(graph_type: GraphType) -> io.BytesIO:
    """Stream holding a header, a converter and *graph_type*, then an empty graph."""
    buffer = io.BytesIO()
    writer = GraphWriter(buffer)
    writer.write_header()
    writer.write_object(float)
    writer.write_type(graph_type)
    writer.write_int(0)
    writer.write_int(0)
    buffer.seek(0)
    return buffer


class _FailingWriteStream:
    """Binary sink that fails after a number of writes."""

    def __init__(self, allowed_writes: int) -> None:
        self._remaining = allowed_writes
        self.written = bytearray()

    def write(self, data: bytes) -> int:
        if self._remaining == 0:
            msg = "disk full"
            raise OSError(msg)
        self._remaining -= 1
        self.written.extend(data)
        return len(data)


class _FailingReadStream:
    def read(self, size: int = -1) -> bytes:
        msg = "connection reset"
        raise OSError(msg)


class _TrickleStream:
    """Returns at most one byte per read, to exercise short reads."""

    def __init__(self, data: bytes) -> None:
        self._buffer = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._buffer.read(min(size, 1))


# ======================================================================
# Codec primitives
# ======================================================================


class TestGraphWriterReader:
    def test_header(self) -> None:
        buffer = io.BytesIO()
        GraphWriter(buffer).write_header()
        assert buffer.getvalue() == MAGIC + bytes([FORMAT_VERSION])
        assert GraphReader(io.BytesIO(buffer.getvalue())).read_header() == FORMAT_VERSION

    def test_int_is_big_endian_int32(self) -> None:
        buffer = io.BytesIO()
        GraphWriter(buffer).write_int(258)
        assert buffer.getvalue() == b"\x00\x00\x01\x02"

    def test_int_overflow(self) -> None:
        with pytest.raises(OverflowError):
            GraphWriter(io.BytesIO()).write_int(2**31)

    def test_negative_int_refused(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            GraphWriter(io.BytesIO()).write_int(-1)

    def test_object_is_length_prefixed(self) -> None:
        buffer = io.BytesIO()
        GraphWriter(buffer, protocol=4).write_object("v1")
        data = buffer.getvalue()
        (length,) = struct.unpack(">I", data[:4])
        assert length == len(data) - 4
        assert pickle.loads(data[4:]) == "v1"

    def test_read_object(self) -> None:
        buffer = io.BytesIO()
        GraphWriter(buffer).write_object({"unit": "m"})
        buffer.seek(0)
        assert GraphReader(buffer).read_object() == {"unit": "m"}

    def test_type_record(self) -> None:
        t = GraphType.for_view(directed=False, allows_self_loops=True)
        buffer = io.BytesIO()
        GraphWriter(buffer).write_type(t)
        assert len(buffer.getvalue()) == 1
        buffer.seek(0)
        assert GraphReader(buffer).read_type() == t

    def test_short_reads_are_joined(self) -> None:
        buffer = io.BytesIO()
        GraphWriter(buffer).write_object("a longer vertex name")
        reader = GraphReader(_TrickleStream(buffer.getvalue()))  # type: ignore[arg-type]
        assert reader.read_object() == "a longer vertex name"

    def test_bad_magic(self) -> None:
        with pytest.raises(GraphFormatError, match="Not a value graph stream"):
            GraphReader(io.BytesIO(b"JAVA\x01")).read_header()

    def test_bad_version(self) -> None:
        with pytest.raises(GraphFormatError, match="Unsupported format version"):
            GraphReader(io.BytesIO(MAGIC + b"\x09")).read_header()

    def test_negative_count(self) -> None:
        with pytest.raises(GraphFormatError, match="Negative count"):
            GraphReader(io.BytesIO(struct.pack(">i", -5))).read_int()

    def test_end_of_stream(self) -> None:
        with pytest.raises(GraphFormatError, match="Unexpected end of stream"):
            GraphReader(io.BytesIO(b"\x00\x00")).read_int()

    def test_corrupt_pickle(self) -> None:
        payload = b"\x80\x04not a pickle"
        data = struct.pack(">I", len(payload)) + payload
        with pytest.raises(GraphFormatError, match="Corrupt object record"):
            GraphReader(io.BytesIO(data)).read_object()

    @pytest.mark.parametrize(
        "payload",
        [b"cnosuchmodule_xyz\nfoo\n.", b"cbuiltins\nno_such_builtin_xyz\n."],
        ids=["unknown-module", "unknown-attribute"],
    )
    def test_unresolvable_global(self, payload: bytes) -> None:
        data = struct.pack(">I", len(payload)) + payload
        with pytest.raises(GraphFormatError, match="Corrupt object record"):
            GraphReader(io.BytesIO(data)).read_object()

    def test_unresolvable_converter_in_graph_stream(self) -> None:
        payload = b"cnosuchmodule_xyz\nfoo\n."
        data = MAGIC + bytes([FORMAT_VERSION]) + struct.pack(">I", len(payload)) + payload
        with pytest.raises(GraphFormatError) as excinfo:
            ImmutableValueGraphAdapter.from_bytes(data)
        assert isinstance(excinfo.value.__cause__, ImportError)


# ======================================================================
# Adapter round trips
# ======================================================================


class TestRoundTrip:
    def test_example_graph(self) -> None:
        g = ValueGraphBuilder.directed().allowing_self_loops(True).build()
        g.add_node("v1")
        g.add_node("v2")
        g.put_edge_value("v1", "v2", 5.0)
        graph = ImmutableValueGraphAdapter(g.freeze(), float)

        restored = ImmutableValueGraphAdapter.from_bytes(graph.to_bytes())

        assert set(restored.edge_set()) == {EndpointPair.ordered("v1", "v2")}
        assert restored.get_edge_weight(EndpointPair.ordered("v1", "v2")) == 5.0

    def test_directed_with_self_loop(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        restored = ImmutableValueGraphAdapter.from_bytes(directed_adapter.to_bytes())
        assert set(restored.vertex_set()) == set(directed_adapter.vertex_set())
        assert set(restored.edge_set()) == set(directed_adapter.edge_set())
        assert _weights(restored) == _weights(directed_adapter)
        assert restored.get_type() == directed_adapter.get_type()

    def test_undirected(self, undirected_adapter: ImmutableValueGraphAdapter) -> None:
        restored = ImmutableValueGraphAdapter.from_bytes(undirected_adapter.to_bytes())
        assert restored.get_type().undirected
        assert "d" in restored.vertex_set()
        assert _weights(restored) == _weights(undirected_adapter)

    def test_preserves_iteration_order(
        self, directed_adapter: ImmutableValueGraphAdapter
    ) -> None:
        restored = ImmutableValueGraphAdapter.from_bytes(directed_adapter.to_bytes())
        assert list(restored.vertex_set()) == list(directed_adapter.vertex_set())
        assert list(restored.edge_set()) == list(directed_adapter.edge_set())

    def test_empty_graph(self) -> None:
        graph = ImmutableValueGraphAdapter(ValueGraphBuilder.undirected().build().freeze(), float)
        restored = ImmutableValueGraphAdapter.from_bytes(graph.to_bytes())
        assert len(restored.vertex_set()) == 0
        assert len(restored.edge_set()) == 0

    def test_converter_is_persisted(self, directed_source: MutableValueGraph) -> None:
        graph = ImmutableValueGraphAdapter(directed_source.freeze(), _half)
        restored = ImmutableValueGraphAdapter.from_bytes(graph.to_bytes())
        assert restored.value_converter is _half
        assert restored.get_edge_weight(EndpointPair.ordered("v1", "v2")) == 2.5

    def test_restored_graph_is_immutable(
        self, directed_adapter: ImmutableValueGraphAdapter
    ) -> None:
        restored = ImmutableValueGraphAdapter.from_bytes(directed_adapter.to_bytes())
        assert not restored.get_type().modifiable
        assert not hasattr(restored.value_graph, "put_edge_value")

    def test_write_to_stream(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        buffer = io.BytesIO()
        directed_adapter.write_to(buffer)
        buffer.seek(0)
        restored = ImmutableValueGraphAdapter.read_from(buffer)
        assert _weights(restored) == _weights(directed_adapter)
        assert buffer.read() == b""

    def test_read_options(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        options = AdapterOptions(pickle_protocol=2)
        restored = ImmutableValueGraphAdapter.from_bytes(
            directed_adapter.to_bytes(), options=options
        )
        assert restored.options == options

    def test_pickle(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        restored = pickle.loads(pickle.dumps(directed_adapter))
        assert isinstance(restored, ImmutableValueGraphAdapter)
        assert _weights(restored) == _weights(directed_adapter)

    def test_pickle_matches_wire_format(
        self, directed_adapter: ImmutableValueGraphAdapter
    ) -> None:
        func, args = directed_adapter.__reduce__()
        assert args == (ImmutableValueGraphAdapter, directed_adapter.to_bytes())
        assert _weights(func(*args)) == _weights(directed_adapter)


# ======================================================================
# Wire layout
# ======================================================================


class TestWireLayout:
    def test_record_order(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        reader = GraphReader(io.BytesIO(directed_adapter.to_bytes()))
        reader.read_header()
        assert reader.read_object() is float
        assert reader.read_type() == directed_adapter.get_type()
        n = reader.read_int()
        assert [reader.read_object() for _ in range(n)] == ["v1", "v2", "v3"]
        m = reader.read_int()
        edges = [
            (reader.read_object(), reader.read_object(), reader.read_object())
            for _ in range(m)
        ]
        assert edges == [("v1", "v2", 5.0), ("v2", "v3", 2.5), ("v3", "v3", 1.0)]

    def test_persisted_type_is_unmodifiable(
        self, directed_adapter: ImmutableValueGraphAdapter
    ) -> None:
        reader = GraphReader(io.BytesIO(directed_adapter.to_bytes()))
        reader.read_header()
        reader.read_object()
        assert not reader.read_type().modifiable


# ======================================================================
# Rejected and malformed streams
# ======================================================================


class TestReadErrors:
    @pytest.mark.parametrize(
        "graph_type",
        [
            GraphType(directed=True, undirected=False, allows_multiple_edges=True),
            GraphType(directed=True, undirected=True),
            GraphType(directed=False, undirected=True, allows_multiple_edges=True),
        ],
    )
    def test_unsupported_shape(self, graph_type: GraphType) -> None:
        with pytest.raises(UnsupportedGraphShapeError, match="Graph type not supported"):
            ImmutableValueGraphAdapter.read_from(_stream_with_type(graph_type))

    def test_unsupported_shape_is_format_error(self) -> None:
        stream = _stream_with_type(GraphType(directed=True, undirected=True))
        with pytest.raises(GraphFormatError):
            ImmutableValueGraphAdapter.read_from(stream)

    def test_simple_shape_accepted(self) -> None:
        stream = _stream_with_type(GraphType(directed=True, undirected=False))
        graph = ImmutableValueGraphAdapter.read_from(stream)
        assert len(graph.vertex_set()) == 0

    def test_truncated(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        data = directed_adapter.to_bytes()
        with pytest.raises(GraphFormatError, match="Unexpected end of stream"):
            ImmutableValueGraphAdapter.from_bytes(data[:-3])

    def test_not_a_graph(self) -> None:
        with pytest.raises(GraphFormatError, match="Not a value graph stream"):
            ImmutableValueGraphAdapter.from_bytes(b"\xac\xed\x00\x05sr")

    def test_self_loop_in_loop_free_graph(self) -> None:
        buffer = io.BytesIO()
        writer = GraphWriter(buffer)
        writer.write_header()
        writer.write_object(float)
        writer.write_type(GraphType.for_view(directed=True, allows_self_loops=False))
        writer.write_int(1)
        writer.write_object("a")
        writer.write_int(1)
        writer.write_object("a")
        writer.write_object("a")
        writer.write_object(1.0)
        with pytest.raises(GraphFormatError, match="Invalid edge"):
            ImmutableValueGraphAdapter.from_bytes(buffer.getvalue())

    def test_read_error_propagates(self) -> None:
        with pytest.raises(OSError, match="connection reset"):
            ImmutableValueGraphAdapter.read_from(_FailingReadStream())  # type: ignore[arg-type]


# ======================================================================
# Write errors
# ======================================================================


class TestWriteErrors:
    def test_write_error_propagates(self, directed_adapter: ImmutableValueGraphAdapter) -> None:
        stream = _FailingWriteStream(allowed_writes=5)
        with pytest.raises(OSError, match="disk full"):
            directed_adapter.write_to(stream)  # type: ignore[arg-type]
        assert stream.written.startswith(MAGIC)

    def test_unpicklable_converter_fails_on_write(
        self, directed_source: MutableValueGraph
    ) -> None:
        graph = ImmutableValueGraphAdapter(
            directed_source.freeze(),
            lambda v: v,
            options=AdapterOptions(check_converter=False),
        )
        with pytest.raises((pickle.PicklingError, AttributeError, TypeError)):
            graph.to_bytes()

    def test_unpicklable_vertex_fails_on_write(self) -> None:
        g = ValueGraphBuilder.directed().build()
        g.add_node(_Unpicklable())
        graph = ImmutableValueGraphAdapter(g.freeze(), float)
        with pytest.raises(TypeError, match="not picklable"):
            graph.to_bytes()


class _Unpicklable:
    def __reduce__(self) -> Any:
        msg = "not picklable"
        raise TypeError(msg)
