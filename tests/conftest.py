"""Shared fixtures for valuegraph tests."""

from __future__ import annotations

import pytest

from valuegraph.adapters import ImmutableValueGraphAdapter
from valuegraph.graph import ImmutableValueGraph, MutableValueGraph, ValueGraphBuilder


@pytest.fixture
def directed_source() -> MutableValueGraph:
    """Mutable directed graph: v1 -> v2 (5.0), v2 -> v3 (2.5), v3 -> v3 (1.0)."""
    g = ValueGraphBuilder.directed().allowing_self_loops(True).build()
    g.add_node("v1")
    g.add_node("v2")
    g.add_node("v3")
    g.put_edge_value("v1", "v2", 5.0)
    g.put_edge_value("v2", "v3", 2.5)
    g.put_edge_value("v3", "v3", 1.0)
    return g


@pytest.fixture
def undirected_source() -> MutableValueGraph:
    """Mutable undirected graph: a - b (1.5), b - c (4.0), isolated d."""
    g = ValueGraphBuilder.undirected().build()
    for node in ("a", "b", "c", "d"):
        g.add_node(node)
    g.put_edge_value("a", "b", 1.5)
    g.put_edge_value("b", "c", 4.0)
    return g


@pytest.fixture
def directed_adapter(directed_source: MutableValueGraph) -> ImmutableValueGraphAdapter:
    """Adapter over a frozen copy of ``directed_source`` with identity weights."""
    return ImmutableValueGraphAdapter(ImmutableValueGraph.copy_of(directed_source), float)


@pytest.fixture
def undirected_adapter(undirected_source: MutableValueGraph) -> ImmutableValueGraphAdapter:
    """Adapter over a frozen copy of ``undirected_source`` with identity weights."""
    return ImmutableValueGraphAdapter(undirected_source.freeze(), float)
