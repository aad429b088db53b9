"""Test helpers for black-box graph testing.

This module provides factories for raw nodes and edges, and builders
that go from those raw dicts to stores, processed graphs and sessions.
"""

from __future__ import annotations

from typing import Any

from constellations.graph.pipeline import ProcessedGraph, apply_mutations
from constellations.graph.store import GraphStore
from constellations.session import GraphSession


# === Raw Factories ===


def make_node(
    node_id: str,
    node_type: str = "lemma",
    label: str | None = None,
    line: int | None = None,
    col: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Factory for raw extractor nodes.

    Args:
        node_id: Node id.
        node_type: Artifact type.
        label: Optional label such as "VIII:3-2-3".
        line: Optional position.line_start.
        col: Optional position.col_start.
        **extra: Any further raw fields (content, proof, ...).

    Returns:
        Raw node dict ready for GraphStore.upsert_node().
    """
    node: dict[str, Any] = {"id": node_id, "type": node_type}
    if label is not None:
        node["label"] = label
    if line is not None or col is not None:
        position: dict[str, Any] = {}
        if line is not None:
            position["line_start"] = line
        if col is not None:
            position["col_start"] = col
        node["position"] = position
    node.update(extra)
    return node


def make_edge(source: str, target: str, dep: str = "used_in", **extra: Any) -> dict[str, Any]:
    """Factory for raw extractor edges (direction as the extractor wrote it)."""
    edge: dict[str, Any] = {"source": source, "target": target, "dependency_type": dep}
    edge.update(extra)
    return edge


def uses(prerequisite: str, dependent: str) -> dict[str, Any]:
    """Canonical edge: dependent uses prerequisite."""
    return make_edge(prerequisite, dependent, "used_in")


# === Builders ===


def build_store(nodes: list[dict], edges: list[dict] | None = None) -> GraphStore:
    store = GraphStore()
    for node in nodes:
        store.upsert_node(node)
    for edge in edges or []:
        store.add_edge(edge)
    return store


def build_graph(nodes: list[dict], edges: list[dict] | None = None) -> ProcessedGraph:
    """Build a store and apply mutations once."""
    return apply_mutations(build_store(nodes, edges))


def build_session(nodes: list[dict], edges: list[dict] | None = None) -> GraphSession:
    """Build a session with all nodes and edges ingested as one batch."""
    session = GraphSession()
    events = [{"type": "node", "data": n} for n in nodes]
    events += [{"type": "link", "data": e} for e in edges or []]
    session.ingest_many(events)
    return session


# === String Helpers ===


def ordered_ids(graph: ProcessedGraph) -> list[str]:
    """Node ids in reading order."""
    return [n.id for n in graph.nodes]


def entry_tuples(entries) -> list[tuple[str, str, str]]:
    """Adjacency entries as plain (s, t, dep) tuples."""
    return [(e.s, e.t, e.dep) for e in entries]
