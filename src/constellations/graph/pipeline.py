"""Mutation pipeline - recompute every derived structure from the store.

``apply_mutations`` is the single recomputation entry point. After any
batch of upserts and edge adds it re-sorts all nodes, rebuilds both
adjacency indices from the full edge set, and recomputes the type and
color partitions. Indices are rebuilt rather than patched; graphs hold
hundreds of nodes, not millions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from constellations.config.defaults import DEFAULT_CONFIG
from constellations.graph.GraphNode import GraphNode
from constellations.graph.mutations import BrokenReference
from constellations.graph.ordering import assign_order_indices
from constellations.graph.relations import AdjacencyEntry, DependencyType, Edge
from constellations.graph.store import GraphStore

logger = logging.getLogger(__name__)

AdjacencyIndex = Mapping[str, Sequence[AdjacencyEntry]]

_EMPTY: tuple[AdjacencyEntry, ...] = ()


@dataclass(frozen=True)
class ProcessedGraph:
    """Snapshot of the derived graph structures.

    Published by apply_mutations(); consumers read it and never mutate it.

    Attributes:
        nodes: All nodes in reading order.
        edges: All stored edges, in insertion order (indexed or not).
        node_types: Node types, canonical order first then alphabetical.
        edge_types: Dependency tags, canonical order first then alphabetical.
        node_colors: Node type -> color.
        edge_colors: Dependency tag -> color.
        nodes_by_type: Node type -> ids in reading order.
        node_by_id: Id -> node.
        outgoing_edges_by_source: Prerequisite id -> entries.
        incoming_edges_by_target: Dependent id -> entries.
        broken_references: Stored edges left out of the indices.
        revision: Store revision this snapshot reflects.
    """

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[Edge, ...] = ()
    node_types: tuple[str, ...] = ()
    edge_types: tuple[str, ...] = ()
    node_colors: Mapping[str, str] = field(default_factory=dict)
    edge_colors: Mapping[str, str] = field(default_factory=dict)
    nodes_by_type: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    node_by_id: Mapping[str, GraphNode] = field(default_factory=dict)
    outgoing_edges_by_source: AdjacencyIndex = field(default_factory=dict)
    incoming_edges_by_target: AdjacencyIndex = field(default_factory=dict)
    broken_references: tuple[BrokenReference, ...] = ()
    revision: int = 0

    def outgoing(self, node_id: str) -> Sequence[AdjacencyEntry]:
        """Edges whose prerequisite is node_id."""
        return self.outgoing_edges_by_source.get(node_id, _EMPTY)

    def incoming(self, node_id: str) -> Sequence[AdjacencyEntry]:
        """Edges whose dependent is node_id (its prerequisites)."""
        return self.incoming_edges_by_target.get(node_id, _EMPTY)

    def find_by_id(self, node_id: str) -> GraphNode | None:
        return self.node_by_id.get(node_id)

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def indexed_edge_count(self) -> int:
        """Number of edges present in the adjacency indices."""
        return sum(len(entries) for entries in self.outgoing_edges_by_source.values())


def order_types(types: Iterable[str], canonical: Sequence[str]) -> list[str]:
    """Order types with the canonical ones first, the rest alphabetically.

    The result depends only on the set of types present, never on the
    order they arrived in.
    """
    present = set(types)
    head = [t for t in canonical if t in present]
    tail = sorted(present.difference(canonical))
    return head + tail


def assign_node_colors(node_types: Sequence[str], palette: Sequence[str]) -> dict[str, str]:
    """Assign palette colors to node types in order, cycling if needed."""
    if not palette:
        return {}
    return {t: palette[i % len(palette)] for i, t in enumerate(node_types)}


def assign_edge_colors(
    edge_types: Sequence[str], edge_palette: Mapping[str, str], default: str
) -> dict[str, str]:
    """Look up each dependency tag's color, falling back to default."""
    return {t: edge_palette.get(t, default) for t in edge_types}


def build_adjacency(
    edges: Iterable[Edge], node_ids: set[str] | frozenset[str]
) -> tuple[dict[str, list[AdjacencyEntry]], dict[str, list[AdjacencyEntry]], list[BrokenReference]]:
    """Build outgoing/incoming indices from the full edge set.

    Edges whose endpoints are not both present are left out and reported
    as broken references.

    Returns:
        (outgoing_by_source, incoming_by_target, broken_references)
    """
    outgoing: dict[str, list[AdjacencyEntry]] = {}
    incoming: dict[str, list[AdjacencyEntry]] = {}
    broken: list[BrokenReference] = []

    for edge in edges:
        missing = tuple(
            endpoint for endpoint in (edge.source, edge.target) if endpoint not in node_ids
        )
        if missing:
            broken.append(
                BrokenReference(
                    source_id=edge.source,
                    target_id=edge.target,
                    dependency_type=edge.dependency_type,
                    missing=missing,
                )
            )
            continue
        entry = edge.as_entry()
        outgoing.setdefault(edge.source, []).append(entry)
        incoming.setdefault(edge.target, []).append(entry)

    return outgoing, incoming, broken


def _freeze_index(index: dict[str, list[AdjacencyEntry]]) -> Mapping[str, tuple[AdjacencyEntry, ...]]:
    return MappingProxyType({k: tuple(v) for k, v in index.items()})


def apply_mutations(store: GraphStore, config: dict[str, Any] | None = None) -> ProcessedGraph:
    """Recompute all derived structures after a batch of store changes.

    - Re-sorts every node and reassigns order indices
    - Rebuilds the adjacency indices from the full edge set
    - Recomputes the node-type partition and color assignments
    - Publishes a fresh node-by-id lookup

    Args:
        store: The graph store (node order indices are updated in place).
        config: Effective configuration; defaults are used when None.

    Returns:
        A new ProcessedGraph snapshot.
    """
    config = config or DEFAULT_CONFIG
    palette = config.get("palette", {})
    canonical_types = config.get("ordering", {}).get("canonical_types", [])

    nodes = assign_order_indices(store.all_nodes())
    edges = list(store.all_edges())
    node_ids = {n.id for n in nodes}

    outgoing, incoming, broken = build_adjacency(edges, node_ids)

    node_types = order_types((n.type for n in nodes), canonical_types)
    canonical_deps = [d.value for d in DependencyType]
    edge_types = order_types((e.dependency_type for e in edges), canonical_deps)

    nodes_by_type: dict[str, list[str]] = {t: [] for t in node_types}
    for node in nodes:
        nodes_by_type[node.type].append(node.id)

    node_colors = assign_node_colors(node_types, palette.get("nodes", []))
    edge_colors = assign_edge_colors(
        edge_types,
        palette.get("edges", {}),
        palette.get("default_edge", "#999999"),
    )

    revision = store.mutation_log.revision
    store.mutation_log.mark_applied()

    logger.debug(
        "Applied mutations at r%d: %d nodes, %d edges (%d broken), %d node types",
        revision,
        len(nodes),
        len(edges),
        len(broken),
        len(node_types),
    )

    return ProcessedGraph(
        nodes=tuple(nodes),
        edges=tuple(edges),
        node_types=tuple(node_types),
        edge_types=tuple(edge_types),
        node_colors=MappingProxyType(node_colors),
        edge_colors=MappingProxyType(edge_colors),
        nodes_by_type=MappingProxyType({t: tuple(ids) for t, ids in nodes_by_type.items()}),
        node_by_id=MappingProxyType({n.id: n for n in nodes}),
        outgoing_edges_by_source=_freeze_index(outgoing),
        incoming_edges_by_target=_freeze_index(incoming),
        broken_references=tuple(broken),
        revision=revision,
    )


__all__ = [
    "ProcessedGraph",
    "apply_mutations",
    "build_adjacency",
    "order_types",
    "assign_node_colors",
    "assign_edge_colors",
]
