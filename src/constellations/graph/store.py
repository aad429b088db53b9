"""Graph Store - id-keyed arena of artifacts and normalized edges.

The store owns every node and edge. Edges refer to nodes only by id, so
cycles need no special handling. Derived structures (reading order,
adjacency, color partitions) are not maintained here; they are rebuilt
by ``constellations.graph.pipeline.apply_mutations``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from constellations.graph.GraphNode import GraphNode
from constellations.graph.mutations import MutationLog
from constellations.graph.normalize import normalize_edge
from constellations.graph.relations import Edge, edge_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddEdgeResult:
    """Outcome of GraphStore.add_edge().

    Attributes:
        added: True if a new logical edge was stored.
        edge: The normalized edge (None when the raw edge was dropped).
    """

    added: bool
    edge: Edge | None = None

    @property
    def key(self) -> str | None:
        return self.edge.key if self.edge else None


@dataclass
class GraphStore:
    """Container for the current nodes and edges.

    Nodes are keyed by id; edges by EdgeKey in insertion order.
    """

    _nodes: dict[str, GraphNode] = field(default_factory=dict, init=False)
    _edges: dict[str, Edge] = field(default_factory=dict, init=False)
    _mutation_log: MutationLog = field(default_factory=MutationLog, init=False, repr=False)

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────

    def upsert_node(self, node: GraphNode | Mapping[str, Any]) -> GraphNode | None:
        """Insert a node or overwrite the node with the same id.

        Does not recompute derived state.

        Args:
            node: A GraphNode or a raw node dict.

        Returns:
            The stored node, or None if a raw dict had no id.
        """
        if not isinstance(node, GraphNode):
            node = GraphNode.from_raw(node)
            if node is None:
                return None
        replaced = node.id in self._nodes
        self._nodes[node.id] = node
        self._mutation_log.record("upsert_node", node.id, replaced=replaced)
        return node

    def add_edge(self, raw: Edge | Mapping[str, Any]) -> AddEdgeResult:
        """Normalize and add an edge unless its EdgeKey is already present.

        Edges with missing or unknown endpoints are accepted; they are
        indexed once both endpoints exist.

        Args:
            raw: A raw edge dict, or an already normalized Edge.

        Returns:
            AddEdgeResult; ``added`` is False for duplicates and for
            dropped edges.
        """
        edge = raw if isinstance(raw, Edge) else normalize_edge(raw)
        if edge is None:
            return AddEdgeResult(added=False)
        if edge.key in self._edges:
            logger.debug("Duplicate edge %s ignored", edge.key)
            return AddEdgeResult(added=False, edge=self._edges[edge.key])
        self._edges[edge.key] = edge
        self._mutation_log.record("add_edge", edge.key, dependency_type=edge.dependency_type)
        return AddEdgeResult(added=True, edge=edge)

    def reset(self) -> None:
        """Remove all nodes and edges."""
        self._nodes = {}
        self._edges = {}
        self._mutation_log.record("reset", "")

    # ─────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────

    def find_by_id(self, node_id: str) -> GraphNode | None:
        """Find node by ID.

        Args:
            node_id: The node ID to find.

        Returns:
            The matching GraphNode, or None if not found.
        """
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, source: str, target: str) -> bool:
        return edge_key(source, target) in self._edges

    def all_nodes(self) -> Iterator[GraphNode]:
        """Iterate all nodes in insertion order."""
        yield from self._nodes.values()

    def all_edges(self) -> Iterator[Edge]:
        """Iterate all edges in insertion order."""
        yield from self._edges.values()

    def node_count(self) -> int:
        """Return total number of nodes."""
        return len(self._nodes)

    def edge_count(self) -> int:
        """Return total number of logical edges."""
        return len(self._edges)

    @property
    def mutation_log(self) -> MutationLog:
        """Access the mutation log for this store."""
        return self._mutation_log


__all__ = ["AddEdgeResult", "GraphStore"]
