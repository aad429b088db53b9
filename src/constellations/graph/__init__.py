"""Graph module - Core graph data structures.

Exports:
- ArtifactType: Enum of canonical artifact categories
- NodePosition: Location of an artifact in the source document
- GraphNode: Artifact node representation
- Edge: Normalized prerequisite -> dependent edge
- DependencyType: Enum of canonical dependency tags
- AdjacencyEntry: Compact edge record used by the adjacency indices
- BrokenReference: Edge whose endpoint is not (yet) a node
- GraphStore: Id-keyed arena of nodes and edges

Note: derived structures live in constellations.graph.pipeline
(use pipeline.apply_mutations() to build a ProcessedGraph)
"""

from constellations.graph.GraphNode import ArtifactType, GraphNode, NodePosition
from constellations.graph.mutations import BrokenReference, MutationEntry, MutationLog
from constellations.graph.normalize import normalize_edge
from constellations.graph.relations import AdjacencyEntry, DependencyType, Edge, edge_key
from constellations.graph.store import AddEdgeResult, GraphStore

__all__ = [
    "ArtifactType",
    "NodePosition",
    "GraphNode",
    "Edge",
    "DependencyType",
    "AdjacencyEntry",
    "edge_key",
    "normalize_edge",
    "BrokenReference",
    "MutationEntry",
    "MutationLog",
    "AddEdgeResult",
    "GraphStore",
]
