"""
constellations.config.defaults - Default configuration values
"""

from constellations.graph.GraphNode import ArtifactType

# Node colors are handed out in canonical type order, so the same type
# gets the same color across documents.
DEFAULT_NODE_PALETTE = [
    "#4e79a7",
    "#f28e2b",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc948",
    "#b07aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ac",
]

DEFAULT_CONFIG = {
    "palette": {
        "nodes": list(DEFAULT_NODE_PALETTE),
        "edges": {
            "used_in": "#7aa2f7",
            "generalized_by": "#bb9af7",
            "internal": "#9aa5ce",
        },
        "default_edge": "#6b7280",
    },
    "ordering": {
        "canonical_types": [t.value for t in ArtifactType],
    },
    "replay": {
        "interval_ms": 1050,
        "min_interval_ms": 100,
        "max_interval_ms": 2000,
    },
    "logging": {
        "level": "WARNING",
    },
}
