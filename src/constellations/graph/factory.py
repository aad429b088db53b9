"""Graph Factory - Build a GraphSession from an exported graph document.

This module provides the single entry point commands use to go from a
JSON export on disk to a populated session. Two layouts are accepted:

- wrapped: ``{"graph": {"nodes": [...], "edges": [...]}, "definition_bank":
  {...}, "artifact_to_terms_map": {...}, "latex_macros": {...}}``
- bare: ``{"nodes": [...], "edges": [...]}``
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from constellations.exceptions import ExportLoadError
from constellations.session import GraphSession

logger = logging.getLogger(__name__)


def _mapping_field(container: Mapping[str, Any], key: str, source: str) -> Mapping[str, Any]:
    """Return an optional object-valued field, empty when absent or null."""
    value = container.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ExportLoadError(source, f"'{key}' is not an object")
    return value


@dataclass
class ExportPayload:
    """Raw content of an exported graph document.

    Attributes:
        nodes: Raw node dicts.
        edges: Raw edge dicts (not yet normalized).
        arxiv_id: Source document identifier, if recorded.
        stats: Extractor statistics, passed through untouched.
        definition_bank: Term -> definition.
        terms_map: Artifact id -> referenced terms.
        latex_macros: Macro name -> expansion.
        source: Where the document was loaded from.
    """

    nodes: list[dict[str, Any]] = field(default_factory=list)
    edges: list[dict[str, Any]] = field(default_factory=list)
    arxiv_id: str | None = None
    stats: dict[str, Any] = field(default_factory=dict)
    definition_bank: dict[str, Any] = field(default_factory=dict)
    terms_map: dict[str, list[str]] = field(default_factory=dict)
    latex_macros: dict[str, str] = field(default_factory=dict)
    source: str = "<memory>"

    @classmethod
    def from_dict(cls, data: Any, source: str = "<memory>") -> ExportPayload:
        """Build a payload from a parsed JSON document.

        Raises:
            ExportLoadError: If the document is not an object, its
                node/edge lists have the wrong shape, or an optional
                section such as definition_bank is not an object.
        """
        if not isinstance(data, Mapping):
            raise ExportLoadError(source, "document is not a JSON object")

        graph = data.get("graph", data)
        if not isinstance(graph, Mapping):
            raise ExportLoadError(source, "'graph' is not an object")

        nodes = graph.get("nodes", [])
        edges = graph.get("edges", [])
        if not isinstance(nodes, list):
            raise ExportLoadError(source, "'nodes' is not a list")
        if not isinstance(edges, list):
            raise ExportLoadError(source, "'edges' is not a list")

        skipped = sum(1 for item in nodes + edges if not isinstance(item, Mapping))
        if skipped:
            logger.warning("%s: skipping %d non-object node/edge entries", source, skipped)

        stats = _mapping_field(graph, "stats", source)
        definition_bank = _mapping_field(data, "definition_bank", source)
        terms_map = _mapping_field(data, "artifact_to_terms_map", source)
        latex_macros = _mapping_field(data, "latex_macros", source)
        return cls(
            nodes=[dict(n) for n in nodes if isinstance(n, Mapping)],
            edges=[dict(e) for e in edges if isinstance(e, Mapping)],
            arxiv_id=graph.get("arxiv_id"),
            stats=dict(stats),
            definition_bank=dict(definition_bank),
            terms_map={
                str(k): [str(t) for t in v]
                for k, v in terms_map.items()
                if isinstance(v, list)
            },
            latex_macros=dict(latex_macros),
            source=source,
        )


def load_export(path: Path) -> ExportPayload:
    """Read an exported graph document from disk.

    Args:
        path: JSON file in the wrapped or bare layout.

    Returns:
        The parsed ExportPayload.

    Raises:
        ExportLoadError: If the file cannot be read or parsed.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ExportLoadError(str(path), str(e)) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExportLoadError(str(path), f"invalid JSON: {e}") from e

    payload = ExportPayload.from_dict(data, source=str(path))
    logger.debug(
        "Loaded %s: %d nodes, %d edges", path, len(payload.nodes), len(payload.edges)
    )
    return payload


def build_session(export: ExportPayload, config: dict[str, Any] | None = None) -> GraphSession:
    """Create a GraphSession holding every node and edge of an export.

    Nodes are ingested first, then edges, followed by one shared
    recomputation.

    Args:
        export: Loaded export payload.
        config: Effective configuration (defaults when None).

    Returns:
        A GraphSession with the mutations applied.
    """
    session = GraphSession(
        config=config,
        definition_bank=export.definition_bank,
        terms_map=export.terms_map,
        latex_macros=export.latex_macros,
    )
    for raw_node in export.nodes:
        session.upsert_node(raw_node)
    for raw_edge in export.edges:
        session.add_edge(raw_edge)
    session.apply_mutations()
    return session


__all__ = ["ExportPayload", "load_export", "build_session"]
