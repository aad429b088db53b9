"""Graph Serialization - Export processed graphs and distillations.

This module provides functions to serialize GraphNode, ProcessedGraph,
ProofState and DistillModel to JSON-compatible dicts, plus markdown and
CSV renderings.
"""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from constellations.graph.distill import DistillEntry, DistillModel
    from constellations.graph.GraphNode import GraphNode
    from constellations.graph.pipeline import ProcessedGraph
    from constellations.graph.proof import ProofState


def serialize_node(node: GraphNode) -> dict[str, Any]:
    """Serialize a GraphNode to a JSON-compatible dict.

    Args:
        node: The node to serialize.

    Returns:
        Dict suitable for JSON serialization.
    """
    result: dict[str, Any] = {
        "id": node.id,
        "type": node.type,
        "label": node.label,
        "order_index": node.order_index,
    }
    if node.display_name:
        result["display_name"] = node.display_name
    if node.content:
        result["content"] = node.content
    if node.content_preview:
        result["content_preview"] = node.content_preview
    if node.position is not None:
        result["position"] = node.position.to_dict()
    if node.proof:
        result["proof"] = node.proof
    if node.prerequisite_defs:
        result["prerequisite_defs"] = dict(node.prerequisite_defs)
    return result


def serialize_graph(graph: ProcessedGraph) -> dict[str, Any]:
    """Serialize a ProcessedGraph to a JSON-compatible dict.

    Args:
        graph: The graph to serialize.

    Returns:
        Dict with nodes (reading order), edges and metadata.
    """
    return {
        "nodes": [serialize_node(n) for n in graph.nodes],
        "edges": [
            {
                "source": e.source,
                "target": e.target,
                "dependency_type": e.dependency_type,
                **({"context": e.context} if e.context else {}),
                **({"dependency": e.dependency} if e.dependency else {}),
            }
            for e in graph.edges
        ],
        "metadata": {
            "revision": graph.revision,
            "node_count": graph.node_count(),
            "edge_count": graph.edge_count(),
            "indexed_edge_count": graph.indexed_edge_count(),
            "node_types": list(graph.node_types),
            "edge_types": list(graph.edge_types),
            "by_type": {t: len(ids) for t, ids in graph.nodes_by_type.items()},
            "node_colors": dict(graph.node_colors),
            "edge_colors": dict(graph.edge_colors),
            "broken_references": [
                {
                    "source": b.source_id,
                    "target": b.target_id,
                    "dependency_type": b.dependency_type,
                    "missing": list(b.missing),
                }
                for b in graph.broken_references
            ],
        },
    }


def serialize_proof_state(state: ProofState, graph: ProcessedGraph) -> dict[str, Any]:
    """Serialize the visible proof subgraph, nodes in reading order."""
    nodes = [n for n in graph.nodes if n.id in state.visible_nodes]
    return {
        "active": state.active,
        "target": state.target_id,
        "depth": state.depth,
        "nodes": [serialize_node(n) for n in nodes],
        "edges": sorted(state.visible_edges),
    }


def _serialize_entry(entry: DistillEntry) -> dict[str, Any]:
    result = serialize_node(entry.node)
    result["distance"] = entry.distance
    result["used_by"] = entry.used_by
    return result


def serialize_distill_model(model: DistillModel) -> dict[str, Any]:
    """Serialize a DistillModel to a JSON-compatible dict."""
    return {
        "target": _serialize_entry(model.target),
        "prerequisites": [_serialize_entry(e) for e in model.prerequisites],
        "definitions": [
            {
                "term": d.term,
                "definition": d.definition,
                "defined": d.defined,
                "referenced_by": list(d.referenced_by),
            }
            for d in model.definitions
        ],
        "depth": model.depth,
        "max_depth": model.max_depth,
    }


def _heading(node: GraphNode) -> str:
    kind = node.type.replace("_", " ").title()
    return f"{kind} {node.get_label()}"


def distill_to_markdown(model: DistillModel) -> str:
    """Render a distilled proof as markdown.

    The target comes first, then prerequisites in reading order, then
    the referenced terms. Undefined terms are marked.

    Args:
        model: The distillation model.

    Returns:
        Markdown string.
    """
    target = model.target.node
    lines = [
        f"# Distilled proof: {target.get_label()}",
        "",
        f"Depth {model.depth} of {model.max_depth}, "
        f"{len(model.prerequisites)} prerequisite(s).",
        "",
    ]

    for entry in model.entries:
        node = entry.node
        lines.append(f"## {_heading(node)}")
        lines.append("")
        if node.position is not None and node.position.line_start is not None:
            lines.append(f"_Line {node.position}_")
            lines.append("")
        if entry.used_by:
            lines.append("Used in: " + ", ".join(entry.used_by))
            lines.append("")
        text = node.content or node.content_preview
        if text:
            lines.append(text.strip())
            lines.append("")
        if node.proof:
            lines.append("**Proof.** " + node.proof.strip())
            lines.append("")

    if model.definitions:
        lines.append("## Definitions")
        lines.append("")
        for d in model.definitions:
            refs = ", ".join(d.referenced_by)
            if d.defined:
                lines.append(f"- **{d.term}**: {d.definition} _(used by {refs})_")
            else:
                lines.append(f"- **{d.term}**: _undefined_ _(used by {refs})_")
        lines.append("")

    return "\n".join(lines)


def to_csv(graph: ProcessedGraph) -> str:
    """Generate a CSV of nodes in reading order.

    Args:
        graph: The ProcessedGraph to export.

    Returns:
        CSV string with one row per node.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(["order_index", "id", "type", "label", "line_start", "col_start"])
    for node in graph.nodes:
        pos = node.position
        writer.writerow(
            [
                node.order_index,
                node.id,
                node.type,
                node.label or "",
                pos.line_start if pos and pos.line_start is not None else "",
                pos.col_start if pos and pos.col_start is not None else "",
            ]
        )
    return output.getvalue()


__all__ = [
    "serialize_node",
    "serialize_graph",
    "serialize_proof_state",
    "serialize_distill_model",
    "distill_to_markdown",
    "to_csv",
]
