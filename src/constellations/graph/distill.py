"""Distillation - flatten a proof subgraph into one linear document.

The model lists the target first, then every visible prerequisite in
reading order, each with the edges that justify its inclusion. Terms
an artifact relies on that are not graph nodes (forward references into
a definition bank) are collected separately and flagged. The builder
performs no I/O; rendering lives in ``serialize`` and ``html``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from constellations.exceptions import ProofModeError
from constellations.graph.GraphNode import GraphNode
from constellations.graph.pipeline import ProcessedGraph
from constellations.graph.proof import (
    ProofState,
    max_prereq_depth,
    prerequisite_distances,
    recompute_proof_subgraph,
)
from constellations.graph.relations import AdjacencyEntry


@dataclass(frozen=True)
class DistillEntry:
    """One artifact in a distilled proof.

    Attributes:
        node: The artifact payload.
        distance: Prerequisite hops from the target (0 for the target).
        justifying_edges: Visible edges from this artifact to the
            artifacts that depend on it, one per EdgeKey.
    """

    node: GraphNode
    distance: int
    justifying_edges: tuple[AdjacencyEntry, ...] = ()

    @property
    def used_by(self) -> list[str]:
        """Ids of visible artifacts that depend on this one."""
        return [e.t for e in self.justifying_edges]


@dataclass(frozen=True)
class DefinitionRef:
    """A term referenced by an included artifact but not present as a node.

    Attributes:
        term: The referenced term.
        definition: Definition text, or None if nothing is known.
        referenced_by: Ids of included artifacts referencing the term.
    """

    term: str
    definition: str | None
    referenced_by: tuple[str, ...] = ()

    @property
    def defined(self) -> bool:
        return self.definition is not None


@dataclass(frozen=True)
class DistillModel:
    """Ordered, deduplicated linear proof document."""

    target: DistillEntry
    prerequisites: tuple[DistillEntry, ...] = ()
    definitions: tuple[DefinitionRef, ...] = ()
    depth: int = 1
    max_depth: int = 0

    @property
    def entries(self) -> tuple[DistillEntry, ...]:
        """Target followed by prerequisites."""
        return (self.target, *self.prerequisites)

    @property
    def node_ids(self) -> list[str]:
        return [e.node.id for e in self.entries]

    @property
    def undefined_terms(self) -> list[str]:
        return [d.term for d in self.definitions if not d.defined]


def _bank_definition(bank: Mapping[str, Any] | None, term: str) -> str | None:
    """Look a term up in a definition bank.

    Bank values may be plain strings or mappings with a ``definition`` key.
    """
    if not bank:
        return None
    value = bank.get(term)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        text = value.get("definition")
        return str(text) if text is not None else None
    return None


def _node_names(graph: ProcessedGraph) -> set[str]:
    """Case-folded ids and labels of every node, for term matching."""
    names = set()
    for node in graph.nodes:
        names.add(node.id.casefold())
        if node.label:
            names.add(node.label.strip().casefold())
    return names


def _collect_definitions(
    entries: Sequence[DistillEntry],
    graph: ProcessedGraph,
    definition_bank: Mapping[str, Any] | None,
    terms_map: Mapping[str, Sequence[str]] | None,
) -> tuple[DefinitionRef, ...]:
    names = _node_names(graph)
    order: list[str] = []
    texts: dict[str, str | None] = {}
    refs: dict[str, list[str]] = {}

    for entry in entries:
        node = entry.node
        terms = list(node.prerequisite_defs)
        if terms_map:
            terms.extend(str(t) for t in terms_map.get(node.id, ()))
        for term in terms:
            if term.strip().casefold() in names:
                continue
            if term not in refs:
                order.append(term)
                refs[term] = []
                texts[term] = None
            if node.id not in refs[term]:
                refs[term].append(node.id)
            if texts[term] is None:
                texts[term] = node.prerequisite_defs.get(term)

    return tuple(
        DefinitionRef(
            term=term,
            definition=texts[term] if texts[term] is not None else _bank_definition(definition_bank, term),
            referenced_by=tuple(refs[term]),
        )
        for term in order
    )


def build_distill_model(
    state: ProofState,
    graph: ProcessedGraph,
    definition_bank: Mapping[str, Any] | None = None,
    terms_map: Mapping[str, Sequence[str]] | None = None,
) -> DistillModel:
    """Build the distilled proof for the current proof-mode target.

    The proof subgraph is recomputed first so the model always matches
    the live depth.

    Args:
        state: Active proof state.
        graph: Current processed graph.
        definition_bank: Term -> definition (string or mapping).
        terms_map: Artifact id -> terms it references.

    Returns:
        The DistillModel.

    Raises:
        ProofModeError: If proof mode is not active or the target is
            not a node.
    """
    if not state.active or state.target_id is None:
        raise ProofModeError("Distillation requires an active proof mode")

    incoming = graph.incoming_edges_by_target
    recompute_proof_subgraph(state, incoming)

    target = graph.find_by_id(state.target_id)
    if target is None:
        raise ProofModeError(f"Proof target {state.target_id!r} is not in the graph")

    distances = prerequisite_distances(state.target_id, incoming, state.depth)

    def justify(node_id: str) -> tuple[AdjacencyEntry, ...]:
        seen: dict[str, AdjacencyEntry] = {}
        for entry in graph.outgoing(node_id):
            if entry.key in state.visible_edges and entry.key not in seen:
                seen[entry.key] = entry
        return tuple(seen.values())

    prerequisite_nodes = sorted(
        (
            graph.node_by_id[node_id]
            for node_id in state.visible_nodes
            if node_id != state.target_id and node_id in graph.node_by_id
        ),
        key=lambda n: (n.order_index or 0, n.id),
    )

    target_entry = DistillEntry(node=target, distance=0)
    prerequisites = tuple(
        DistillEntry(node=node, distance=distances.get(node.id, 0), justifying_edges=justify(node.id))
        for node in prerequisite_nodes
    )
    entries = (target_entry, *prerequisites)

    return DistillModel(
        target=target_entry,
        prerequisites=prerequisites,
        definitions=_collect_definitions(entries, graph, definition_bank, terms_map),
        depth=state.depth,
        max_depth=max_prereq_depth(state.target_id, incoming),
    )


__all__ = ["DistillEntry", "DefinitionRef", "DistillModel", "build_distill_model"]
