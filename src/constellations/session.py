"""GraphSession - one viewer's graph, proof mode and live replay.

A session is an explicit record that owns exactly one GraphStore, the
latest ProcessedGraph, one ProofState and at most one LiveReplay. No
state is shared between sessions. Derived state is published only once
``apply_mutations`` has finished, so readers never observe a partially
applied batch.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Iterable, Mapping, Sequence

from constellations.config.defaults import DEFAULT_CONFIG
from constellations.exceptions import ProofModeError
from constellations.graph import proof
from constellations.graph.distill import DistillModel, build_distill_model
from constellations.graph.events import IngestEvent, LinkEvent, NodeEvent, ResetEvent, parse_event
from constellations.graph.GraphNode import GraphNode
from constellations.graph.pipeline import AdjacencyIndex, ProcessedGraph, apply_mutations
from constellations.graph.relations import Edge
from constellations.graph.replay import LiveReplay, RevealCallback, Scheduler
from constellations.graph.store import AddEdgeResult, GraphStore

logger = logging.getLogger(__name__)


class GraphSession:
    """Per-session context for the graph engine.

    Args:
        config: Effective configuration (defaults when None).
        definition_bank: Term -> definition, used by distillation.
        terms_map: Artifact id -> referenced terms, used by distillation.
        latex_macros: Macro definitions carried along for renderers.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        definition_bank: Mapping[str, Any] | None = None,
        terms_map: Mapping[str, Sequence[str]] | None = None,
        latex_macros: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config if config is not None else copy.deepcopy(DEFAULT_CONFIG)
        self.definition_bank: dict[str, Any] = dict(definition_bank or {})
        self.terms_map: dict[str, list[str]] = {k: list(v) for k, v in (terms_map or {}).items()}
        self.latex_macros: dict[str, str] = dict(latex_macros or {})

        self.store = GraphStore()
        self.proof = proof.ProofState()
        self._replay: LiveReplay | None = None

        replay_config = self.config.get("replay", {})
        self._min_interval_ms = int(replay_config.get("min_interval_ms", 100))
        self._max_interval_ms = int(replay_config.get("max_interval_ms", 2000))
        self._replay_interval_ms = self._clamp_interval(int(replay_config.get("interval_ms", 1050)))

        self._graph = apply_mutations(self.store, self.config)

    # ─────────────────────────────────────────────────────────────────────
    # Store mutations
    # ─────────────────────────────────────────────────────────────────────

    def upsert_node(self, node: GraphNode | Mapping[str, Any]) -> GraphNode | None:
        """Insert or overwrite a node. Call apply_mutations() to publish."""
        return self.store.upsert_node(node)

    def add_edge(self, raw: Edge | Mapping[str, Any]) -> AddEdgeResult:
        """Normalize and add an edge. Call apply_mutations() to publish.

        An already normalized Edge is stored as given.
        """
        return self.store.add_edge(raw)

    def apply_mutations(self) -> ProcessedGraph:
        """Recompute every derived structure and publish it.

        An active proof subgraph is recomputed against the new indices.
        """
        self._graph = apply_mutations(self.store, self.config)
        if self.proof.active:
            proof.recompute_proof_subgraph(self.proof, self._graph.incoming_edges_by_target)
        return self._graph

    def reset(self) -> None:
        """Clear the graph, leave proof mode and discard any replay."""
        self._clear()
        self.apply_mutations()

    def _clear(self) -> None:
        self.stop_replay()
        self._replay = None
        proof.exit_proof_mode(self.proof)
        self.store.reset()

    # ─────────────────────────────────────────────────────────────────────
    # Event ingestion
    # ─────────────────────────────────────────────────────────────────────

    def _dispatch(self, event: IngestEvent) -> None:
        if isinstance(event, NodeEvent):
            self.store.upsert_node(event.data)
        elif isinstance(event, LinkEvent):
            self.store.add_edge(event.data)
        elif isinstance(event, ResetEvent):
            self._clear()

    def ingest(self, raw: IngestEvent | Mapping[str, Any]) -> bool:
        """Apply one ingestion event and publish the result.

        Args:
            raw: A typed event or a raw ``{type, data}`` dict.

        Returns:
            False if the event was malformed and ignored.
        """
        event = raw if isinstance(raw, (NodeEvent, LinkEvent, ResetEvent)) else parse_event(raw)
        if event is None:
            return False
        self._dispatch(event)
        self.apply_mutations()
        return True

    def ingest_many(self, events: Iterable[IngestEvent | Mapping[str, Any]]) -> int:
        """Apply events in arrival order with one shared recomputation.

        Returns:
            Number of events applied (malformed ones are skipped).
        """
        applied = 0
        for raw in events:
            event = raw if isinstance(raw, (NodeEvent, LinkEvent, ResetEvent)) else parse_event(raw)
            if event is None:
                continue
            self._dispatch(event)
            applied += 1
        self.apply_mutations()
        logger.debug("Ingested %d events", applied)
        return applied

    # ─────────────────────────────────────────────────────────────────────
    # Proof mode
    # ─────────────────────────────────────────────────────────────────────

    def enter_proof_mode(self, target_id: str) -> None:
        """Enter proof mode on target_id at depth 1.

        Raises:
            ProofModeError: If target_id is not a node.
        """
        if target_id not in self._graph.node_by_id:
            raise ProofModeError(f"Unknown node: {target_id}")
        proof.enter_proof_mode(self.proof, target_id, self._graph.incoming_edges_by_target)

    def exit_proof_mode(self) -> None:
        proof.exit_proof_mode(self.proof)

    def unfold_less(self) -> None:
        proof.unfold_less(self.proof, self._graph.incoming_edges_by_target)

    def unfold_more(self) -> None:
        proof.unfold_more(self.proof, self._graph.incoming_edges_by_target)

    def recompute_proof(self) -> None:
        proof.recompute_proof_subgraph(self.proof, self._graph.incoming_edges_by_target)

    def max_proof_depth(self) -> int:
        """Deepest prerequisite layer of the current target (0 when inactive)."""
        if not self.proof.active or self.proof.target_id is None:
            return 0
        return proof.max_prereq_depth(self.proof.target_id, self._graph.incoming_edges_by_target)

    def build_distill_model(self) -> DistillModel:
        """Distill the current proof subgraph.

        Raises:
            ProofModeError: If proof mode is not active.
        """
        return build_distill_model(
            self.proof,
            self._graph,
            definition_bank=self.definition_bank,
            terms_map=self.terms_map,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Live replay
    # ─────────────────────────────────────────────────────────────────────

    def _clamp_interval(self, interval_ms: int) -> int:
        return max(self._min_interval_ms, min(self._max_interval_ms, interval_ms))

    def start_replay(
        self,
        scheduler: Scheduler,
        on_reveal: RevealCallback | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> LiveReplay:
        """Start a fresh replay of the current graph.

        Leaves proof mode and replaces any previous replay, so at most one
        replay timer is ever live.
        """
        self.stop_replay()
        proof.exit_proof_mode(self.proof)
        self._replay = LiveReplay.from_graph(
            self._graph,
            interval_ms=self._replay_interval_ms,
            on_reveal=on_reveal,
            on_complete=on_complete,
        )
        self._replay.start(scheduler)
        return self._replay

    def stop_replay(self) -> None:
        """Stop ticking; revealed sets stay inspectable."""
        if self._replay is not None:
            self._replay.stop()

    def set_replay_interval_ms(self, interval_ms: int) -> int:
        """Set the replay period, clamped to the configured range.

        Returns:
            The interval actually applied.
        """
        self._replay_interval_ms = self._clamp_interval(int(interval_ms))
        if self._replay is not None:
            self._replay.set_interval_ms(self._replay_interval_ms)
        return self._replay_interval_ms

    def tick_replay(self) -> bool:
        """Advance the replay by one node, creating an idle replay if needed.

        Returns:
            True if a node was revealed.
        """
        if self._replay is None:
            proof.exit_proof_mode(self.proof)
            self._replay = LiveReplay.from_graph(self._graph, interval_ms=self._replay_interval_ms)
        return self._replay.tick()

    # ─────────────────────────────────────────────────────────────────────
    # Read-only views
    # ─────────────────────────────────────────────────────────────────────

    @property
    def graph(self) -> ProcessedGraph:
        """The last published ProcessedGraph."""
        return self._graph

    @property
    def node_by_id(self) -> Mapping[str, GraphNode]:
        return self._graph.node_by_id

    @property
    def outgoing_edges_by_source(self) -> AdjacencyIndex:
        return self._graph.outgoing_edges_by_source

    @property
    def incoming_edges_by_target(self) -> AdjacencyIndex:
        return self._graph.incoming_edges_by_target

    @property
    def proof_visible_nodes(self) -> frozenset[str]:
        return frozenset(self.proof.visible_nodes)

    @property
    def proof_visible_edges(self) -> frozenset[str]:
        return frozenset(self.proof.visible_edges)

    @property
    def replay(self) -> LiveReplay | None:
        return self._replay

    @property
    def replay_interval_ms(self) -> int:
        return self._replay_interval_ms

    @property
    def replay_visible_nodes(self) -> frozenset[str]:
        return self._replay.visible_nodes if self._replay else frozenset()

    @property
    def replay_visible_edges(self) -> frozenset[str]:
        return self._replay.visible_edges if self._replay else frozenset()

    def order_index(self, node_id: str) -> int | None:
        node = self._graph.find_by_id(node_id)
        return node.order_index if node else None


__all__ = ["GraphSession"]
