"""Tests for GraphSession: ingestion, proof mode and replay wiring."""

import logging

import pytest

from constellations import GraphSession
from constellations.config import merge_configs
from constellations.config.defaults import DEFAULT_CONFIG
from constellations.exceptions import ProofModeError
from constellations.graph.events import NodeEvent, ResetEvent
from constellations.graph.relations import Edge
from tests.graph.graph_test_helpers import make_edge, make_node, uses


class FakeScheduler:
    def __init__(self):
        self.intervals = []
        self.cancelled = 0

    def call_every(self, interval_s, callback):
        self.intervals.append(interval_s)
        scheduler = self

        class Handle:
            def cancel(self):
                scheduler.cancelled += 1

        return Handle()


class TestIngest:
    """Events are applied in arrival order."""

    def test_single_events_publish_immediately(self):
        session = GraphSession()
        session.ingest({"type": "node", "data": make_node("A")})
        session.ingest({"type": "node", "data": make_node("B")})
        session.ingest({"type": "link", "data": make_edge("A", "B", "uses_result")})

        assert set(session.node_by_id) == {"A", "B"}
        assert [tuple(e) for e in session.incoming_edges_by_target["A"]] == [("B", "A", "used_in")]

    def test_typed_event(self):
        session = GraphSession()

        assert session.ingest(NodeEvent(make_node("A")))
        assert "A" in session.node_by_id

    def test_malformed_event_ignored(self, caplog):
        session = GraphSession()
        with caplog.at_level(logging.WARNING):
            assert not session.ingest({"type": "bogus"})

        assert session.graph.node_count() == 0

    def test_link_with_mapping_tag_kept(self):
        session = GraphSession()
        session.ingest({"type": "node", "data": make_node("A")})
        session.ingest({"type": "node", "data": make_node("B")})

        assert session.ingest({"type": "link", "data": make_edge("A", "B", {"x": 1})})
        assert [e.s for e in session.incoming_edges_by_target["B"]] == ["A"]

    def test_batch_publishes_once(self):
        session = GraphSession()
        applied = session.ingest_many(
            [
                {"type": "node", "data": make_node("A")},
                {"type": "unknown"},
                {"type": "link", "data": uses("A", "B")},
                {"type": "node", "data": make_node("B")},
            ]
        )

        assert applied == 3
        assert session.graph.indexed_edge_count() == 1
        assert session.graph.revision == session.store.mutation_log.revision

    def test_mutations_unpublished_until_applied(self):
        session = GraphSession()
        session.upsert_node(make_node("A"))

        assert "A" not in session.node_by_id
        session.apply_mutations()
        assert session.order_index("A") == 1

    def test_normalized_edge_added(self):
        session = GraphSession()
        session.upsert_node(make_node("A"))
        session.upsert_node(make_node("B"))
        result = session.add_edge(Edge(source="A", target="B"))
        session.apply_mutations()

        assert result.added
        assert [e.key for e in session.outgoing_edges_by_source["A"]] == [result.edge.key]

    def test_reset_in_batch(self):
        session = GraphSession()
        session.ingest_many(
            [
                {"type": "node", "data": make_node("A")},
                ResetEvent(),
                {"type": "node", "data": make_node("B")},
            ]
        )

        assert set(session.node_by_id) == {"B"}


class TestReset:
    """Reset clears the graph, proof mode and replay."""

    def test_reset(self, chain_session):
        chain_session.enter_proof_mode("thm-1")
        chain_session.tick_replay()
        chain_session.reset()

        assert chain_session.graph.node_count() == 0
        assert not chain_session.proof.active
        assert chain_session.replay is None
        assert chain_session.replay_visible_nodes == frozenset()


class TestProofMode:
    """Proof mode operations go through the session."""

    def test_enter_and_unfold(self, chain_session):
        chain_session.enter_proof_mode("thm-1")
        assert chain_session.proof_visible_nodes == {"thm-1", "prop-1"}

        chain_session.unfold_more()
        chain_session.unfold_more()
        assert chain_session.proof.depth == 3
        assert chain_session.max_proof_depth() == 3

        chain_session.unfold_more()
        assert chain_session.proof.depth == 3

        chain_session.unfold_less()
        assert chain_session.proof_visible_nodes == {"thm-1", "prop-1", "lem-1"}

    def test_unknown_target(self, chain_session):
        with pytest.raises(ProofModeError, match="ghost"):
            chain_session.enter_proof_mode("ghost")

    def test_exit(self, chain_session):
        chain_session.enter_proof_mode("thm-1")
        chain_session.exit_proof_mode()

        assert chain_session.proof_visible_nodes == frozenset()
        assert chain_session.max_proof_depth() == 0

    def test_recomputed_after_new_prerequisite(self, chain_session):
        chain_session.enter_proof_mode("thm-1")
        chain_session.ingest_many(
            [
                {"type": "node", "data": make_node("rem-1", "remark", line=25)},
                {"type": "link", "data": uses("rem-1", "thm-1")},
            ]
        )

        assert chain_session.proof_visible_nodes == {"thm-1", "prop-1", "rem-1"}
        assert "rem-1=>thm-1" in chain_session.proof_visible_edges

    def test_distill_requires_proof_mode(self, chain_session):
        with pytest.raises(ProofModeError):
            chain_session.build_distill_model()

    def test_distill_matches_visible_set(self, diamond_session):
        diamond_session.enter_proof_mode("thm")
        diamond_session.unfold_more()
        model = diamond_session.build_distill_model()

        assert set(model.node_ids) == diamond_session.proof_visible_nodes
        assert model.node_ids == ["thm", "def", "lem-a", "lem-b"]
        assert "cor" not in model.node_ids


class TestReplay:
    """Replay wiring: one timer, clamped interval, leaves proof mode."""

    def test_start_uses_configured_interval(self, chain_session):
        scheduler = FakeScheduler()
        replay = chain_session.start_replay(scheduler)

        assert scheduler.intervals == [1.05]
        assert replay.revealed_order == ["def-1"]

    def test_start_exits_proof_mode(self, chain_session):
        chain_session.enter_proof_mode("thm-1")
        chain_session.start_replay(FakeScheduler())

        assert not chain_session.proof.active

    def test_restart_cancels_previous_timer(self, chain_session):
        scheduler = FakeScheduler()
        chain_session.start_replay(scheduler)
        chain_session.start_replay(scheduler)

        assert scheduler.cancelled == 1
        assert len(scheduler.intervals) == 2

    def test_interval_clamped(self, chain_session):
        assert chain_session.set_replay_interval_ms(10) == 100
        assert chain_session.set_replay_interval_ms(99999) == 2000
        assert chain_session.set_replay_interval_ms(400) == 400

    def test_interval_change_replaces_timer(self, chain_session):
        scheduler = FakeScheduler()
        chain_session.start_replay(scheduler)
        chain_session.set_replay_interval_ms(500)

        assert scheduler.intervals == [1.05, 0.5]
        assert scheduler.cancelled == 1

    def test_interval_from_config(self):
        config = merge_configs(DEFAULT_CONFIG, {"replay": {"interval_ms": 300}})
        session = GraphSession(config=config)

        assert session.replay_interval_ms == 300

    def test_manual_ticks_complete(self, chain_session):
        count = 0
        while chain_session.tick_replay():
            count += 1

        assert count == 4
        assert chain_session.replay_visible_nodes == set(chain_session.node_by_id)
        assert chain_session.replay_visible_edges == {"def-1=>lem-1", "lem-1=>prop-1", "prop-1=>thm-1"}

    def test_stop_keeps_revealed(self, chain_session):
        chain_session.start_replay(FakeScheduler())
        chain_session.stop_replay()

        assert chain_session.replay_visible_nodes == {"def-1"}
        assert not chain_session.replay.is_running
