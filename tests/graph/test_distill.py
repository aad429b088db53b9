"""Tests for the distillation builder."""

import pytest

from constellations.exceptions import ProofModeError
from constellations.graph.distill import build_distill_model
from constellations.graph.proof import ProofState, enter_proof_mode, unfold_more
from tests.graph.graph_test_helpers import build_graph, make_node, uses


@pytest.fixture
def graph():
    """thm uses lem-b and lem-a; both use def; lem-a is stated later in the text."""
    return build_graph(
        [
            make_node("def", "definition", label="Definition 1", line=1),
            make_node(
                "lem-a",
                "lemma",
                label="Lemma A",
                line=12,
                prerequisite_defs={"compact": "Every open cover has a finite subcover."},
            ),
            make_node("lem-b", "lemma", label="Lemma B", line=6, prerequisite_defs={"Definition 1": "x"}),
            make_node("thm", "theorem", label="Theorem", line=20),
        ],
        [uses("def", "lem-a"), uses("def", "lem-b"), uses("lem-a", "thm"), uses("lem-b", "thm")],
    )


def proof_state(graph, target, depth=1):
    state = ProofState()
    enter_proof_mode(state, target, graph.incoming_edges_by_target)
    while state.depth < depth:
        unfold_more(state, graph.incoming_edges_by_target)
    return state


class TestDistillModel:
    """Target first, prerequisites in reading order, each exactly once."""

    def test_requires_active_proof_mode(self, graph):
        with pytest.raises(ProofModeError):
            build_distill_model(ProofState(), graph)

    def test_target_first(self, graph):
        model = build_distill_model(proof_state(graph, "thm"), graph)

        assert model.target.node.id == "thm"
        assert model.target.distance == 0
        assert model.node_ids == ["thm", "lem-b", "lem-a"]

    def test_depth_two_deduplicates_shared_prerequisite(self, graph):
        model = build_distill_model(proof_state(graph, "thm", depth=2), graph)

        assert model.node_ids == ["thm", "def", "lem-b", "lem-a"]
        assert model.depth == 2
        assert model.max_depth == 2

    def test_distances(self, graph):
        model = build_distill_model(proof_state(graph, "thm", depth=2), graph)

        assert {e.node.id: e.distance for e in model.prerequisites} == {"def": 2, "lem-b": 1, "lem-a": 1}

    def test_justifying_edges(self, graph):
        model = build_distill_model(proof_state(graph, "thm", depth=2), graph)
        by_id = {e.node.id: e for e in model.prerequisites}

        assert sorted(by_id["def"].used_by) == ["lem-a", "lem-b"]
        assert by_id["lem-a"].used_by == ["thm"]

    def test_justifying_edges_limited_to_visible(self, graph):
        model = build_distill_model(proof_state(graph, "lem-a"), graph)

        assert model.node_ids == ["lem-a", "def"]
        assert model.prerequisites[0].used_by == ["lem-a"]

    def test_recomputes_before_building(self, graph):
        state = proof_state(graph, "thm")
        state.visible_nodes = {"thm"}
        model = build_distill_model(state, graph)

        assert len(model.prerequisites) == 2


class TestDefinitions:
    """Referenced terms that are not nodes are listed and flagged."""

    def test_prerequisite_defs_text(self, graph):
        model = build_distill_model(proof_state(graph, "thm"), graph)

        assert [(d.term, d.definition, d.referenced_by) for d in model.definitions] == [
            ("compact", "Every open cover has a finite subcover.", ("lem-a",))
        ]

    def test_terms_naming_nodes_skipped(self, graph):
        model = build_distill_model(proof_state(graph, "thm"), graph)

        assert "Definition 1" not in [d.term for d in model.definitions]

    def test_bank_and_undefined(self, graph):
        model = build_distill_model(
            proof_state(graph, "thm"),
            graph,
            definition_bank={"Hausdorff": {"definition": "Points separate."}, "metric": "A distance."},
            terms_map={"thm": ["Hausdorff", "metric", "metrizable"]},
        )
        by_term = {d.term: d for d in model.definitions}

        assert by_term["Hausdorff"].definition == "Points separate."
        assert by_term["metric"].definition == "A distance."
        assert not by_term["metrizable"].defined
        assert model.undefined_terms == ["metrizable"]

    def test_terms_of_hidden_nodes_ignored(self, graph):
        model = build_distill_model(
            proof_state(graph, "lem-b"),
            graph,
            terms_map={"thm": ["metrizable"]},
        )

        assert model.definitions == ()
