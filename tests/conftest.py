"""Pytest fixtures shared by the constellations tests."""

import json

import pytest

from tests.graph.graph_test_helpers import build_session, make_node, uses


@pytest.fixture
def chain_nodes():
    """Definition -> lemma -> proposition -> theorem, in document order."""
    return [
        make_node("def-1", "definition", label="Definition 1", line=1),
        make_node("lem-1", "lemma", label="Lemma 2", line=10),
        make_node("prop-1", "proposition", label="Proposition 3", line=20),
        make_node("thm-1", "theorem", label="Theorem 4", line=30),
    ]


@pytest.fixture
def chain_edges():
    """thm-1 uses prop-1 uses lem-1 uses def-1."""
    return [
        uses("def-1", "lem-1"),
        uses("lem-1", "prop-1"),
        uses("prop-1", "thm-1"),
    ]


@pytest.fixture
def chain_session(chain_nodes, chain_edges):
    """Session holding the four-node chain."""
    return build_session(chain_nodes, chain_edges)


@pytest.fixture
def diamond_session():
    """thm <- {lem-a, lem-b} <- def, plus an unrelated corollary of thm."""
    nodes = [
        make_node("def", "definition", line=1),
        make_node("lem-a", "lemma", line=5),
        make_node("lem-b", "lemma", line=9),
        make_node("thm", "theorem", line=20),
        make_node("cor", "corollary", line=30),
    ]
    edges = [
        uses("def", "lem-a"),
        uses("def", "lem-b"),
        uses("lem-a", "thm"),
        uses("lem-b", "thm"),
        uses("thm", "cor"),
    ]
    return build_session(nodes, edges)


@pytest.fixture
def export_document(chain_nodes, chain_edges):
    """Wrapped export document built from the chain."""
    nodes = [dict(n) for n in chain_nodes]
    nodes[1]["prerequisite_defs"] = {"compact": "Every open cover has a finite subcover."}
    return {
        "graph": {
            "nodes": nodes,
            "edges": chain_edges,
            "arxiv_id": "2401.00001",
            "stats": {"node_count": 4},
        },
        "definition_bank": {"Hausdorff": {"definition": "Distinct points have disjoint neighbourhoods."}},
        "artifact_to_terms_map": {"thm-1": ["Hausdorff", "metrizable"]},
        "latex_macros": {"\\R": "\\mathbb{R}"},
    }


@pytest.fixture
def export_file(tmp_path, export_document):
    """Wrapped export document written to disk."""
    path = tmp_path / "paper.json"
    path.write_text(json.dumps(export_document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path):
    """Keep user config files and CONSTELLATIONS_* variables out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("CONSTELLATIONS_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
