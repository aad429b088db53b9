"""Tests for loading exported graph documents."""

import json

import pytest

from constellations.exceptions import ExportLoadError
from constellations.graph.factory import ExportPayload, build_session, load_export


class TestLoadExport:
    """Wrapped and bare layouts load; broken files raise ExportLoadError."""

    def test_wrapped(self, export_file):
        export = load_export(export_file)

        assert len(export.nodes) == 4
        assert len(export.edges) == 3
        assert export.arxiv_id == "2401.00001"
        assert export.terms_map == {"thm-1": ["Hausdorff", "metrizable"]}
        assert export.latex_macros == {"\\R": "\\mathbb{R}"}

    def test_bare(self, tmp_path):
        path = tmp_path / "bare.json"
        path.write_text(json.dumps({"nodes": [{"id": "A"}], "edges": []}), encoding="utf-8")

        export = load_export(path)

        assert [n["id"] for n in export.nodes] == ["A"]
        assert export.definition_bank == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExportLoadError, match="missing.json"):
            load_export(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{nodes: ", encoding="utf-8")

        with pytest.raises(ExportLoadError, match="invalid JSON"):
            load_export(path)

    def test_not_an_object(self):
        with pytest.raises(ExportLoadError, match="not a JSON object"):
            ExportPayload.from_dict([1, 2, 3])

    def test_nodes_not_a_list(self):
        with pytest.raises(ExportLoadError, match="'nodes' is not a list"):
            ExportPayload.from_dict({"nodes": {"id": "A"}})

    @pytest.mark.parametrize(
        "key, value",
        [("artifact_to_terms_map", ["thm-1"]), ("definition_bank", "compact"), ("latex_macros", 3)],
    )
    def test_optional_section_not_an_object(self, key, value):
        with pytest.raises(ExportLoadError, match=f"'{key}' is not an object"):
            ExportPayload.from_dict({"nodes": [], "edges": [], key: value})

    def test_null_optional_sections_empty(self):
        export = ExportPayload.from_dict({"nodes": [], "definition_bank": None, "latex_macros": None})

        assert export.definition_bank == {}
        assert export.latex_macros == {}

    def test_non_object_entries_skipped(self):
        export = ExportPayload.from_dict({"nodes": [{"id": "A"}, "B"], "edges": [None]})

        assert export.nodes == [{"id": "A"}]
        assert export.edges == []


class TestBuildSession:
    """All nodes, then all edges, then one recomputation."""

    def test_populated(self, export_file):
        session = build_session(load_export(export_file))

        assert session.graph.node_count() == 4
        assert session.graph.indexed_edge_count() == 3
        assert [n.id for n in session.graph.nodes] == ["def-1", "lem-1", "prop-1", "thm-1"]
        assert not session.store.mutation_log.has_pending()

    def test_uses_result_edge_normalized(self):
        export = ExportPayload.from_dict(
            {"nodes": [{"id": "A"}, {"id": "B"}], "edges": [{"source": "A", "target": "B", "dependency_type": "uses_result"}]}
        )
        session = build_session(export)

        assert [tuple(e) for e in session.incoming_edges_by_target["A"]] == [("B", "A", "used_in")]

    def test_definitions_flow_into_session(self, export_file):
        session = build_session(load_export(export_file))
        session.enter_proof_mode("thm-1")
        model = session.build_distill_model()
        by_term = {d.term: d for d in model.definitions}

        assert by_term["Hausdorff"].definition == "Distinct points have disjoint neighbourhoods."
        assert not by_term["metrizable"].defined
