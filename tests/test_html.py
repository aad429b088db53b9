"""Tests for the HTML distillation renderer."""

import pytest

pytest.importorskip("jinja2")

from constellations.html import DistillHTMLGenerator  # noqa: E402


class TestDistillHTMLGenerator:
    """The rendered page lists every artifact and escapes content."""

    @pytest.fixture
    def model(self, chain_session):
        chain_session.enter_proof_mode("thm-1")
        chain_session.unfold_more()
        return chain_session.build_distill_model()

    def test_standalone_document(self, model):
        html = DistillHTMLGenerator(model, version="1.2.3").generate()

        assert html.startswith("<!DOCTYPE html>")
        assert "Distilled proof: Theorem 4" in html
        assert "constellations 1.2.3" in html

    def test_all_artifacts_in_order(self, model):
        html = DistillHTMLGenerator(model).generate()

        assert html.index('id="thm-1"') < html.index('id="lem-1"') < html.index('id="prop-1"')

    def test_colors_applied(self, model, chain_session):
        html = DistillHTMLGenerator(model, node_colors=chain_session.graph.node_colors).generate()

        assert chain_session.graph.node_colors["theorem"] in html

    def test_content_escaped(self, chain_session):
        chain_session.ingest({"type": "node", "data": {"id": "thm-1", "type": "theorem", "content": "a < b"}})
        chain_session.enter_proof_mode("thm-1")
        html = DistillHTMLGenerator(chain_session.build_distill_model()).generate()

        assert "a &lt; b" in html

    def test_undefined_terms_marked(self, chain_session):
        chain_session.terms_map = {"thm-1": ["metrizable"]}
        chain_session.enter_proof_mode("thm-1")
        html = DistillHTMLGenerator(chain_session.build_distill_model()).generate()

        assert "metrizable" in html
        assert 'class="undefined"' in html

    def test_numeric_proof_rendered(self, chain_session):
        chain_session.ingest({"type": "node", "data": {"id": "thm-1", "type": "theorem", "proof": 42}})
        chain_session.enter_proof_mode("thm-1")
        html = DistillHTMLGenerator(chain_session.build_distill_model()).generate()

        assert "42" in html
