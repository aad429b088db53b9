"""Tests for ingestion event parsing."""

import logging

import pytest

from constellations.graph.events import LinkEvent, NodeEvent, ResetEvent, parse_event


class TestParseEvent:
    """Raw events become one of three typed variants."""

    def test_node(self):
        event = parse_event({"type": "node", "data": {"id": "A"}})

        assert event == NodeEvent({"id": "A"})

    def test_link(self):
        event = parse_event({"type": "link", "data": {"source": "A", "target": "B"}})

        assert isinstance(event, LinkEvent)
        assert event.data["target"] == "B"

    def test_reset(self):
        assert parse_event({"type": "reset"}) == ResetEvent()

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "explode"},
            {"data": {"id": "A"}},
            {"type": "node"},
            {"type": "link", "data": "A->B"},
            "node",
            None,
        ],
    )
    def test_malformed_ignored(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger="constellations.graph.events"):
            assert parse_event(raw) is None

        assert caplog.records
