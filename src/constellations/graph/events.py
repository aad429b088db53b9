"""Ingestion events - the closed set of messages a session accepts.

Raw events arrive as ``{"type": "node", "data": {...}}``,
``{"type": "link", "data": {...}}`` or ``{"type": "reset"}``.
``parse_event`` turns them into one of three frozen variants; anything
else is logged and ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeEvent:
    """Insert or overwrite one artifact."""

    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LinkEvent:
    """Add one raw (not yet normalized) edge."""

    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResetEvent:
    """Clear the graph."""


IngestEvent = Union[NodeEvent, LinkEvent, ResetEvent]


def parse_event(raw: Any) -> IngestEvent | None:
    """Parse a raw ingestion event.

    Args:
        raw: Event dict with a ``type`` tag and, for node/link, a ``data``
            mapping.

    Returns:
        The typed event, or None when the event is unknown or malformed.
    """
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring non-object event: %r", raw)
        return None

    kind = raw.get("type")
    if kind == "reset":
        return ResetEvent()
    if kind not in ("node", "link"):
        logger.warning("Ignoring event of unknown type %r", kind)
        return None

    data = raw.get("data")
    if not isinstance(data, Mapping):
        logger.warning("Ignoring %s event without a data object", kind)
        return None
    return NodeEvent(data) if kind == "node" else LinkEvent(data)


__all__ = ["NodeEvent", "LinkEvent", "ResetEvent", "IngestEvent", "parse_event"]
