"""GraphNode - Artifact node representation for the dependency graph.

This module provides the node-side data structures:
- ArtifactType: Enum of the canonical artifact categories
- NodePosition: Location of an artifact in the source document
- GraphNode: A single extracted artifact
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

logger = logging.getLogger(__name__)


class ArtifactType(Enum):
    """Canonical artifact categories, in their stable semantic order.

    Node types outside this enum are still accepted; they are simply
    ordered after the canonical ones when colors are assigned.
    """

    THEOREM = "theorem"
    LEMMA = "lemma"
    PROPOSITION = "proposition"
    COROLLARY = "corollary"
    DEFINITION = "definition"
    REMARK = "remark"
    CONJECTURE = "conjecture"
    ASSUMPTION = "assumption"
    PROOF = "proof"
    EXAMPLE = "example"
    CLAIM = "claim"
    FACT = "fact"
    OBSERVATION = "observation"
    EXTERNAL_REFERENCE = "external_reference"
    UNKNOWN = "unknown"


def _as_int(value: Any) -> int | None:
    """Return value if it is a real integer-like number, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class NodePosition:
    """Location of an artifact in the source document.

    All fields are optional; extractors frequently know only the line.
    """

    line_start: int | None = None
    line_end: int | None = None
    col_start: int | None = None
    col_end: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> NodePosition | None:
        """Build a position from raw extractor output.

        Non-numeric values are ignored rather than rejected.

        Returns:
            A NodePosition, or None when data is not a mapping.
        """
        if not isinstance(data, Mapping):
            return None
        return cls(
            line_start=_as_int(data.get("line_start")),
            line_end=_as_int(data.get("line_end")),
            col_start=_as_int(data.get("col_start")),
            col_end=_as_int(data.get("col_end")),
        )

    def to_dict(self) -> dict[str, int]:
        """Return only the fields that are set."""
        result = {}
        for key in ("line_start", "line_end", "col_start", "col_end"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result

    def __str__(self) -> str:
        if self.line_start is None:
            return "?"
        if self.col_start is None:
            return f"{self.line_start}"
        return f"{self.line_start}:{self.col_start}"


@dataclass
class GraphNode:
    """An artifact in the dependency graph.

    Nodes hold no references to other nodes; edges refer to nodes by id
    and adjacency lives in the processed graph.

    Attributes:
        id: Globally unique identifier.
        type: Artifact category (see ArtifactType); unknown values are kept.
        label: Designated label such as "VIII:3-2-3" or "Lemma A.1".
        content: Full text of the artifact.
        content_preview: Shortened text for previews.
        position: Where the artifact appears in the source document.
        order_index: 1-based reading order, assigned by the mutation pipeline.
    """

    id: str
    type: str = ArtifactType.UNKNOWN.value
    label: str | None = None
    content: str = ""
    content_preview: str | None = None
    position: NodePosition | None = None
    order_index: int | None = None

    display_name: str | None = None
    proof: str | None = None
    prerequisite_defs: dict[str, str] = field(default_factory=dict)

    # Raw fields not modelled above, preserved for serialization
    _extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_raw(cls, data: Mapping[str, Any]) -> GraphNode | None:
        """Build a node from a raw extractor dict.

        Args:
            data: Raw node; only ``id`` is required.

        Returns:
            The node, or None when ``id`` is missing.
        """
        raw_id = data.get("id")
        if raw_id is None or raw_id == "":
            logger.warning("Ignoring node without id: %r", dict(data))
            return None

        raw_defs = data.get("prerequisite_defs")
        prerequisite_defs: dict[str, str] = {}
        if isinstance(raw_defs, Mapping):
            prerequisite_defs = {str(k): str(v) for k, v in raw_defs.items() if v is not None}

        known = {
            "id",
            "type",
            "label",
            "content",
            "content_preview",
            "position",
            "orderIndex",
            "display_name",
            "proof",
            "prerequisite_defs",
        }
        return cls(
            id=str(raw_id),
            type=str(data.get("type") or ArtifactType.UNKNOWN.value),
            label=_optional_str(data.get("label")),
            content=str(data.get("content") or ""),
            content_preview=_optional_str(data.get("content_preview")),
            position=NodePosition.from_dict(data.get("position")),
            display_name=_optional_str(data.get("display_name")),
            proof=_optional_str(data.get("proof")),
            prerequisite_defs=prerequisite_defs,
            _extra={k: v for k, v in data.items() if k not in known},
        )

    @property
    def is_canonical_type(self) -> bool:
        """True if the type is one of the ArtifactType values."""
        return self.type in {t.value for t in ArtifactType}

    def get_label(self) -> str:
        """Return the best human-readable name for this node."""
        return self.display_name or self.label or self.id

    def get_preview(self) -> str:
        """Return the preview text, falling back to the full content."""
        return self.content_preview or self.content

    def get_extra(self, key: str, default: Any = None) -> Any:
        """Get a raw field that is not modelled explicitly."""
        return self._extra.get(key, default)
