"""Relations - Edge types and dependency semantics.

This module defines the typed edges between artifacts:
- DependencyType: Enum of the canonical dependency tags
- Edge: A directed prerequisite -> dependent edge
- AdjacencyEntry: Compact (source, target, dependency) record in the indices
- edge_key: Deterministic identity used for de-duplication
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class DependencyType(Enum):
    """Canonical dependency tags after normalization.

    - USED_IN: source is a result or definition used in target
    - GENERALIZED_BY: target generalizes source
    - INTERNAL: target cross-references source

    Other tags may still appear on edges; they pass through unchanged.
    """

    USED_IN = "used_in"
    GENERALIZED_BY = "generalized_by"
    INTERNAL = "internal"


def edge_key(source: str, target: str) -> str:
    """Return the EdgeKey for a (source, target) pair."""
    return f"{source}=>{target}"


@dataclass(frozen=True)
class Edge:
    """A normalized edge between two artifacts.

    After normalization ``source`` is always the prerequisite and
    ``target`` the dependent; consumers never re-interpret direction.

    Attributes:
        source: Id of the prerequisite node.
        target: Id of the dependent node.
        dependency_type: Dependency tag (see DependencyType).
        reference_type: Raw reference classifier, if the extractor gave one.
        edge_type: Raw ``type`` discriminator, if the extractor gave one.
        context: Local text context of the reference.
        dependency: Free-text justification of the dependency.
    """

    source: str
    target: str
    dependency_type: str = DependencyType.INTERNAL.value
    reference_type: str | None = None
    edge_type: str | None = None
    context: str | None = None
    dependency: str | None = None

    @property
    def key(self) -> str:
        """EdgeKey of this edge."""
        return edge_key(self.source, self.target)

    @property
    def is_complete(self) -> bool:
        """True if both endpoints are named."""
        return bool(self.source) and bool(self.target)

    def as_entry(self) -> AdjacencyEntry:
        """Return the adjacency index record for this edge."""
        return AdjacencyEntry(self.source, self.target, self.dependency_type)


class AdjacencyEntry(NamedTuple):
    """One edge as stored in the adjacency indices."""

    s: str
    t: str
    dep: str

    @property
    def key(self) -> str:
        return edge_key(self.s, self.t)
