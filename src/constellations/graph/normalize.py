"""Edge normalization - unify raw dependency directions.

Extractors emit edges in mixed conventions: some "X uses Y" edges point
dependent -> prerequisite, others the opposite. Every consumer assumes
prerequisite -> dependent, so edges are rewritten exactly once, here,
before they enter the store.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from constellations.graph.relations import DependencyType, Edge

logger = logging.getLogger(__name__)

# Raw tags meaning "source uses target": flipped and relabeled used_in
USES_TYPES = frozenset({"uses_result", "uses_definition", "is_corollary_of"})

# Raw tags meaning "source generalizes target": flipped and relabeled generalized_by
GENERALIZATION_TYPES = frozenset({"is_generalization_of", "generalized_by"})

# Raw tags that carry no dependency at all
DROPPED_TYPES = frozenset({"provides_remark"})


def _endpoint_id(value: Any) -> str:
    """Reduce an endpoint to its node id.

    Endpoints may already be resolved node objects (mappings with an
    ``id``); missing endpoints become the empty string.
    """
    if isinstance(value, Mapping):
        value = value.get("id")
    if value is None:
        return ""
    return str(value)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def normalize_edge(raw: Mapping[str, Any]) -> Edge | None:
    """Rewrite a raw edge into the prerequisite -> dependent convention.

    Rules (first match wins):
        used_in                                     kept as-is
        uses_result / uses_definition /
        is_corollary_of                             swap, relabel used_in
        is_generalization_of / generalized_by       swap, relabel generalized_by
        internal with reference_type or type
        also "internal"                             swap, keep internal
        provides_remark                             dropped
        anything else                               passed through

    Args:
        raw: Raw edge dict with ``source``, ``target`` and optional
            ``dependency_type``, ``reference_type``/``referenceType``,
            ``type``, ``context`` and ``dependency``.

    Returns:
        The normalized Edge, or None if the edge is dropped.
    """
    dep = raw.get("dependency_type") or DependencyType.INTERNAL.value
    if not isinstance(dep, str):
        # Malformed tags never match a rule; they pass through as text
        dep = str(dep)
    ref = raw.get("reference_type") or raw.get("referenceType")
    typ = raw.get("type")

    source = _endpoint_id(raw.get("source"))
    target = _endpoint_id(raw.get("target"))

    if dep == DependencyType.USED_IN.value:
        pass
    elif dep in USES_TYPES:
        source, target = target, source
        dep = DependencyType.USED_IN.value
    elif dep in GENERALIZATION_TYPES:
        source, target = target, source
        dep = DependencyType.GENERALIZED_BY.value
    elif dep == DependencyType.INTERNAL.value and "internal" in (ref, typ):
        source, target = target, source
    elif dep in DROPPED_TYPES:
        logger.debug("Dropping %s edge %s -> %s", dep, source, target)
        return None

    return Edge(
        source=source,
        target=target,
        dependency_type=str(dep),
        reference_type=_optional_str(ref),
        edge_type=_optional_str(typ),
        context=_optional_str(raw.get("context")),
        dependency=_optional_str(raw.get("dependency")),
    )


__all__ = ["normalize_edge", "USES_TYPES", "GENERALIZATION_TYPES", "DROPPED_TYPES"]
