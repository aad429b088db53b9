"""Proof subgraph engine - bounded-depth prerequisite closures.

Proof mode restricts attention to one target artifact and the layers of
prerequisites it rests on. Depth counts prerequisite layers: at depth 1
the target and its direct prerequisites are visible, at depth 2 their
prerequisites too, and so on. Dependents of the target are never shown.

All operations take the session's ProofState and the incoming adjacency
index explicitly; the state holds only ids and EdgeKeys.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence

from constellations.graph.relations import AdjacencyEntry

logger = logging.getLogger(__name__)

IncomingIndex = Mapping[str, Sequence[AdjacencyEntry]]


class ProofPhase(Enum):
    """States of the proof-mode state machine."""

    INACTIVE = "inactive"
    ACTIVE = "active"


@dataclass
class ProofState:
    """Per-session proof-mode state.

    Attributes:
        active: True while proof mode is entered.
        target_id: The artifact whose proof path is explored.
        depth: Number of prerequisite layers shown (>= 1).
        visible_nodes: Ids within ``depth`` prerequisite hops of the target.
        visible_edges: EdgeKeys whose endpoints are both visible.
    """

    active: bool = False
    target_id: str | None = None
    depth: int = 1
    visible_nodes: set[str] = field(default_factory=set)
    visible_edges: set[str] = field(default_factory=set)

    @property
    def phase(self) -> ProofPhase:
        return ProofPhase.ACTIVE if self.active else ProofPhase.INACTIVE


def prerequisite_distances(
    target_id: str,
    incoming: IncomingIndex,
    max_depth: int | None = None,
) -> dict[str, int]:
    """Breadth-first hop distances from target_id through prerequisite edges.

    Args:
        target_id: Start node (distance 0).
        incoming: Dependent id -> entries whose ``s`` is a prerequisite.
        max_depth: Stop expanding beyond this many hops (None = unbounded).

    Returns:
        Node id -> shortest hop distance, for every node reached.
    """
    distances = {target_id: 0}
    queue: deque[str] = deque([target_id])
    while queue:
        node_id = queue.popleft()
        dist = distances[node_id]
        if max_depth is not None and dist >= max_depth:
            continue
        for entry in incoming.get(node_id, ()):
            if entry.s not in distances:
                distances[entry.s] = dist + 1
                queue.append(entry.s)
    return distances


def max_prereq_depth(target_id: str, incoming: IncomingIndex) -> int:
    """Greatest finite prerequisite hop distance reachable from target_id.

    Returns:
        0 when the target has no prerequisites.
    """
    return max(prerequisite_distances(target_id, incoming).values())


def recompute_proof_subgraph(state: ProofState, incoming: IncomingIndex) -> None:
    """Recompute the visible node and edge sets for the current depth.

    No-op when proof mode is inactive.
    """
    if not state.active or state.target_id is None:
        return

    visible = set(prerequisite_distances(state.target_id, incoming, state.depth))
    visible_edges = set()
    for node_id in visible:
        for entry in incoming.get(node_id, ()):
            if entry.s in visible:
                visible_edges.add(entry.key)

    state.visible_nodes = visible
    state.visible_edges = visible_edges
    logger.debug(
        "Proof subgraph for %s at depth %d: %d nodes, %d edges",
        state.target_id,
        state.depth,
        len(visible),
        len(visible_edges),
    )


def enter_proof_mode(state: ProofState, target_id: str, incoming: IncomingIndex) -> None:
    """Enter proof mode on target_id at depth 1."""
    state.active = True
    state.target_id = target_id
    state.depth = 1
    recompute_proof_subgraph(state, incoming)


def unfold_less(state: ProofState, incoming: IncomingIndex) -> None:
    """Hide one prerequisite layer (depth never drops below 1)."""
    if not state.active:
        return
    state.depth = max(1, state.depth - 1)
    recompute_proof_subgraph(state, incoming)


def unfold_more(state: ProofState, incoming: IncomingIndex) -> None:
    """Reveal one more prerequisite layer if one exists.

    When no deeper layer exists this is a no-op; in particular it never
    lowers the depth, even for a target without prerequisites.
    """
    if not state.active or state.target_id is None:
        return
    deepest = max_prereq_depth(state.target_id, incoming)
    if deepest <= state.depth:
        return
    state.depth = min(deepest, state.depth + 1)
    recompute_proof_subgraph(state, incoming)


def exit_proof_mode(state: ProofState) -> None:
    """Leave proof mode and clear the target, depth and visible sets."""
    state.active = False
    state.target_id = None
    state.depth = 1
    state.visible_nodes = set()
    state.visible_edges = set()


__all__ = [
    "ProofPhase",
    "ProofState",
    "prerequisite_distances",
    "max_prereq_depth",
    "recompute_proof_subgraph",
    "enter_proof_mode",
    "unfold_less",
    "unfold_more",
    "exit_proof_mode",
]
