"""
constellations.commands.proof_cmd - Show the proof subgraph of an artifact.
"""

from __future__ import annotations

import argparse
import json

from constellations.commands.common import load_session
from constellations.graph.proof import prerequisite_distances
from constellations.graph.serialize import serialize_proof_state
from constellations.session import GraphSession


def unfold_to(session: GraphSession, target_id: str, depth: int) -> None:
    """Enter proof mode on target_id and unfold until depth or the deepest layer."""
    session.enter_proof_mode(target_id)
    while session.proof.depth < depth:
        before = session.proof.depth
        session.unfold_more()
        if session.proof.depth == before:
            break


def run(args: argparse.Namespace) -> int:
    """Print the prerequisites visible at the requested depth."""
    if args.depth < 1:
        raise ValueError("--depth must be at least 1")

    session = load_session(args)
    unfold_to(session, args.target, args.depth)
    state = session.proof
    graph = session.graph

    if args.json:
        print(json.dumps(serialize_proof_state(state, graph), indent=2))
        return 0

    distances = prerequisite_distances(args.target, graph.incoming_edges_by_target, state.depth)
    print(
        f"Proof of {args.target} at depth {state.depth} "
        f"(max {session.max_proof_depth()}): "
        f"{len(state.visible_nodes)} nodes, {len(state.visible_edges)} edges"
    )
    for node in graph.nodes:
        if node.id not in state.visible_nodes:
            continue
        indent = "  " * distances.get(node.id, 0)
        print(f"{indent}{node.id}  [{node.type}] {node.get_label()}")
    return 0
