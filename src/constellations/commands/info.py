"""
constellations.commands.info - Summarize an exported graph.
"""

from __future__ import annotations

import argparse
import json

from constellations.commands.common import load_session
from constellations.graph.serialize import serialize_graph


def run(args: argparse.Namespace) -> int:
    """Print node/edge counts, type partition, colors and broken references."""
    session = load_session(args)
    graph = session.graph

    if args.json:
        print(json.dumps(serialize_graph(graph)["metadata"], indent=2))
        return 0

    print(f"Nodes: {graph.node_count()}")
    print(f"Edges: {graph.edge_count()} ({graph.indexed_edge_count()} indexed)")

    if graph.node_types:
        print("\nNode types:")
        for node_type in graph.node_types:
            count = len(graph.nodes_by_type.get(node_type, ()))
            print(f"  {node_type:<20} {count:>5}  {graph.node_colors.get(node_type, '')}")

    if graph.edge_types:
        print("\nDependency types:")
        for edge_type in graph.edge_types:
            count = sum(1 for e in graph.edges if e.dependency_type == edge_type)
            print(f"  {edge_type:<20} {count:>5}  {graph.edge_colors.get(edge_type, '')}")

    if graph.broken_references:
        print(f"\nBroken references: {len(graph.broken_references)}")
        if not args.quiet:
            for ref in graph.broken_references:
                print(f"  {ref}")

    return 0
