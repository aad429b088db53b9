"""
constellations.commands.order - Print the reading order of a graph.
"""

from __future__ import annotations

import argparse
import json

from constellations.commands.common import load_session
from constellations.graph.serialize import serialize_node, to_csv


def run(args: argparse.Namespace) -> int:
    """Print every node with its order index."""
    session = load_session(args)
    graph = session.graph

    if args.format == "csv":
        print(to_csv(graph), end="")
    elif args.format == "json":
        print(json.dumps([serialize_node(n) for n in graph.nodes], indent=2))
    else:
        for node in graph.nodes:
            where = str(node.position) if node.position else "?"
            print(f"{node.order_index:>4}  {node.id}  [{node.type}] {node.get_label()}  @{where}")
    return 0
