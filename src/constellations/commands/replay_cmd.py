"""
constellations.commands.replay_cmd - Replay a graph in reading order.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from constellations.commands.common import load_session
from constellations.graph.replay import AsyncioScheduler
from constellations.session import GraphSession


def _print_reveal(session: GraphSession, node_id: str, new_edges: Sequence[str]) -> None:
    node = session.node_by_id[node_id]
    line = f"{node.order_index:>4}  {node.id}  [{node.type}] {node.get_label()}"
    if new_edges:
        line += f"  (+{len(new_edges)} edges)"
    print(line, flush=True)


async def replay_async(session: GraphSession) -> None:
    """Run a timed replay to completion on the current event loop."""
    loop = asyncio.get_running_loop()
    done = loop.create_future()

    def on_complete() -> None:
        if not done.done():
            done.set_result(None)

    session.start_replay(
        AsyncioScheduler(loop),
        on_reveal=lambda node_id, edges: _print_reveal(session, node_id, edges),
        on_complete=on_complete,
    )
    try:
        await done
    finally:
        session.stop_replay()


def run(args: argparse.Namespace) -> int:
    """Print the reveal sequence, paced by the replay interval unless --instant."""
    session = load_session(args)
    if args.interval_ms is not None:
        session.set_replay_interval_ms(args.interval_ms)

    if args.instant:
        seen: frozenset[str] = frozenset()
        while session.tick_replay():
            visible = session.replay_visible_edges
            _print_reveal(session, session.replay.revealed_order[-1], sorted(visible - seen))
            seen = visible
    else:
        asyncio.run(replay_async(session))

    if not args.quiet:
        print(
            f"Revealed {len(session.replay_visible_nodes)} nodes, "
            f"{len(session.replay_visible_edges)} edges"
        )
    return 0
