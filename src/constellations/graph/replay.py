"""Live replay - reveal nodes one at a time in reading order.

Stepping and scheduling are separate. ``LiveReplay.tick()`` reveals the
next node and every edge that has become revealable; anything able to
call a function periodically can drive it. ``AsyncioScheduler`` drives it
from an asyncio event loop, tests call ``tick()`` directly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Protocol, Sequence

from constellations.graph.relations import AdjacencyEntry

if TYPE_CHECKING:
    from constellations.graph.pipeline import ProcessedGraph

logger = logging.getLogger(__name__)

RevealCallback = Callable[[str, Sequence[str]], None]


class TimerHandle(Protocol):
    """A periodic timer that can be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can invoke a callback at a fixed period."""

    def call_every(self, interval_s: float, callback: Callable[[], Any]) -> TimerHandle: ...


class _RepeatingCall:
    """Re-arms loop.call_later after every run until cancelled."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop, interval_s: float, callback: Callable[[], Any]
    ) -> None:
        self._loop = loop
        self._interval_s = interval_s
        self._callback = callback
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = loop.call_later(interval_s, self._run)

    def _run(self) -> None:
        self._handle = None
        if self._cancelled:
            return
        self._callback()
        if not self._cancelled:
            self._handle = self._loop.call_later(self._interval_s, self._run)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    Args:
        loop: Loop to schedule on. Defaults to the running loop at the
            time ``call_every`` is called.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(self, interval_s: float, callback: Callable[[], Any]) -> _RepeatingCall:
        loop = self._loop or asyncio.get_running_loop()
        return _RepeatingCall(loop, interval_s, callback)


class LiveReplay:
    """Incremental reveal of a graph snapshot in reading order.

    Holds only ids and EdgeKeys. The revealed sets grow monotonically
    between ``start()`` calls; ``stop()`` leaves them in place so a
    stopped replay can still be inspected.

    Args:
        ordered_ids: Node ids in reading order.
        edges: Adjacency entries eligible for reveal.
        interval_ms: Tick period when driven by a scheduler.
        on_reveal: Called with (node_id, newly revealed EdgeKeys) per tick.
        on_complete: Called once when a running replay is exhausted.
    """

    def __init__(
        self,
        ordered_ids: Iterable[str],
        edges: Iterable[AdjacencyEntry],
        interval_ms: int = 1050,
        on_reveal: RevealCallback | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._ordered = list(dict.fromkeys(ordered_ids))
        self._edges = list({e.key: e for e in edges}.values())
        self._interval_ms = interval_ms
        self._on_reveal = on_reveal
        self._on_complete = on_complete

        self._revealed: list[str] = []
        self._visible_nodes: set[str] = set()
        self._visible_edges: set[str] = set()
        self._scheduler: Scheduler | None = None
        self._timer: TimerHandle | None = None

    @classmethod
    def from_graph(cls, graph: ProcessedGraph, **kwargs: Any) -> LiveReplay:
        """Build a replay over a ProcessedGraph's nodes and indexed edges."""
        edges = [e for entries in graph.outgoing_edges_by_source.values() for e in entries]
        return cls([n.id for n in graph.nodes], edges, **kwargs)

    # ─────────────────────────────────────────────────────────────────────
    # Stepping
    # ─────────────────────────────────────────────────────────────────────

    def tick(self) -> bool:
        """Reveal the next node and every edge it completes.

        Returns:
            True if a node was revealed, False once the sequence is
            exhausted (the timer is stopped at that point).
        """
        if self.is_complete:
            was_running = self.is_running
            self.stop()
            if was_running and self._on_complete is not None:
                self._on_complete()
            return False

        node_id = self._ordered[len(self._visible_nodes)]
        self._visible_nodes.add(node_id)
        self._revealed.append(node_id)

        new_edges = []
        for entry in self._edges:
            if (
                entry.key not in self._visible_edges
                and entry.s in self._visible_nodes
                and entry.t in self._visible_nodes
            ):
                self._visible_edges.add(entry.key)
                new_edges.append(entry.key)

        logger.debug("Replay revealed %s (+%d edges)", node_id, len(new_edges))
        if self._on_reveal is not None:
            self._on_reveal(node_id, new_edges)
        return True

    reveal = tick

    # ─────────────────────────────────────────────────────────────────────
    # Timer control
    # ─────────────────────────────────────────────────────────────────────

    def start(self, scheduler: Scheduler) -> None:
        """Restart from nothing, reveal the first node now, then tick periodically."""
        self.stop()
        self._revealed = []
        self._visible_nodes = set()
        self._visible_edges = set()
        self._scheduler = scheduler
        if not self.tick():
            if self._on_complete is not None:
                self._on_complete()
            return
        self._timer = scheduler.call_every(self._interval_ms / 1000, self.tick)

    def stop(self) -> None:
        """Cancel the timer, keeping what has been revealed."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def set_interval_ms(self, interval_ms: int) -> None:
        """Change the tick period, replacing the live timer if running."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._interval_ms = interval_ms
        if self._timer is not None and self._scheduler is not None:
            self._timer.cancel()
            self._timer = self._scheduler.call_every(interval_ms / 1000, self.tick)

    # ─────────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────────

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    @property
    def is_complete(self) -> bool:
        return len(self._visible_nodes) >= len(self._ordered)

    @property
    def visible_nodes(self) -> frozenset[str]:
        return frozenset(self._visible_nodes)

    @property
    def visible_edges(self) -> frozenset[str]:
        return frozenset(self._visible_edges)

    @property
    def revealed_order(self) -> list[str]:
        """Node ids in the order they were revealed."""
        return list(self._revealed)

    def __len__(self) -> int:
        return len(self._ordered)


__all__ = ["AsyncioScheduler", "LiveReplay", "Scheduler", "TimerHandle"]
