"""Mutation types for GraphStore operations.

This module provides dataclasses for tracking store mutations and
dangling edge references.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class BrokenReference:
    """An edge whose source or target is not (yet) a node.

    Broken edges stay in the store and are indexed as soon as the
    missing node arrives.

    Attributes:
        source_id: Prerequisite id ("" when the raw edge had none).
        target_id: Dependent id ("" when the raw edge had none).
        dependency_type: Normalized dependency tag.
        missing: Ids of the endpoints that are absent.
    """

    source_id: str
    target_id: str
    dependency_type: str
    missing: tuple[str, ...] = ()

    def __str__(self) -> str:
        """Human-readable representation."""
        missing = ", ".join(m or "<unnamed>" for m in self.missing)
        return f"{self.source_id} --[{self.dependency_type}]--> {self.target_id} (missing: {missing})"


@dataclass
class MutationEntry:
    """Single store mutation record.

    Attributes:
        revision: Store revision produced by this mutation.
        operation: "upsert_node", "add_edge" or "reset".
        target_id: Node id or EdgeKey affected ("" for reset).
        details: Operation-specific data.
        timestamp: When the mutation occurred.
    """

    revision: int
    operation: str
    target_id: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"[r{self.revision}] {self.operation}({self.target_id})"


class MutationLog:
    """Append-only mutation history with a revision counter.

    The mutation pipeline records which revision it last applied, so
    callers can tell whether the store has pending mutations.

    Example:
        >>> log = MutationLog()
        >>> entry = log.record("upsert_node", "thm-1")
        >>> entry.revision
        1
        >>> log.has_pending()
        True
        >>> log.mark_applied()
        >>> log.has_pending()
        False
    """

    def __init__(self, max_entries: int | None = 10_000) -> None:
        """Initialize an empty mutation log.

        Args:
            max_entries: Oldest entries are discarded beyond this size.
                The revision counter is unaffected.
        """
        self._entries: list[MutationEntry] = []
        self._revision = 0
        self._applied_revision = 0
        self._max_entries = max_entries

    @property
    def revision(self) -> int:
        """Revision of the most recent mutation."""
        return self._revision

    @property
    def applied_revision(self) -> int:
        """Revision last consumed by the mutation pipeline."""
        return self._applied_revision

    def record(self, operation: str, target_id: str, **details: Any) -> MutationEntry:
        """Append a mutation and bump the revision.

        Args:
            operation: Operation name.
            target_id: Affected node id or EdgeKey.
            **details: Operation-specific data.

        Returns:
            The recorded entry.
        """
        self._revision += 1
        entry = MutationEntry(
            revision=self._revision,
            operation=operation,
            target_id=target_id,
            details=dict(details),
        )
        self._entries.append(entry)
        if self._max_entries is not None and len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]
        return entry

    def mark_applied(self) -> None:
        """Record that every mutation so far has been applied."""
        self._applied_revision = self._revision

    def has_pending(self) -> bool:
        """True if mutations were recorded since the last apply."""
        return self._revision != self._applied_revision

    def pending(self) -> list[MutationEntry]:
        """Entries recorded since the last apply, oldest first."""
        return [e for e in self._entries if e.revision > self._applied_revision]

    def iter_entries(self) -> Iterator[MutationEntry]:
        """Iterate over retained entries in chronological order."""
        yield from self._entries

    def __len__(self) -> int:
        """Return the number of retained entries."""
        return len(self._entries)

    def last(self) -> MutationEntry | None:
        """Return the most recent entry, or None if empty."""
        return self._entries[-1] if self._entries else None


__all__ = ["BrokenReference", "MutationEntry", "MutationLog"]
