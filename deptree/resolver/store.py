"""Per-request memo of dependency nodes, keyed by name and resolved version."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from deptree.models.node import DependencyNode, NodeKey


class EntryStatus(str, Enum):
    """Lifecycle of a store entry."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class StoreEntry:
    """The canonical node for one (name, version) key.

    Attributes:
        key: Store key.
        node: Canonical node shared by every edge that reaches the key.
        status: Entry status.
        reason: Failure reason when status is FAILED.
    """

    key: NodeKey
    node: DependencyNode
    status: EntryStatus = EntryStatus.PENDING
    reason: Optional[str] = None


class NodeStore:
    """Concurrency-safe registry of nodes that are resolved or in flight.

    The first caller of ``get_or_create`` for a key owns the node's
    expansion; everyone else gets the same entry back and only references its
    node. One coarse lock guards the whole map.
    """

    def __init__(self) -> None:
        self._entries: dict[NodeKey, StoreEntry] = {}
        self._lock = asyncio.Lock()

    async def get_or_create(
        self,
        key: NodeKey,
        node: DependencyNode,
    ) -> tuple[StoreEntry, bool]:
        """Return the entry for ``key``, creating it around ``node`` if absent.

        Args:
            key: Store key.
            node: Candidate canonical node, used only when the key is new.

        Returns:
            Tuple of the entry and whether this call created it.
        """
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                return entry, False
            entry = StoreEntry(key=key, node=node)
            self._entries[key] = entry
            return entry, True

    async def mark_resolved(self, key: NodeKey, node: DependencyNode) -> None:
        """Record that the owner finished expanding ``key``.

        Raises:
            KeyError: If the key was never created.
            ValueError: If ``node`` is not the canonical node of the entry.
        """
        async with self._lock:
            entry = self._entries[key]
            if entry.node is not node:
                raise ValueError(f"{key} is owned by a different node")
            entry.status = EntryStatus.RESOLVED

    async def mark_failed(self, key: NodeKey, reason: str) -> None:
        """Record that expanding ``key`` failed.

        Raises:
            KeyError: If the key was never created.
        """
        async with self._lock:
            entry = self._entries[key]
            entry.status = EntryStatus.FAILED
            entry.reason = reason

    def stats(self) -> dict[str, int]:
        """Count entries per status."""
        counts = {status.value: 0 for status in EntryStatus}
        for entry in self._entries.values():
            counts[entry.status.value] += 1
        counts["total"] = len(self._entries)
        return counts

    def __len__(self) -> int:
        return len(self._entries)
