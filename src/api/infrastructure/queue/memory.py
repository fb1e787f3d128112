"""In-memory implementation of IJobQueue.

Loses its contents on restart. Suitable for development, tests and the
``memory`` storage backend.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from shared_kernel.queue.value_objects import QueueItem


class InMemoryJobQueue:
    """In-process FIFO with claim semantics.

    Items stay in insertion order while claimed, so releasing an item puts
    it back exactly where it was. Safe for concurrent use from tasks on a
    single event loop.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._items: dict[int, QueueItem] = {}
        self._claimed: set[int] = set()
        self._dead: list[QueueItem] = []
        self._next_id = 1
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        """The queue name."""
        return self._name

    async def enqueue(self, payloads: Sequence[dict[str, Any]]) -> int:
        """Append payloads to the tail of the queue."""
        async with self._lock:
            now = datetime.now(UTC)
            for payload in payloads:
                item = QueueItem(id=self._next_id, payload=dict(payload), enqueued_at=now)
                self._items[item.id] = item
                self._next_id += 1
            return len(payloads)

    async def claim(self, limit: int) -> list[QueueItem]:
        """Claim up to ``limit`` unclaimed items from the head."""
        async with self._lock:
            claimed: list[QueueItem] = []
            for item_id, item in self._items.items():
                if len(claimed) >= limit:
                    break
                if item_id in self._claimed:
                    continue
                claimed.append(item)
            self._claimed.update(item.id for item in claimed)
            return claimed

    async def ack(self, items: Sequence[QueueItem]) -> None:
        """Remove processed items."""
        async with self._lock:
            for item in items:
                self._items.pop(item.id, None)
                self._claimed.discard(item.id)

    async def release(self, items: Sequence[QueueItem]) -> None:
        """Make claimed items visible again at their original position."""
        async with self._lock:
            for item in items:
                self._claimed.discard(item.id)

    async def requeue(self, item: QueueItem) -> None:
        """Move an item to the tail under a new id."""
        async with self._lock:
            self._items.pop(item.id, None)
            self._claimed.discard(item.id)
            moved = replace(item, id=self._next_id)
            self._items[moved.id] = moved
            self._next_id += 1

    async def dead_letter(self, item: QueueItem) -> None:
        """Park an item permanently."""
        async with self._lock:
            self._items.pop(item.id, None)
            self._claimed.discard(item.id)
            self._dead.append(item)

    async def size(self) -> int:
        """Number of items waiting to be claimed."""
        async with self._lock:
            return len(self._items) - len(self._claimed)

    def dead_letters(self) -> list[QueueItem]:
        """Items that were dead-lettered, oldest first."""
        return list(self._dead)
