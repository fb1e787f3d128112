"""Protocol (port) for job queues.

A queue is a durable FIFO with claim semantics: claimed items are invisible
to other consumers until they are acknowledged (removed), released (made
visible again at their original position) or requeued (moved to the tail).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from shared_kernel.queue.value_objects import QueueItem


@runtime_checkable
class IJobQueue(Protocol):
    """A named FIFO of JSON payloads.

    Implementations raise ``shared_kernel.exceptions.StorageError`` when the
    underlying transport fails.
    """

    @property
    def name(self) -> str:
        """The queue name."""
        ...

    async def enqueue(self, payloads: Sequence[dict[str, Any]]) -> int:
        """Append payloads to the tail of the queue.

        Args:
            payloads: JSON-compatible job data, in order

        Returns:
            Number of items enqueued
        """
        ...

    async def claim(self, limit: int) -> list[QueueItem]:
        """Claim up to ``limit`` items from the head of the queue.

        Args:
            limit: Maximum number of items to claim

        Returns:
            Claimed items in FIFO order (empty when nothing is pending)
        """
        ...

    async def ack(self, items: Sequence[QueueItem]) -> None:
        """Remove processed items from the queue permanently."""
        ...

    async def release(self, items: Sequence[QueueItem]) -> None:
        """Return claimed items to the queue at their original position."""
        ...

    async def requeue(self, item: QueueItem) -> None:
        """Move a claimed item to the tail, keeping its attempt count and error."""
        ...

    async def dead_letter(self, item: QueueItem) -> None:
        """Park a claimed item permanently; it is never claimed again."""
        ...

    async def size(self) -> int:
        """Number of items waiting to be claimed."""
        ...
