"""In-memory implementation of IGroupContentIndex."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable

from reclamation.domain.value_objects import ContentId
from shared_kernel.events import EventDispatcher, GroupDeleted
from shared_kernel.identifiers import GroupId, GroupRef


def unique(group_ids: Iterable[GroupId]) -> list[GroupId]:
    """Drop duplicate group ids, keeping the first occurrence."""
    return list(dict.fromkeys(group_ids))


class InMemoryGroupContentIndex:
    """Dictionary-backed content index.

    Keeps a forward map (content to its groups) and a reverse map (group to
    its content). Both are updated under one asyncio lock, so every write is
    atomic with respect to readers on the same event loop.
    """

    def __init__(self, dispatcher: EventDispatcher) -> None:
        self._dispatcher = dispatcher
        self._forward: dict[ContentId, list[GroupId]] = {}
        self._reverse: dict[GroupId, dict[ContentId, None]] = {}
        self._lock = asyncio.Lock()

    async def index_content(
        self, content_id: ContentId, group_ids: Iterable[GroupId]
    ) -> None:
        """Replace the content's group references."""
        groups = unique(group_ids)
        async with self._lock:
            self._unlink(content_id)
            if not groups:
                return
            self._forward[content_id] = groups
            for group_id in groups:
                self._reverse.setdefault(group_id, {})[content_id] = None

    async def remove_content(self, content_id: ContentId) -> None:
        """Remove every link of a content item."""
        async with self._lock:
            self._unlink(content_id)

    async def references_of(self, content_id: ContentId) -> list[GroupId]:
        """Return the groups a content item references."""
        async with self._lock:
            return list(self._forward.get(content_id, []))

    async def content_referencing(self, group_id: GroupId) -> AsyncIterator[ContentId]:
        """Iterate a snapshot of the content referencing a group."""
        async with self._lock:
            snapshot = list(self._reverse.get(group_id, {}))
        for content_id in snapshot:
            yield content_id

    async def on_group_deleted(self, group: GroupRef) -> None:
        """Publish GroupDeleted for a destroyed group."""
        await self._dispatcher.publish(GroupDeleted(group=group))

    def _unlink(self, content_id: ContentId) -> None:
        for group_id in self._forward.pop(content_id, []):
            linked = self._reverse.get(group_id)
            if linked is None:
                continue
            linked.pop(content_id, None)
            if not linked:
                del self._reverse[group_id]
