"""Repository and gateway protocols (ports) for the reclamation context."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from typing import Protocol, runtime_checkable

from reclamation.domain.value_objects import ContentId
from shared_kernel.identifiers import GroupId, GroupRef


@runtime_checkable
class IGroupContentIndex(Protocol):
    """Forward and reverse links between content and the groups it belongs to.

    Implementations raise StorageError when the backing store fails.
    """

    async def index_content(
        self, content_id: ContentId, group_ids: Iterable[GroupId]
    ) -> None:
        """Replace the content's group references atomically.

        Duplicates are dropped, first occurrence order kept. An empty set of
        groups removes the content from the index.
        """
        ...

    async def remove_content(self, content_id: ContentId) -> None:
        """Remove every link of a content item."""
        ...

    async def references_of(self, content_id: ContentId) -> list[GroupId]:
        """Return the groups a content item currently references, in order."""
        ...

    def content_referencing(self, group_id: GroupId) -> AsyncIterator[ContentId]:
        """Iterate the content referencing a group.

        The iteration runs over a snapshot taken when it starts; calling the
        method again starts a fresh snapshot.
        """
        ...

    async def on_group_deleted(self, group: GroupRef) -> None:
        """Report that a group was destroyed.

        Publishes GroupDeleted to every subscriber.

        Raises:
            StorageError: If a subscriber hit a storage failure; reporting
                the deletion again is safe
        """
        ...


@runtime_checkable
class IContentStore(Protocol):
    """Gateway to the external content storage layer."""

    async def exists(self, content_id: ContentId) -> bool:
        """Check whether the content still exists."""
        ...

    async def delete(self, content_id: ContentId) -> bool:
        """Delete content.

        Returns:
            True if deleted, False if it was already gone
        """
        ...

    async def set_references(
        self, content_id: ContentId, group_ids: list[GroupId]
    ) -> bool:
        """Overwrite the content's group audience.

        Returns:
            True if updated, False if the content no longer exists
        """
        ...
