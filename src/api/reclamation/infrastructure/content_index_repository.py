"""PostgreSQL implementation of IGroupContentIndex.

The og_group_content table holds one row per (content, group) link. The
forward direction is read by content_id, the reverse direction through the
group_id index.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reclamation.domain.value_objects import ContentId
from reclamation.infrastructure.content_index import unique
from reclamation.infrastructure.models import GroupContentModel
from reclamation.ports.exceptions import StorageError
from shared_kernel.events import EventDispatcher, GroupDeleted
from shared_kernel.identifiers import GroupId, GroupRef


class GroupContentIndexRepository:
    """Content index stored in the og_group_content table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: EventDispatcher,
    ) -> None:
        """Initialize repository.

        Args:
            session_factory: Factory for creating database sessions
            dispatcher: Dispatcher that receives GroupDeleted events
        """
        self._session_factory = session_factory
        self._dispatcher = dispatcher

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating database failures to StorageError."""
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(f"Group content index storage failed: {e}") from e

    async def index_content(
        self, content_id: ContentId, group_ids: Iterable[GroupId]
    ) -> None:
        """Replace the content's links in a single transaction."""
        groups = unique(group_ids)
        async with self._session() as session:
            await session.execute(
                delete(GroupContentModel).where(
                    GroupContentModel.content_id == content_id.value
                )
            )
            session.add_all(
                [
                    GroupContentModel(
                        content_id=content_id.value,
                        group_id=group_id.value,
                        delta=delta,
                    )
                    for delta, group_id in enumerate(groups)
                ]
            )
            await session.commit()

    async def remove_content(self, content_id: ContentId) -> None:
        """Remove every link of a content item."""
        await self.index_content(content_id, [])

    async def references_of(self, content_id: ContentId) -> list[GroupId]:
        """Return the groups a content item references, ordered by delta."""
        stmt = (
            select(GroupContentModel.group_id)
            .where(GroupContentModel.content_id == content_id.value)
            .order_by(GroupContentModel.delta)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return [GroupId(value=value) for value in result.scalars().all()]

    async def content_referencing(self, group_id: GroupId) -> AsyncIterator[ContentId]:
        """Iterate a snapshot of the content referencing a group."""
        stmt = (
            select(GroupContentModel.content_id)
            .where(GroupContentModel.group_id == group_id.value)
            .order_by(GroupContentModel.content_id)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            snapshot = list(result.scalars().all())
        for value in snapshot:
            yield ContentId(value)

    async def on_group_deleted(self, group: GroupRef) -> None:
        """Publish GroupDeleted for a destroyed group."""
        await self._dispatcher.publish(GroupDeleted(group=group))
