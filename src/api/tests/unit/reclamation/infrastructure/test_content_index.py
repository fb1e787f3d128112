"""Unit tests for InMemoryGroupContentIndex."""

from unittest.mock import AsyncMock

import pytest

from reclamation.domain.value_objects import ContentId
from reclamation.infrastructure.content_index import InMemoryGroupContentIndex
from reclamation.ports.repositories import IGroupContentIndex
from shared_kernel.events import EventDispatcher, GroupDeleted
from shared_kernel.identifiers import GroupId


async def _collect(index, group_id):
    return [content_id async for content_id in index.content_referencing(group_id)]


class TestProtocolCompliance:
    """Tests for protocol compliance."""

    def test_implements_protocol(self, content_index):
        """Index should implement IGroupContentIndex."""
        assert isinstance(content_index, IGroupContentIndex)


class TestIndexing:
    """Tests for index maintenance."""

    @pytest.mark.asyncio
    async def test_forward_and_reverse_lookups(self, content_index, group, other_group):
        """Both directions reflect the indexed references."""
        content = ContentId("c1")
        await content_index.index_content(content, [group.id, other_group.id, group.id])

        assert await content_index.references_of(content) == [group.id, other_group.id]
        assert await _collect(content_index, group.id) == [content]
        assert await _collect(content_index, other_group.id) == [content]

    @pytest.mark.asyncio
    async def test_reindex_replaces_references(self, content_index, group, other_group):
        """Re-indexing drops references that are no longer present."""
        content = ContentId("c1")
        await content_index.index_content(content, [group.id, other_group.id])

        await content_index.index_content(content, [other_group.id])

        assert await content_index.references_of(content) == [other_group.id]
        assert await _collect(content_index, group.id) == []

    @pytest.mark.asyncio
    async def test_remove_and_empty_index(self, content_index, group):
        """Removing or indexing with no groups unlinks the content."""
        await content_index.index_content(ContentId("c1"), [group.id])
        await content_index.index_content(ContentId("c2"), [group.id])

        await content_index.remove_content(ContentId("c1"))
        await content_index.index_content(ContentId("c2"), [])

        assert await content_index.references_of(ContentId("c1")) == []
        assert await _collect(content_index, group.id) == []

    @pytest.mark.asyncio
    async def test_iteration_uses_snapshot(self, content_index, group):
        """Changes made while iterating do not disturb the iteration."""
        for name in ("a", "b", "c"):
            await content_index.index_content(ContentId(name), [group.id])

        seen = []
        async for content_id in content_index.content_referencing(group.id):
            seen.append(content_id)
            await content_index.remove_content(content_id)

        assert seen == [ContentId("a"), ContentId("b"), ContentId("c")]

    @pytest.mark.asyncio
    async def test_unknown_group(self, content_index):
        """Unknown groups reference nothing."""
        assert await _collect(content_index, GroupId.generate()) == []


class TestGroupDeletion:
    """Tests for on_group_deleted."""

    @pytest.mark.asyncio
    async def test_publishes_group_deleted(self, group):
        """The deletion is published to subscribers."""
        dispatcher = EventDispatcher()
        handler = AsyncMock()
        dispatcher.subscribe(GroupDeleted, handler)
        index = InMemoryGroupContentIndex(dispatcher)

        await index.on_group_deleted(group)

        event = handler.await_args.args[0]
        assert isinstance(event, GroupDeleted)
        assert event.group == group
