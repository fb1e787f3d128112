"""Unit test fixtures with in-memory dependencies."""

import pytest
import pytest_asyncio
from unittest.mock import MagicMock

from infrastructure.queue import InMemoryJobQueue
from membership.application.services import MembershipService
from membership.infrastructure.in_memory import (
    InMemoryGroupTypeRepository,
    InMemoryMembershipRepository,
)
from reclamation.infrastructure.content_index import InMemoryGroupContentIndex
from reclamation.infrastructure.content_store import InMemoryContentStore
from shared_kernel.events import EventDispatcher
from shared_kernel.exceptions import StorageError
from shared_kernel.identifiers import GroupId, GroupRef, UserId

GROUP_ENTITY_TYPE = "node"
GROUP_BUNDLE = "club"
GROUP_ROLES = ["administrator", "moderator"]


@pytest.fixture
def group() -> GroupRef:
    """Provide a group of the registered test group type."""
    return GroupRef(
        id=GroupId.generate(), entity_type=GROUP_ENTITY_TYPE, bundle=GROUP_BUNDLE
    )


@pytest.fixture
def other_group() -> GroupRef:
    """Provide a second group of the same group type."""
    return GroupRef(
        id=GroupId.generate(), entity_type=GROUP_ENTITY_TYPE, bundle=GROUP_BUNDLE
    )


@pytest.fixture
def user_id() -> UserId:
    """Provide a user id."""
    return UserId.generate()


@pytest.fixture
def membership_repository() -> InMemoryMembershipRepository:
    """Provide an empty in-memory membership repository."""
    return InMemoryMembershipRepository()


@pytest.fixture
def mock_membership_probe() -> MagicMock:
    """Provide a mock membership service probe."""
    return MagicMock()


@pytest_asyncio.fixture
async def membership_service(membership_repository, mock_membership_probe):
    """Provide a MembershipService with the test group type registered."""
    service = MembershipService(
        membership_repository,
        InMemoryGroupTypeRepository(),
        probe=mock_membership_probe,
    )
    await service.register_group_type(GROUP_ENTITY_TYPE, GROUP_BUNDLE, GROUP_ROLES)
    return service


@pytest.fixture
def dispatcher() -> EventDispatcher:
    """Provide an event dispatcher with a mock probe."""
    return EventDispatcher(probe=MagicMock())


@pytest.fixture
def content_index(dispatcher) -> InMemoryGroupContentIndex:
    """Provide an empty in-memory content index."""
    return InMemoryGroupContentIndex(dispatcher)


@pytest.fixture
def content_store() -> InMemoryContentStore:
    """Provide an empty in-memory content store."""
    return InMemoryContentStore()


@pytest.fixture
def orphan_queue() -> InMemoryJobQueue:
    """Provide an empty in-memory orphan queue."""
    return InMemoryJobQueue("og_orphaned_group_content")


class FailingJobQueue(InMemoryJobQueue):
    """In-memory queue whose listed operations raise StorageError.

    Add operation names to ``failing`` to break them and discard them to
    heal the queue again.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.failing: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise StorageError(f"queue {operation} failed")

    async def enqueue(self, payloads):
        self._check("enqueue")
        return await super().enqueue(payloads)

    async def claim(self, limit):
        self._check("claim")
        return await super().claim(limit)

    async def release(self, items):
        self._check("release")
        return await super().release(items)

    async def size(self):
        self._check("size")
        return await super().size()


@pytest.fixture
def failing_queue() -> FailingJobQueue:
    """Provide an in-memory orphan queue that can be made to fail."""
    return FailingJobQueue("og_orphaned_group_content")
