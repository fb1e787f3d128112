"""Unit tests for GroupContentIndexRepository.

Tests verify repository behavior with a mocked session factory.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from reclamation.domain.value_objects import ContentId
from reclamation.infrastructure.content_index_repository import (
    GroupContentIndexRepository,
)
from reclamation.ports.exceptions import StorageError
from reclamation.ports.repositories import IGroupContentIndex


@pytest.fixture
def mock_session():
    """Create mock async session."""
    session = AsyncMock()
    session.add_all = MagicMock()
    return session


@pytest.fixture
def session_factory(mock_session):
    """Create a session factory yielding the mock session."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=mock_session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


@pytest.fixture
def repository(session_factory, dispatcher):
    """Create repository with mock dependencies."""
    return GroupContentIndexRepository(session_factory, dispatcher)


def _scalars(values):
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


class TestProtocolCompliance:
    """Tests for protocol compliance."""

    def test_implements_protocol(self, repository):
        """Repository should implement IGroupContentIndex."""
        assert isinstance(repository, IGroupContentIndex)


class TestIndexContent:
    """Tests for index_content."""

    @pytest.mark.asyncio
    async def test_replaces_links_with_ordered_rows(
        self, repository, mock_session, group, other_group
    ):
        """Old links are deleted and new ones inserted with their position."""
        await repository.index_content(
            ContentId("c1"), [other_group.id, group.id, other_group.id]
        )

        delete_sql = str(
            mock_session.execute.call_args.args[0].compile(dialect=postgresql.dialect())
        )
        assert delete_sql.startswith("DELETE FROM og_group_content")
        rows = mock_session.add_all.call_args.args[0]
        assert [(r.group_id, r.delta) for r in rows] == [
            (other_group.id.value, 0),
            (group.id.value, 1),
        ]
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remove_content_inserts_nothing(self, repository, mock_session):
        """Removing content only deletes rows."""
        await repository.remove_content(ContentId("c1"))

        assert mock_session.add_all.call_args.args[0] == []


class TestLookups:
    """Tests for references_of and content_referencing."""

    @pytest.mark.asyncio
    async def test_references_of(self, repository, mock_session, group):
        """Rows map back to group ids."""
        mock_session.execute.return_value = _scalars([group.id.value])

        assert await repository.references_of(ContentId("c1")) == [group.id]

    @pytest.mark.asyncio
    async def test_content_referencing(self, repository, mock_session, group):
        """Rows map back to content ids."""
        mock_session.execute.return_value = _scalars(["a", "b"])

        found = [c async for c in repository.content_referencing(group.id)]

        assert found == [ContentId("a"), ContentId("b")]


class TestErrorTranslation:
    """Database failures surface as StorageError."""

    @pytest.mark.asyncio
    async def test_operational_error_becomes_storage_error(
        self, repository, mock_session
    ):
        """An unreachable database is reported as StorageError."""
        mock_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        with pytest.raises(StorageError):
            await repository.references_of(ContentId("c1"))
