"""PostgreSQL implementation of IMembershipRepository.

Each operation opens its own session from the factory and commits before
returning. The composite primary key on og_membership is the final guard
against duplicate memberships: a concurrent insert that loses the race
surfaces as IntegrityError and is reported as ConflictError.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from membership.domain.aggregates import Membership
from membership.domain.value_objects import MembershipKey, MembershipState
from membership.infrastructure.models import MembershipModel
from membership.ports.exceptions import ConflictError, NotFoundError
from membership.ports.repositories import IMembershipRepository
from shared_kernel.identifiers import GroupId, UserId


class MembershipRepository(IMembershipRepository):
    """Repository storing memberships in the og_membership table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Factory for creating database sessions
        """
        self._session_factory = session_factory

    async def add(self, membership: Membership) -> None:
        """Insert a new membership.

        Raises:
            ConflictError: If the (user, group) row already exists
        """
        async with self._session_factory() as session:
            session.add(MembershipModel.from_domain(membership))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError(
                    f"Membership {membership.key} already exists"
                ) from e

    async def get(self, key: MembershipKey) -> Membership | None:
        """Fetch a membership by key."""
        stmt = select(MembershipModel).where(
            MembershipModel.user_id == key.user_id.value,
            MembershipModel.group_id == key.group_id.value,
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            return model.to_domain() if model else None

    async def save(self, membership: Membership) -> None:
        """Overwrite state, roles and changed_at under a row lock.

        Raises:
            NotFoundError: If the membership row does not exist
        """
        stmt = (
            select(MembershipModel)
            .where(
                MembershipModel.user_id == membership.user_id.value,
                MembershipModel.group_id == membership.group.id.value,
            )
            .with_for_update()
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            if model is None:
                raise NotFoundError(f"Membership {membership.key} not found")

            model.state = membership.state.value
            model.roles = list(membership.roles)
            model.changed_at = membership.changed_at
            await session.commit()

    async def delete(self, key: MembershipKey) -> bool:
        """Delete a membership row."""
        stmt = delete(MembershipModel).where(
            MembershipModel.user_id == key.user_id.value,
            MembershipModel.group_id == key.group_id.value,
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    async def list_by_group(
        self, group_id: GroupId, states: Iterable[MembershipState]
    ) -> list[Membership]:
        """List a group's memberships in the given states."""
        stmt = (
            select(MembershipModel)
            .where(MembershipModel.group_id == group_id.value)
            .where(MembershipModel.state.in_([s.value for s in states]))
            .order_by(MembershipModel.created_at)
        )
        return await self._list(stmt)

    async def list_by_user(
        self, user_id: UserId, states: Iterable[MembershipState]
    ) -> list[Membership]:
        """List a user's memberships in the given states."""
        stmt = (
            select(MembershipModel)
            .where(MembershipModel.user_id == user_id.value)
            .where(MembershipModel.state.in_([s.value for s in states]))
            .order_by(MembershipModel.created_at)
        )
        return await self._list(stmt)

    async def delete_by_group(self, group_id: GroupId) -> int:
        """Delete every membership of a group."""
        stmt = delete(MembershipModel).where(MembershipModel.group_id == group_id.value)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def delete_by_user(self, user_id: UserId) -> int:
        """Delete every membership of a user."""
        stmt = delete(MembershipModel).where(MembershipModel.user_id == user_id.value)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def _list(self, stmt) -> list[Membership]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [model.to_domain() for model in result.scalars().all()]
