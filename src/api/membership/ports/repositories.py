"""Repository protocols (ports) for the membership bounded context."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from membership.domain.aggregates import GroupType, Membership
from membership.domain.value_objects import GroupTypeId, MembershipKey, MembershipState
from shared_kernel.identifiers import GroupId, UserId


@runtime_checkable
class IMembershipRepository(Protocol):
    """Repository for Membership aggregate persistence.

    Memberships are keyed by (user, group). Implementations must make
    ``add`` atomic: of two concurrent adds for the same key exactly one
    succeeds and the other raises ConflictError.
    """

    async def add(self, membership: Membership) -> None:
        """Persist a new membership.

        Raises:
            ConflictError: If a membership with the same key exists
        """
        ...

    async def get(self, key: MembershipKey) -> Membership | None:
        """Retrieve a membership by key, or None if not found."""
        ...

    async def save(self, membership: Membership) -> None:
        """Replace the stored state, roles and changed timestamp.

        Raises:
            NotFoundError: If the membership does not exist
        """
        ...

    async def delete(self, key: MembershipKey) -> bool:
        """Delete a membership.

        Returns:
            True if deleted, False if not found
        """
        ...

    async def list_by_group(
        self, group_id: GroupId, states: Iterable[MembershipState]
    ) -> list[Membership]:
        """List a group's memberships in the given states."""
        ...

    async def list_by_user(
        self, user_id: UserId, states: Iterable[MembershipState]
    ) -> list[Membership]:
        """List a user's memberships in the given states."""
        ...

    async def delete_by_group(self, group_id: GroupId) -> int:
        """Delete every membership of a group and return how many were removed."""
        ...

    async def delete_by_user(self, user_id: UserId) -> int:
        """Delete every membership of a user and return how many were removed."""
        ...


@runtime_checkable
class IGroupTypeRepository(Protocol):
    """Registry of group types and their roles."""

    async def save(self, group_type: GroupType) -> None:
        """Create or replace a group type."""
        ...

    async def get(self, type_id: GroupTypeId) -> GroupType | None:
        """Retrieve a group type, or None if it is not registered."""
        ...

    async def list_all(self) -> list[GroupType]:
        """List every registered group type."""
        ...
