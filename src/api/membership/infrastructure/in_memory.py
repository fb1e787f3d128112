"""In-memory implementations of the membership repositories.

Used by the ``memory`` storage backend and by tests. Aggregates are copied
on the way in and on the way out, so callers never share mutable state with
the store and every write replaces a whole record.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from membership.domain.aggregates import GroupType, Membership
from membership.domain.value_objects import GroupTypeId, MembershipKey, MembershipState
from membership.ports.exceptions import ConflictError, NotFoundError
from shared_kernel.identifiers import GroupId, UserId


class InMemoryMembershipRepository:
    """Dictionary-backed membership store keyed by MembershipKey.

    Thread-safety: safe for tasks sharing one event loop; every operation
    runs under a single asyncio lock.
    """

    def __init__(self) -> None:
        self._store: dict[MembershipKey, Membership] = {}
        self._lock = asyncio.Lock()

    async def add(self, membership: Membership) -> None:
        """Persist a new membership, refusing duplicates."""
        async with self._lock:
            if membership.key in self._store:
                raise ConflictError(f"Membership {membership.key} already exists")
            self._store[membership.key] = membership.copy()

    async def get(self, key: MembershipKey) -> Membership | None:
        """Retrieve a membership by key."""
        async with self._lock:
            membership = self._store.get(key)
            return membership.copy() if membership else None

    async def save(self, membership: Membership) -> None:
        """Replace an existing membership."""
        async with self._lock:
            if membership.key not in self._store:
                raise NotFoundError(f"Membership {membership.key} not found")
            self._store[membership.key] = membership.copy()

    async def delete(self, key: MembershipKey) -> bool:
        """Delete a membership."""
        async with self._lock:
            return self._store.pop(key, None) is not None

    async def list_by_group(
        self, group_id: GroupId, states: Iterable[MembershipState]
    ) -> list[Membership]:
        """List a group's memberships in the given states."""
        wanted = frozenset(states)
        async with self._lock:
            return [
                m.copy()
                for key, m in self._store.items()
                if key.group_id == group_id and m.state in wanted
            ]

    async def list_by_user(
        self, user_id: UserId, states: Iterable[MembershipState]
    ) -> list[Membership]:
        """List a user's memberships in the given states."""
        wanted = frozenset(states)
        async with self._lock:
            return [
                m.copy()
                for key, m in self._store.items()
                if key.user_id == user_id and m.state in wanted
            ]

    async def delete_by_group(self, group_id: GroupId) -> int:
        """Delete every membership of a group."""
        async with self._lock:
            doomed = [key for key in self._store if key.group_id == group_id]
            for key in doomed:
                del self._store[key]
            return len(doomed)

    async def delete_by_user(self, user_id: UserId) -> int:
        """Delete every membership of a user."""
        async with self._lock:
            doomed = [key for key in self._store if key.user_id == user_id]
            for key in doomed:
                del self._store[key]
            return len(doomed)


class InMemoryGroupTypeRepository:
    """Dictionary-backed group type registry.

    Group types are configuration: they are registered at startup from
    settings or through the API, and are not persisted across restarts.
    """

    def __init__(self) -> None:
        self._store: dict[GroupTypeId, GroupType] = {}

    async def save(self, group_type: GroupType) -> None:
        """Create or replace a group type."""
        self._store[group_type.id] = GroupType(
            id=group_type.id, roles=list(group_type.roles)
        )

    async def get(self, type_id: GroupTypeId) -> GroupType | None:
        """Retrieve a group type."""
        group_type = self._store.get(type_id)
        if group_type is None:
            return None
        return GroupType(id=group_type.id, roles=list(group_type.roles))

    async def list_all(self) -> list[GroupType]:
        """List every registered group type."""
        return [
            GroupType(id=group_type.id, roles=list(group_type.roles))
            for group_type in self._store.values()
        ]
