"""Membership application service.

Orchestrates the membership lifecycle: creation against the group type's
role registry, state transitions, role changes, deletion and the cascades
triggered when a group or user goes away.
"""

from __future__ import annotations

from collections.abc import Iterable

from membership.application.observability import (
    DefaultMembershipServiceProbe,
    MembershipServiceProbe,
)
from membership.domain.aggregates import GroupType, Membership
from membership.domain.exceptions import InvalidTransitionError
from membership.domain.value_objects import (
    ALL_STATES,
    GroupTypeId,
    MembershipKey,
    MembershipState,
)
from membership.ports.exceptions import ConflictError, NotFoundError
from membership.ports.repositories import IGroupTypeRepository, IMembershipRepository
from shared_kernel.events import GroupDeleted
from shared_kernel.identifiers import GroupId, GroupRef, UserId
from shared_kernel.locks import KeyedLock

DEFAULT_ROLES: tuple[str, ...] = ("administrator", "moderator")


class MembershipService:
    """Application service for membership management.

    Every mutation of one (user, group) pair runs under a per-key lock and
    re-reads the stored membership inside it, so the membership passed in by
    the caller only identifies the record; it is never written back as is.
    """

    def __init__(
        self,
        membership_repository: IMembershipRepository,
        group_type_repository: IGroupTypeRepository,
        probe: MembershipServiceProbe | None = None,
        locks: KeyedLock | None = None,
        default_roles: Iterable[str] = DEFAULT_ROLES,
    ):
        """Initialize MembershipService with dependencies.

        Args:
            membership_repository: Repository for membership persistence
            group_type_repository: Registry of group types and their roles
            probe: Optional domain probe for observability
            locks: Optional per-key lock shared with other writers
            default_roles: Roles given to group types registered without any
        """
        self._memberships = membership_repository
        self._group_types = group_type_repository
        self._probe = probe or DefaultMembershipServiceProbe()
        self._locks = locks or KeyedLock()
        self._default_roles = tuple(default_roles)

    async def register_group_type(
        self,
        entity_type: str,
        bundle: str,
        roles: Iterable[str] | None = None,
    ) -> GroupType:
        """Register an entity type/bundle pair as a group type.

        Registering an existing group type replaces its role set.

        Args:
            entity_type: Entity type of the groups
            bundle: Bundle of the groups
            roles: Role names; the configured defaults when omitted

        Returns:
            The registered GroupType
        """
        role_names = tuple(roles) if roles is not None else self._default_roles
        group_type = GroupType.create(entity_type, bundle, role_names)
        await self._group_types.save(group_type)

        self._probe.group_type_registered(
            entity_type=entity_type,
            bundle=bundle,
            roles=list(group_type.roles),
        )
        return group_type

    async def create_membership(
        self,
        group: GroupRef,
        user_id: UserId,
        state: MembershipState = MembershipState.ACTIVE,
        roles: Iterable[str] = (),
    ) -> Membership:
        """Create a membership of a user in a group.

        Args:
            group: The group to join
            user_id: The joining user
            state: Initial state
            roles: Initial roles, each defined by the group's type

        Returns:
            The created Membership

        Raises:
            NotFoundError: If the group's type is not registered
            UnknownRoleError: If a role is not defined for the group type
            ConflictError: If the user already has a membership in the group
        """
        role_names = tuple(roles)
        group_type = await self._require_group_type(group)
        group_type.require_roles(role_names)

        membership = Membership.create(
            group=group, user_id=user_id, state=state, roles=role_names
        )
        async with self._locks.hold(membership.key):
            try:
                await self._memberships.add(membership)
            except ConflictError:
                self._probe.membership_conflict(
                    group_id=group.id.value, user_id=user_id.value
                )
                raise

        self._probe.membership_created(
            group_id=group.id.value,
            user_id=user_id.value,
            state=membership.state.value,
            roles=list(membership.roles),
        )
        return membership

    async def get_membership(
        self, group_id: GroupId, user_id: UserId
    ) -> Membership | None:
        """Get the membership of a user in a group, or None."""
        return await self._memberships.get(
            MembershipKey(user_id=user_id, group_id=group_id)
        )

    async def get_group_memberships(
        self,
        group_id: GroupId,
        states: Iterable[MembershipState] = ALL_STATES,
    ) -> list[Membership]:
        """List a group's memberships, optionally filtered by state."""
        return await self._memberships.list_by_group(group_id, states)

    async def get_user_memberships(
        self,
        user_id: UserId,
        states: Iterable[MembershipState] = ALL_STATES,
    ) -> list[Membership]:
        """List a user's memberships, optionally filtered by state."""
        return await self._memberships.list_by_user(user_id, states)

    async def is_member(
        self,
        group_id: GroupId,
        user_id: UserId,
        states: Iterable[MembershipState] = (MembershipState.ACTIVE,),
    ) -> bool:
        """Check whether the user has a membership in one of the given states."""
        membership = await self.get_membership(group_id, user_id)
        return membership is not None and membership.is_in(frozenset(states))

    async def set_state(
        self,
        membership: Membership,
        new_state: MembershipState,
        from_states: Iterable[MembershipState] | None = None,
    ) -> Membership:
        """Move a membership to a new state.

        Args:
            membership: The membership to change
            new_state: The target state
            from_states: When given, the stored state must be one of these
                or already equal new_state

        Returns:
            The stored membership after the change

        Raises:
            NotFoundError: If the membership no longer exists
            InvalidTransitionError: If the transition is not allowed
        """
        allowed = frozenset(from_states) if from_states is not None else None
        async with self._locks.hold(membership.key):
            current = await self._require_membership(membership.key)
            old_state = current.state
            try:
                if allowed is not None and old_state not in allowed | {new_state}:
                    raise InvalidTransitionError(
                        f"Membership {current.key} is {old_state}, "
                        f"expected one of {sorted(s.value for s in allowed)}"
                    )
                changed = current.transition_to(new_state)
            except InvalidTransitionError:
                self._probe.membership_transition_refused(
                    group_id=current.group.id.value,
                    user_id=current.user_id.value,
                    old_state=old_state.value,
                    new_state=new_state.value,
                )
                raise
            if changed:
                await self._memberships.save(current)

        if changed:
            self._probe.membership_state_changed(
                group_id=current.group.id.value,
                user_id=current.user_id.value,
                old_state=old_state.value,
                new_state=new_state.value,
            )
        return current

    async def add_role(self, membership: Membership, role: str) -> Membership:
        """Grant a role; granting a role already held changes nothing.

        Raises:
            NotFoundError: If the membership or its group type does not exist
            UnknownRoleError: If the role is not defined for the group type
        """
        return await self.add_roles(membership, [role])

    async def remove_role(self, membership: Membership, role: str) -> Membership:
        """Revoke a role; revoking a role not held changes nothing.

        Raises:
            NotFoundError: If the membership does not exist
        """
        return await self.remove_roles(membership, [role])

    async def add_roles(
        self, membership: Membership, roles: Iterable[str]
    ) -> Membership:
        """Grant several roles at once.

        Every role is validated before any is applied, so either all roles
        end up granted or the membership is left untouched.
        """
        role_names = tuple(roles)
        async with self._locks.hold(membership.key):
            current = await self._require_membership(membership.key)
            group_type = await self._require_group_type(current.group)
            group_type.require_roles(role_names)
            added = [role for role in role_names if current.add_role(role)]
            if added:
                await self._memberships.save(current)

        if added:
            self._probe.membership_roles_changed(
                group_id=current.group.id.value,
                user_id=current.user_id.value,
                added=added,
                removed=[],
            )
        return current

    async def remove_roles(
        self, membership: Membership, roles: Iterable[str]
    ) -> Membership:
        """Revoke several roles at once."""
        role_names = tuple(roles)
        async with self._locks.hold(membership.key):
            current = await self._require_membership(membership.key)
            removed = [role for role in role_names if current.remove_role(role)]
            if removed:
                await self._memberships.save(current)

        if removed:
            self._probe.membership_roles_changed(
                group_id=current.group.id.value,
                user_id=current.user_id.value,
                added=[],
                removed=removed,
            )
        return current

    async def delete_membership(self, membership: Membership) -> bool:
        """Delete a membership.

        Returns:
            True if it was removed, False if it was already gone
        """
        async with self._locks.hold(membership.key):
            deleted = await self._memberships.delete(membership.key)

        if deleted:
            self._probe.membership_deleted(
                group_id=membership.group.id.value,
                user_id=membership.user_id.value,
            )
        return deleted

    async def on_group_deleted(self, event: GroupDeleted) -> int:
        """Delete every membership of a deleted group.

        Returns:
            Number of memberships removed
        """
        count = await self._memberships.delete_by_group(event.group.id)
        self._probe.memberships_cascaded(
            reason="group_deleted", subject_id=event.group.id.value, count=count
        )
        return count

    async def on_user_deleted(self, user_id: UserId) -> int:
        """Delete every membership of a deleted user.

        Returns:
            Number of memberships removed
        """
        count = await self._memberships.delete_by_user(user_id)
        self._probe.memberships_cascaded(
            reason="user_deleted", subject_id=user_id.value, count=count
        )
        return count

    async def _require_membership(self, key: MembershipKey) -> Membership:
        membership = await self._memberships.get(key)
        if membership is None:
            raise NotFoundError(f"Membership {key} not found")
        return membership

    async def _require_group_type(self, group: GroupRef) -> GroupType:
        type_id = GroupTypeId(entity_type=group.entity_type, bundle=group.bundle)
        group_type = await self._group_types.get(type_id)
        if group_type is None:
            raise NotFoundError(f"Group type {type_id} is not registered")
        return group_type
