"""Membership aggregate: one user's relation to one group."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from membership.domain.exceptions import InvalidTransitionError
from membership.domain.value_objects import MembershipKey, MembershipState
from shared_kernel.identifiers import GroupRef, UserId

# Reachable states from each state. Staying in the same state is always a no-op.
TRANSITIONS: dict[MembershipState, frozenset[MembershipState]] = {
    MembershipState.ACTIVE: frozenset({MembershipState.BLOCKED}),
    MembershipState.PENDING: frozenset({MembershipState.ACTIVE}),
    MembershipState.BLOCKED: frozenset({MembershipState.ACTIVE}),
}


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Membership:
    """Membership aggregate relating a user to a group.

    Business rules:
    - At most one membership exists per (user, group); enforced by the store
    - State changes follow TRANSITIONS; deletion is always legal and terminal
    - Roles form an ordered set; adding a present role or removing an absent
      one changes nothing
    - Every change bumps changed_at
    """

    group: GroupRef
    user_id: UserId
    state: MembershipState = MembershipState.ACTIVE
    roles: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utc_now)
    changed_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def create(
        cls,
        group: GroupRef,
        user_id: UserId,
        state: MembershipState = MembershipState.ACTIVE,
        roles: list[str] | tuple[str, ...] = (),
    ) -> Membership:
        """Factory method for a new membership.

        Args:
            group: The group the user joins
            user_id: The user
            state: Initial state
            roles: Initial roles; duplicates are dropped, order kept

        Returns:
            A new Membership aggregate
        """
        now = _utc_now()
        membership = cls(
            group=group,
            user_id=user_id,
            state=state,
            created_at=now,
            changed_at=now,
        )
        for role in roles:
            if role not in membership.roles:
                membership.roles.append(role)
        return membership

    @property
    def key(self) -> MembershipKey:
        """The (user, group) identity of this membership."""
        return MembershipKey(user_id=self.user_id, group_id=self.group.id)

    def can_transition_to(self, new_state: MembershipState) -> bool:
        """Check whether new_state is reachable from the current state."""
        return new_state == self.state or new_state in TRANSITIONS[self.state]

    def transition_to(self, new_state: MembershipState) -> bool:
        """Move the membership to a new state.

        Args:
            new_state: The target state

        Returns:
            True if the state changed, False if it already was new_state

        Raises:
            InvalidTransitionError: If new_state is not reachable
        """
        if new_state == self.state:
            return False
        if not self.can_transition_to(new_state):
            raise InvalidTransitionError(
                f"Membership {self.key} cannot move from {self.state} to {new_state}"
            )
        self.state = new_state
        self._touch()
        return True

    def add_role(self, role: str) -> bool:
        """Add a role.

        Returns:
            True if the role was added, False if it was already present
        """
        if role in self.roles:
            return False
        self.roles.append(role)
        self._touch()
        return True

    def remove_role(self, role: str) -> bool:
        """Remove a role.

        Returns:
            True if the role was removed, False if it was not present
        """
        if role not in self.roles:
            return False
        self.roles.remove(role)
        self._touch()
        return True

    def has_role(self, role: str) -> bool:
        """Check if the membership holds a role."""
        return role in self.roles

    def is_in(self, states: frozenset[MembershipState] | set[MembershipState]) -> bool:
        """Check if the membership is in one of the given states."""
        return self.state in states

    def copy(self) -> Membership:
        """Return an independent copy (roles list included)."""
        return replace(self, roles=list(self.roles))

    def _touch(self) -> None:
        self.changed_at = _utc_now()
