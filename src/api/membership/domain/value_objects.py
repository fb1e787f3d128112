"""Value objects for the membership domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from shared_kernel.identifiers import GroupId, UserId


class MembershipState(StrEnum):
    """States a membership can be in.

    Deletion is not a state: a deleted membership ceases to exist.
    """

    ACTIVE = "active"
    PENDING = "pending"
    BLOCKED = "blocked"


ALL_STATES: frozenset[MembershipState] = frozenset(MembershipState)


@dataclass(frozen=True)
class MembershipKey:
    """Identity of a membership: one user in one group."""

    user_id: UserId
    group_id: GroupId

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.group_id.value}/{self.user_id.value}"


@dataclass(frozen=True)
class GroupTypeId:
    """Identity of a group type: an entity type plus bundle."""

    entity_type: str
    bundle: str

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.entity_type}:{self.bundle}"
