"""Unit tests for the Membership aggregate."""

import pytest

from membership.domain.aggregates import Membership
from membership.domain.exceptions import InvalidTransitionError
from membership.domain.value_objects import MembershipKey, MembershipState
from shared_kernel.identifiers import GroupId, GroupRef, UserId


@pytest.fixture
def membership() -> Membership:
    """Create an active membership."""
    return Membership.create(
        group=GroupRef(id=GroupId.generate(), entity_type="node", bundle="club"),
        user_id=UserId.generate(),
    )


class TestCreate:
    """Tests for Membership.create."""

    def test_defaults_to_active_without_roles(self, membership):
        """A new membership is active and holds no roles."""
        assert membership.state == MembershipState.ACTIVE
        assert membership.roles == []
        assert membership.created_at == membership.changed_at

    def test_duplicate_roles_are_dropped(self):
        """Initial roles form an ordered set."""
        membership = Membership.create(
            group=GroupRef(GroupId.generate(), "node", "club"),
            user_id=UserId.generate(),
            roles=["moderator", "administrator", "moderator"],
        )
        assert membership.roles == ["moderator", "administrator"]

    def test_key_identifies_user_and_group(self, membership):
        """The key is the (user, group) pair."""
        assert membership.key == MembershipKey(
            user_id=membership.user_id, group_id=membership.group.id
        )


class TestTransitions:
    """Tests for state transitions."""

    @pytest.mark.parametrize(
        "start,target",
        [
            (MembershipState.ACTIVE, MembershipState.BLOCKED),
            (MembershipState.PENDING, MembershipState.ACTIVE),
            (MembershipState.BLOCKED, MembershipState.ACTIVE),
        ],
    )
    def test_allowed_transitions(self, membership, start, target):
        """Allowed transitions change state and bump changed_at."""
        membership.state = start
        before = membership.changed_at

        assert membership.transition_to(target) is True
        assert membership.state == target
        assert membership.changed_at >= before

    @pytest.mark.parametrize(
        "start,target",
        [
            (MembershipState.ACTIVE, MembershipState.PENDING),
            (MembershipState.BLOCKED, MembershipState.PENDING),
            (MembershipState.PENDING, MembershipState.BLOCKED),
        ],
    )
    def test_refused_transitions(self, membership, start, target):
        """Other transitions raise and leave the state alone."""
        membership.state = start

        with pytest.raises(InvalidTransitionError):
            membership.transition_to(target)
        assert membership.state == start

    @pytest.mark.parametrize("state", list(MembershipState))
    def test_same_state_is_noop(self, membership, state):
        """Re-entering the current state changes nothing."""
        membership.state = state
        before = membership.changed_at

        assert membership.transition_to(state) is False
        assert membership.changed_at == before


class TestRoles:
    """Tests for role changes."""

    def test_add_role_is_idempotent(self, membership):
        """Adding a held role changes nothing."""
        assert membership.add_role("moderator") is True
        assert membership.add_role("moderator") is False
        assert membership.roles == ["moderator"]

    def test_remove_role_is_idempotent(self, membership):
        """Removing an absent role changes nothing."""
        membership.add_role("moderator")

        assert membership.remove_role("moderator") is True
        assert membership.remove_role("moderator") is False
        assert membership.roles == []

    def test_copy_is_independent(self, membership):
        """Changing a copy does not change the original."""
        clone = membership.copy()
        clone.add_role("administrator")

        assert membership.roles == []
        assert clone == Membership(
            group=membership.group,
            user_id=membership.user_id,
            state=membership.state,
            roles=["administrator"],
            created_at=membership.created_at,
            changed_at=clone.changed_at,
        )
