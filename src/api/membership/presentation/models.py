"""Pydantic models for membership API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from membership.application.actions import ActionResult
from membership.domain.aggregates import GroupType, Membership
from membership.domain.value_objects import MembershipState


class RegisterGroupTypeRequest(BaseModel):
    """Request model for registering a group type."""

    entity_type: str = Field(..., description="Entity type of the groups", min_length=1)
    bundle: str = Field(..., description="Bundle of the groups", min_length=1)
    roles: list[str] | None = Field(
        default=None,
        description="Role names; the configured defaults when omitted",
    )


class GroupTypeResponse(BaseModel):
    """Response model for a group type."""

    entity_type: str
    bundle: str
    roles: list[str]

    @classmethod
    def from_domain(cls, group_type: GroupType) -> GroupTypeResponse:
        """Convert a GroupType aggregate to an API response."""
        return cls(
            entity_type=group_type.id.entity_type,
            bundle=group_type.id.bundle,
            roles=list(group_type.roles),
        )


class CreateMembershipRequest(BaseModel):
    """Request model for creating a membership."""

    group_id: str = Field(..., description="Group ID (ULID format)")
    entity_type: str = Field(..., description="Group entity type", min_length=1)
    bundle: str = Field(..., description="Group bundle", min_length=1)
    user_id: str = Field(..., description="User ID (ULID format)")
    state: MembershipState = Field(
        default=MembershipState.ACTIVE, description="Initial state"
    )
    roles: list[str] = Field(default_factory=list, description="Initial roles")


class UpdateStateRequest(BaseModel):
    """Request model for a state transition."""

    state: MembershipState = Field(..., description="Target state")


class MembershipResponse(BaseModel):
    """Response model for a membership."""

    group_id: str = Field(..., description="Group ID (ULID format)")
    entity_type: str
    bundle: str
    user_id: str = Field(..., description="User ID (ULID format)")
    state: MembershipState
    roles: list[str]
    created_at: datetime
    changed_at: datetime

    @classmethod
    def from_domain(cls, membership: Membership) -> MembershipResponse:
        """Convert a Membership aggregate to an API response."""
        return cls(
            group_id=membership.group.id.value,
            entity_type=membership.group.entity_type,
            bundle=membership.group.bundle,
            user_id=membership.user_id.value,
            state=membership.state,
            roles=list(membership.roles),
            created_at=membership.created_at,
            changed_at=membership.changed_at,
        )


class IsMemberResponse(BaseModel):
    """Response model for a membership check."""

    is_member: bool
    states: list[MembershipState]


class MembershipKeyModel(BaseModel):
    """Identifies one membership by group and user."""

    group_id: str = Field(..., description="Group ID (ULID format)")
    user_id: str = Field(..., description="User ID (ULID format)")


class ExecuteActionRequest(BaseModel):
    """Request model for running an action over memberships."""

    configuration: dict[str, Any] = Field(
        default_factory=dict, description="Action configuration"
    )
    memberships: list[MembershipKeyModel] = Field(
        ..., description="Target memberships", min_length=1
    )


class ActionResultResponse(BaseModel):
    """Outcome of an action on one membership."""

    group_id: str
    user_id: str
    success: bool
    error: str | None = None

    @classmethod
    def from_result(cls, result: ActionResult) -> ActionResultResponse:
        """Convert an ActionResult to an API response."""
        return cls(
            group_id=result.membership.group.id.value,
            user_id=result.membership.user_id.value,
            success=result.success,
            error=result.error,
        )


class ExecuteActionResponse(BaseModel):
    """Response model for a bulk action run."""

    plugin_id: str
    succeeded: int
    failed: int
    results: list[ActionResultResponse]
