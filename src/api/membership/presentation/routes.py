"""HTTP routes for membership management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from membership.application.actions import ActionManager
from membership.application.services import MembershipService
from membership.dependencies import get_action_manager, get_membership_service
from membership.domain.aggregates import Membership
from membership.domain.exceptions import InvalidTransitionError, UnknownRoleError
from membership.domain.value_objects import MembershipState
from membership.ports.exceptions import (
    ActionConfigurationError,
    ConflictError,
    NotFoundError,
    UnknownActionError,
)
from membership.presentation.models import (
    ActionResultResponse,
    CreateMembershipRequest,
    ExecuteActionRequest,
    ExecuteActionResponse,
    GroupTypeResponse,
    IsMemberResponse,
    MembershipResponse,
    RegisterGroupTypeRequest,
    UpdateStateRequest,
)
from shared_kernel.identifiers import GroupId, GroupRef, UserId

router = APIRouter(
    prefix="/memberships",
    tags=["memberships"],
)


def _parse_ids(group_id: str, user_id: str) -> tuple[GroupId, UserId]:
    try:
        return GroupId.from_string(group_id), UserId.from_string(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid group or user ID format",
        )


async def _require_membership(
    service: MembershipService, group_id: str, user_id: str
) -> Membership:
    group_id_obj, user_id_obj = _parse_ids(group_id, user_id)
    membership = await service.get_membership(group_id_obj, user_id_obj)
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership not found",
        )
    return membership


@router.post(
    "/group-types",
    status_code=status.HTTP_201_CREATED,
    summary="Register group type",
    description="Register an entity type/bundle pair as a group type with its roles",
    responses={
        201: {"description": "Group type registered"},
        400: {"description": "Invalid entity type, bundle or role name"},
    },
)
async def register_group_type(
    request: RegisterGroupTypeRequest,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> GroupTypeResponse:
    """Register a group type, replacing the roles of an existing one."""
    try:
        group_type = await service.register_group_type(
            entity_type=request.entity_type,
            bundle=request.bundle,
            roles=request.roles,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return GroupTypeResponse.from_domain(group_type)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create membership",
    responses={
        201: {"description": "Membership created"},
        400: {"description": "Invalid ID or unknown role"},
        404: {"description": "Group type not registered"},
        409: {"description": "Membership already exists"},
    },
)
async def create_membership(
    request: CreateMembershipRequest,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> MembershipResponse:
    """Create a membership of a user in a group.

    Args:
        request: Group reference, user, initial state and roles
        service: Membership service

    Returns:
        MembershipResponse with the created membership

    Raises:
        HTTPException: 400 if an ID is invalid or a role is unknown
        HTTPException: 404 if the group type is not registered
        HTTPException: 409 if the membership already exists
    """
    group_id, user_id = _parse_ids(request.group_id, request.user_id)
    group = GroupRef(id=group_id, entity_type=request.entity_type, bundle=request.bundle)

    try:
        membership = await service.create_membership(
            group=group,
            user_id=user_id,
            state=request.state,
            roles=request.roles,
        )
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this group",
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except UnknownRoleError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return MembershipResponse.from_domain(membership)


@router.get("/{group_id}/{user_id}")
async def get_membership(
    group_id: str,
    user_id: str,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> MembershipResponse:
    """Get the membership of a user in a group.

    Raises:
        HTTPException: 400 if an ID is invalid
        HTTPException: 404 if there is no such membership
    """
    membership = await _require_membership(service, group_id, user_id)
    return MembershipResponse.from_domain(membership)


@router.get("/{group_id}/{user_id}/is-member")
async def is_member(
    group_id: str,
    user_id: str,
    service: Annotated[MembershipService, Depends(get_membership_service)],
    states: Annotated[list[MembershipState] | None, Query()] = None,
) -> IsMemberResponse:
    """Check whether a user is a member of a group in the given states.

    Only active memberships count when no state is given.
    """
    group_id_obj, user_id_obj = _parse_ids(group_id, user_id)
    wanted = states or [MembershipState.ACTIVE]
    result = await service.is_member(group_id_obj, user_id_obj, wanted)
    return IsMemberResponse(is_member=result, states=wanted)


@router.put(
    "/{group_id}/{user_id}/state",
    responses={
        200: {"description": "State updated"},
        404: {"description": "Membership not found"},
        409: {"description": "Transition not allowed"},
    },
)
async def update_state(
    group_id: str,
    user_id: str,
    request: UpdateStateRequest,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> MembershipResponse:
    """Move a membership to a new state."""
    membership = await _require_membership(service, group_id, user_id)
    try:
        updated = await service.set_state(membership, request.state)
    except InvalidTransitionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership not found",
        )
    return MembershipResponse.from_domain(updated)


@router.delete("/{group_id}/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_membership(
    group_id: str,
    user_id: str,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> Response:
    """Delete a membership. Deleting an absent membership also succeeds."""
    group_id_obj, user_id_obj = _parse_ids(group_id, user_id)
    membership = await service.get_membership(group_id_obj, user_id_obj)
    if membership is not None:
        await service.delete_membership(membership)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/actions/{plugin_id}",
    responses={
        200: {"description": "Action ran; see per-membership results"},
        400: {"description": "Invalid configuration or ID"},
        404: {"description": "Unknown action"},
    },
)
async def execute_action(
    plugin_id: str,
    request: ExecuteActionRequest,
    service: Annotated[MembershipService, Depends(get_membership_service)],
    manager: Annotated[ActionManager, Depends(get_action_manager)],
) -> ExecuteActionResponse:
    """Run a membership action over a list of memberships.

    Memberships that no longer exist are passed to the action by key, so
    the action decides whether that is a success (delete) or a failure.
    """
    try:
        action = manager.create_instance(plugin_id, request.configuration)
    except UnknownActionError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except ActionConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    targets: list[Membership] = []
    for key in request.memberships:
        group_id, user_id = _parse_ids(key.group_id, key.user_id)
        membership = await service.get_membership(group_id, user_id)
        if membership is None:
            membership = Membership(
                group=GroupRef(id=group_id, entity_type="", bundle=""),
                user_id=user_id,
            )
        targets.append(membership)

    results = await action.execute_multiple(targets)
    succeeded = sum(1 for result in results if result.success)
    return ExecuteActionResponse(
        plugin_id=plugin_id,
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=[ActionResultResponse.from_result(result) for result in results],
    )
