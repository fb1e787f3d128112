"""HTTP routes for the group/content index and orphan reclamation."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from reclamation.application.strategies import BatchStrategy, OrphanDeletionStrategy
from reclamation.dependencies import (
    get_content_index,
    get_local_content_store,
    get_strategy,
)
from reclamation.domain.value_objects import ContentId
from reclamation.infrastructure.content_store import InMemoryContentStore
from reclamation.ports.exceptions import ProcessingError, StorageError
from reclamation.ports.repositories import IGroupContentIndex
from reclamation.presentation.models import (
    BatchProgressResponse,
    ContentAudienceResponse,
    GroupDeletedRequest,
    GroupDeletedResponse,
    IndexContentRequest,
    ReclamationStatusResponse,
    SweepResultResponse,
)
from shared_kernel.identifiers import GroupId, GroupRef

router = APIRouter(
    prefix="/reclamation",
    tags=["reclamation"],
)


@router.put("/content/{content_id}/audience")
async def index_content(
    content_id: str,
    request: IndexContentRequest,
    index: Annotated[IGroupContentIndex, Depends(get_content_index)],
    local_store: Annotated[
        InMemoryContentStore | None, Depends(get_local_content_store)
    ],
) -> ContentAudienceResponse:
    """Replace the groups a content item belongs to.

    Without a content service the content itself is kept in process, so the
    local store records it alongside the index.

    Raises:
        HTTPException: 400 if a group ID is invalid
    """
    try:
        group_ids = [GroupId.from_string(value) for value in request.group_ids]
        content = ContentId(content_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    await index.index_content(content, group_ids)
    references = await index.references_of(content)
    if local_store is not None:
        await local_store.put(content, references)
    return ContentAudienceResponse(
        content_id=content.value,
        group_ids=[group_id.value for group_id in references],
    )


@router.post(
    "/groups/{group_id}/deleted",
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        503: {"description": "Storage failed; report the deletion again"},
    },
    summary="Report group deletion",
    description=(
        "Called by the entity lifecycle once a group is destroyed. Removes "
        "the group's memberships and starts reclaiming its content."
    ),
)
async def group_deleted(
    group_id: str,
    request: GroupDeletedRequest,
    index: Annotated[IGroupContentIndex, Depends(get_content_index)],
    strategy: Annotated[OrphanDeletionStrategy, Depends(get_strategy)],
) -> GroupDeletedResponse:
    """Publish the deletion of a group."""
    try:
        group_id_obj = GroupId.from_string(group_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid group ID format",
        )

    group = GroupRef(
        id=group_id_obj, entity_type=request.entity_type, bundle=request.bundle
    )
    try:
        await index.on_group_deleted(group)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Group deletion could not be processed: {e}",
        )
    return GroupDeletedResponse(
        group_id=group_id_obj.value,
        strategy=strategy.plugin_id,
        pending=await strategy.pending(),
    )


@router.post(
    "/process",
    responses={
        200: {"description": "Strategy ran"},
        503: {"description": "Storage failed; unreclaimed candidates stay queued"},
    },
)
async def process(
    strategy: Annotated[OrphanDeletionStrategy, Depends(get_strategy)],
) -> SweepResultResponse:
    """Run the configured strategy once."""
    try:
        result = await strategy.process()
    except ProcessingError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(e), "handled": e.result.handled},
        )
    return SweepResultResponse.from_domain(result)


@router.get("/status")
async def reclamation_status(
    strategy: Annotated[OrphanDeletionStrategy, Depends(get_strategy)],
) -> ReclamationStatusResponse:
    """Report the configured strategy and the orphan queue size."""
    progress = None
    if isinstance(strategy, BatchStrategy):
        progress = BatchProgressResponse.from_domain(strategy.progress)
    return ReclamationStatusResponse(
        strategy=strategy.plugin_id,
        deferred=strategy.deferred,
        pending=await strategy.pending(),
        progress=progress,
    )
