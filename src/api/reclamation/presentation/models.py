"""Pydantic models for reclamation API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from reclamation.domain.value_objects import BatchProgress, SweepResult


class IndexContentRequest(BaseModel):
    """Request model for setting a content item's group audience."""

    group_ids: list[str] = Field(
        ..., description="Group IDs (ULID format); empty removes the content"
    )


class ContentAudienceResponse(BaseModel):
    """Response model for a content item's indexed audience."""

    content_id: str
    group_ids: list[str]


class GroupDeletedRequest(BaseModel):
    """Request model reporting a deleted group."""

    entity_type: str = Field(..., description="Group entity type", min_length=1)
    bundle: str = Field(..., description="Group bundle", min_length=1)


class GroupDeletedResponse(BaseModel):
    """Response model acknowledging a group deletion."""

    group_id: str
    strategy: str
    pending: int = Field(..., description="Candidates still queued")


class SweepResultResponse(BaseModel):
    """Response model for one strategy run."""

    strategy: str
    handled: int
    deleted: int
    relinked: int
    skipped: int
    remaining: int
    finished: bool

    @classmethod
    def from_domain(cls, result: SweepResult) -> SweepResultResponse:
        """Convert a SweepResult to an API response."""
        return cls(
            strategy=result.strategy,
            handled=result.handled,
            deleted=result.deleted,
            relinked=result.relinked,
            skipped=result.skipped,
            remaining=result.remaining,
            finished=result.finished,
        )


class BatchProgressResponse(BaseModel):
    """Response model for batch strategy progress."""

    total: int
    processed: int
    percentage: float

    @classmethod
    def from_domain(cls, progress: BatchProgress) -> BatchProgressResponse:
        """Convert BatchProgress to an API response."""
        return cls(
            total=progress.total,
            processed=progress.processed,
            percentage=progress.percentage,
        )


class ReclamationStatusResponse(BaseModel):
    """Response model for the reclamation status."""

    strategy: str
    deferred: bool
    pending: int
    progress: BatchProgressResponse | None = None
