"""Value objects for the reclamation domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from shared_kernel.identifiers import GroupId


@dataclass(frozen=True)
class ContentId:
    """Identifier of a piece of group content.

    Content lives in the external content store, which assigns its own
    identifiers, so any non-empty string is accepted.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("ContentId must not be empty")

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


class ReclaimOutcome(StrEnum):
    """What reclaiming one candidate did to its content."""

    DELETED = "deleted"
    RELINKED = "relinked"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class OrphanCandidate:
    """Content that referenced a group at the moment the group was deleted.

    Attributes:
        content_id: The content
        group_id: The deleted group
        orphaned: True if the deleted group was the content's only reference
            when the candidate was registered
    """

    content_id: ContentId
    group_id: GroupId
    orphaned: bool

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the job queue."""
        return {
            "content_id": self.content_id.value,
            "group_id": self.group_id.value,
            "orphaned": self.orphaned,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> OrphanCandidate:
        """Deserialize a job queue payload.

        Raises:
            ValueError: If the payload is malformed
        """
        try:
            return cls(
                content_id=ContentId(payload["content_id"]),
                group_id=GroupId.from_string(payload["group_id"]),
                orphaned=bool(payload["orphaned"]),
            )
        except KeyError as e:
            raise ValueError(f"Orphan candidate payload missing {e}") from e


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one ``process()`` call of a strategy.

    Attributes:
        strategy: Plugin id of the strategy that ran
        handled: Candidates reclaimed and acknowledged
        deleted: Of those, content deleted outright
        relinked: Of those, content that kept other groups
        skipped: Of those, content already free of the group
        remaining: Candidates still queued afterwards
        finished: True when the queue was drained
    """

    strategy: str
    handled: int = 0
    deleted: int = 0
    relinked: int = 0
    skipped: int = 0
    remaining: int = 0
    finished: bool = False

    def counted(self, outcome: ReclaimOutcome) -> SweepResult:
        """Return a copy with one more handled candidate of the given outcome."""
        return SweepResult(
            strategy=self.strategy,
            handled=self.handled + 1,
            deleted=self.deleted + (outcome is ReclaimOutcome.DELETED),
            relinked=self.relinked + (outcome is ReclaimOutcome.RELINKED),
            skipped=self.skipped + (outcome is ReclaimOutcome.SKIPPED),
            remaining=self.remaining,
            finished=self.finished,
        )


@dataclass(frozen=True)
class BatchProgress:
    """Progress of the batch strategy across ``process()`` calls."""

    total: int = 0
    processed: int = 0

    @property
    def percentage(self) -> float:
        """Share of registered candidates processed, 100 when nothing is pending."""
        if self.total == 0:
            return 100.0
        return round(100.0 * self.processed / self.total, 1)

    @property
    def finished(self) -> bool:
        """True once every registered candidate was processed."""
        return self.processed >= self.total
