"""Base class for orphan deletion strategies.

Every strategy shares the orphan queue and the reclaim step; they differ
only in how much of the queue one ``process()`` call drains and in what
happens to candidates when storage fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

from reclamation.application.observability import (
    DefaultReclamationProbe,
    ReclamationProbe,
)
from reclamation.domain.value_objects import (
    OrphanCandidate,
    ReclaimOutcome,
    SweepResult,
)
from reclamation.ports.exceptions import ProcessingError, StorageError
from reclamation.ports.repositories import IContentStore, IGroupContentIndex
from shared_kernel.queue import IJobQueue, QueueItem


class OrphanDeletionStrategy(ABC):
    """A named policy for reclaiming content left behind by deleted groups.

    Class attributes:
        plugin_id: Configuration name of the strategy
        deferred: When True the engine only registers candidates and leaves
            ``process()`` to a scheduler
    """

    plugin_id: ClassVar[str] = ""
    deferred: ClassVar[bool] = False

    def __init__(
        self,
        queue: IJobQueue,
        index: IGroupContentIndex,
        content_store: IContentStore,
        probe: ReclamationProbe | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            queue: The orphan queue
            index: Group/content index, re-read before every reclaim
            content_store: Store holding the content itself
            probe: Optional domain probe for observability
        """
        self._queue = queue
        self._index = index
        self._content_store = content_store
        self._probe = probe or DefaultReclamationProbe()

    async def register(self, candidates: Sequence[OrphanCandidate]) -> int:
        """Accept candidates into the orphan queue.

        Returns:
            Number of candidates queued
        """
        if not candidates:
            return 0
        count = await self._queue.enqueue(
            [candidate.to_payload() for candidate in candidates]
        )
        self._probe.candidates_registered(self.plugin_id, count)
        return count

    async def pending(self) -> int:
        """Number of candidates waiting in the queue."""
        return await self._queue.size()

    @abstractmethod
    async def process(self) -> SweepResult:
        """Reclaim queued candidates.

        Raises:
            ProcessingError: If storage failed; unacknowledged candidates
                stay queued
        """
        ...

    async def reclaim(self, candidate: OrphanCandidate) -> ReclaimOutcome:
        """Reclaim one candidate against the content's current references.

        Content referencing only the deleted group is deleted. Content that
        still references other groups loses the stale reference. Content
        that no longer references the group is left alone. Each step can be
        repeated safely.

        Raises:
            StorageError: If the content store or the index fails
        """
        references = await self._index.references_of(candidate.content_id)
        if candidate.group_id not in references:
            outcome = ReclaimOutcome.SKIPPED
        else:
            remaining = [g for g in references if g != candidate.group_id]
            if remaining:
                await self._content_store.set_references(
                    candidate.content_id, remaining
                )
                await self._index.index_content(candidate.content_id, remaining)
                outcome = ReclaimOutcome.RELINKED
            else:
                await self._content_store.delete(candidate.content_id)
                await self._index.remove_content(candidate.content_id)
                outcome = ReclaimOutcome.DELETED

        self._probe.candidate_reclaimed(
            self.plugin_id,
            candidate.content_id.value,
            candidate.group_id.value,
            outcome.value,
        )
        return outcome

    async def _decode(self, item: QueueItem) -> OrphanCandidate | None:
        """Decode a queue entry, dead-lettering it if it is malformed."""
        try:
            return OrphanCandidate.from_payload(item.payload)
        except ValueError as e:
            self._probe.malformed_candidate(self.plugin_id, item.id, str(e))
            await self._queue.dead_letter(item.with_failure(str(e)))
            return None

    async def _completed(self, result: SweepResult) -> SweepResult:
        """Fill in the queue state and report a successful sweep."""
        remaining = await self._queue.size()
        result = SweepResult(
            strategy=result.strategy,
            handled=result.handled,
            deleted=result.deleted,
            relinked=result.relinked,
            skipped=result.skipped,
            remaining=remaining,
            finished=remaining == 0,
        )
        self._probe.sweep_completed(result)
        return result

    def _failed(self, result: SweepResult, error: StorageError) -> ProcessingError:
        """Report a failed sweep and build the error to raise."""
        self._probe.sweep_failed(result, str(error))
        return ProcessingError(
            f"Strategy '{self.plugin_id}' stopped after {result.handled} "
            f"candidates: {error}",
            result,
        )
