"""Strategy that reclaims the orphan queue in fixed-size chunks."""

from __future__ import annotations

from collections.abc import Sequence

from reclamation.application.observability import ReclamationProbe
from reclamation.application.strategies.base import OrphanDeletionStrategy
from reclamation.domain.value_objects import (
    BatchProgress,
    OrphanCandidate,
    ReclaimOutcome,
    SweepResult,
)
from reclamation.ports.exceptions import StorageError
from reclamation.ports.repositories import IContentStore, IGroupContentIndex
from shared_kernel.queue import IJobQueue, QueueItem


class BatchStrategy(OrphanDeletionStrategy):
    """Reclaim at most ``batch_size`` candidates per ``process()`` call.

    A chunk is acknowledged only after every candidate in it was reclaimed.
    On failure the whole chunk is released and the next call retries it
    from the start, which is safe because reclaiming is repeatable.
    Callers loop on ``process()`` until the result reports ``finished``.
    """

    plugin_id = "batch"

    def __init__(
        self,
        queue: IJobQueue,
        index: IGroupContentIndex,
        content_store: IContentStore,
        probe: ReclamationProbe | None = None,
        batch_size: int = 10,
    ) -> None:
        super().__init__(queue, index, content_store, probe)
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._batch_size = batch_size
        self._progress = BatchProgress()

    @property
    def batch_size(self) -> int:
        """Candidates claimed per chunk."""
        return self._batch_size

    @property
    def progress(self) -> BatchProgress:
        """Progress since the strategy was created."""
        return self._progress

    async def register(self, candidates: Sequence[OrphanCandidate]) -> int:
        """Queue candidates and count them into the progress total."""
        count = await super().register(candidates)
        self._progress = BatchProgress(
            total=self._progress.total + count,
            processed=self._progress.processed,
        )
        return count

    async def process(self) -> SweepResult:
        """Reclaim one chunk."""
        result = SweepResult(strategy=self.plugin_id)
        try:
            items = await self._queue.claim(self._batch_size)
        except StorageError as e:
            raise self._failed(result, e) from e

        chunk: list[QueueItem] = []
        dead: set[int] = set()
        outcomes: list[ReclaimOutcome] = []
        try:
            for item in items:
                candidate = await self._decode(item)
                if candidate is None:
                    dead.add(item.id)
                    continue
                chunk.append(item)
                try:
                    outcomes.append(await self.reclaim(candidate))
                except StorageError as e:
                    self._probe.candidate_failed(
                        self.plugin_id,
                        candidate.content_id.value,
                        str(e),
                        item.attempts + 1,
                    )
                    raise
            await self._queue.ack(chunk)
        except StorageError as e:
            try:
                await self._queue.release([i for i in items if i.id not in dead])
            except StorageError as release_error:
                # Unreleased claims lapse with the queue lease.
                raise self._failed(result, release_error) from e
            raise self._failed(result, e) from e

        for outcome in outcomes:
            result = result.counted(outcome)

        processed = self._progress.processed + len(items)
        self._progress = BatchProgress(
            total=max(self._progress.total, processed), processed=processed
        )
        try:
            result = await self._completed(result)
        except StorageError as e:
            raise self._failed(result, e) from e
        self._progress = BatchProgress(
            total=max(self._progress.total, processed + result.remaining),
            processed=processed,
        )
        return result
