"""Strategy that leaves reclamation to a periodic scheduler."""

from __future__ import annotations

import time
from collections.abc import Callable

from reclamation.application.observability import ReclamationProbe
from reclamation.application.strategies.base import OrphanDeletionStrategy
from reclamation.domain.value_objects import SweepResult
from reclamation.ports.exceptions import StorageError
from reclamation.ports.repositories import IContentStore, IGroupContentIndex
from shared_kernel.queue import IJobQueue, QueueItem

CLAIM_CHUNK = 20


class CronStrategy(OrphanDeletionStrategy):
    """Reclaim a bounded slice of the queue per run.

    Group deletion only registers candidates. Each ``process()`` call,
    normally made by CronSweepScheduler, drains at most ``item_limit``
    candidates within ``time_limit_seconds`` and leaves the rest for the
    next run. A candidate whose reclaim fails moves to the tail of the queue
    with its attempt count raised, and is dead-lettered once it has failed
    ``max_retries`` times.
    """

    plugin_id = "cron"
    deferred = True

    def __init__(
        self,
        queue: IJobQueue,
        index: IGroupContentIndex,
        content_store: IContentStore,
        probe: ReclamationProbe | None = None,
        item_limit: int = 100,
        time_limit_seconds: float = 30.0,
        max_retries: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(queue, index, content_store, probe)
        self._item_limit = item_limit
        self._time_limit = time_limit_seconds
        self._max_retries = max_retries
        self._clock = clock

    async def process(self) -> SweepResult:
        """Run one bounded sweep."""
        result = SweepResult(strategy=self.plugin_id)
        deadline = self._clock() + self._time_limit
        taken = 0

        try:
            while taken < self._item_limit and self._clock() < deadline:
                items = await self._queue.claim(
                    min(CLAIM_CHUNK, self._item_limit - taken)
                )
                if not items:
                    break

                for position, item in enumerate(items):
                    if self._clock() >= deadline:
                        await self._queue.release(items[position:])
                        return await self._completed(result)

                    taken += 1
                    candidate = await self._decode(item)
                    if candidate is None:
                        continue
                    try:
                        outcome = await self.reclaim(candidate)
                        await self._queue.ack([item])
                    except StorageError as e:
                        await self._retry_later(item, candidate.content_id.value, e)
                        await self._queue.release(items[position + 1 :])
                        raise
                    result = result.counted(outcome)

            return await self._completed(result)
        except StorageError as e:
            raise self._failed(result, e) from e

    async def _retry_later(
        self, item: QueueItem, content_id: str, error: StorageError
    ) -> None:
        """Requeue a failed candidate at the tail, or dead-letter it."""
        failed = item.with_failure(str(error))
        if failed.attempts >= self._max_retries:
            await self._queue.dead_letter(failed)
            self._probe.candidate_dead_lettered(
                self.plugin_id, content_id, str(error), failed.attempts
            )
        else:
            await self._queue.requeue(failed)
            self._probe.candidate_failed(
                self.plugin_id, content_id, str(error), failed.attempts
            )
