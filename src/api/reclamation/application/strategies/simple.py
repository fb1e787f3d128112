"""Strategy that drains the whole orphan queue in the calling task."""

from __future__ import annotations

from reclamation.application.strategies.base import OrphanDeletionStrategy
from reclamation.domain.value_objects import SweepResult
from reclamation.ports.exceptions import StorageError

CLAIM_CHUNK = 50


class SimpleStrategy(OrphanDeletionStrategy):
    """Reclaim everything immediately.

    Each candidate is acknowledged as soon as its content is reclaimed, so a
    failure part way through loses none of the finished work. The failing
    candidate and everything after it go back to the head of the queue.
    """

    plugin_id = "simple"

    async def process(self) -> SweepResult:
        """Drain the queue."""
        result = SweepResult(strategy=self.plugin_id)
        try:
            while True:
                items = await self._queue.claim(CLAIM_CHUNK)
                if not items:
                    break

                for position, item in enumerate(items):
                    candidate = await self._decode(item)
                    if candidate is None:
                        continue
                    try:
                        outcome = await self.reclaim(candidate)
                        await self._queue.ack([item])
                    except StorageError as e:
                        self._probe.candidate_failed(
                            self.plugin_id,
                            candidate.content_id.value,
                            str(e),
                            item.attempts + 1,
                        )
                        await self._queue.release(items[position:])
                        raise
                    result = result.counted(outcome)

            return await self._completed(result)
        except StorageError as e:
            raise self._failed(result, e) from e
