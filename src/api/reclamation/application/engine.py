"""Orphan reclamation engine: reacts to group deletion."""

from __future__ import annotations

from reclamation.application.observability import (
    DefaultReclamationProbe,
    ReclamationProbe,
)
from reclamation.application.strategies import OrphanDeletionStrategy
from reclamation.domain.value_objects import OrphanCandidate, SweepResult
from reclamation.ports.repositories import IGroupContentIndex
from shared_kernel.events import GroupDeleted


class ReclamationEngine:
    """Classifies a deleted group's content and hands it to the strategy.

    The engine depends only on the strategy contract; which strategy runs
    is configuration.
    """

    def __init__(
        self,
        index: IGroupContentIndex,
        strategy: OrphanDeletionStrategy,
        probe: ReclamationProbe | None = None,
    ) -> None:
        self._index = index
        self._strategy = strategy
        self._probe = probe or DefaultReclamationProbe()

    @property
    def strategy(self) -> OrphanDeletionStrategy:
        """The configured strategy."""
        return self._strategy

    async def on_group_deleted(self, event: GroupDeleted) -> SweepResult | None:
        """Register the deleted group's content as orphan candidates.

        Content whose only reference is the deleted group is classified as
        orphaned; content with other references will only lose the stale one.
        Unless the strategy is deferred, the queue is processed right away.

        Returns:
            The sweep result, or None for deferred strategies

        Raises:
            StorageError: If the candidates could not be read or queued;
                nothing was reclaimed, so the deletion can be reported again
            ProcessingError: If an immediate sweep stopped on a storage failure
        """
        group_id = event.group.id
        candidates: list[OrphanCandidate] = []
        async for content_id in self._index.content_referencing(group_id):
            references = await self._index.references_of(content_id)
            if group_id not in references:
                continue
            candidates.append(
                OrphanCandidate(
                    content_id=content_id,
                    group_id=group_id,
                    orphaned=all(ref == group_id for ref in references),
                )
            )

        self._probe.group_deletion_received(
            group_id=group_id.value,
            strategy=self._strategy.plugin_id,
            candidates=len(candidates),
            orphaned=sum(1 for c in candidates if c.orphaned),
        )
        await self._strategy.register(candidates)

        if self._strategy.deferred:
            return None
        return await self._strategy.process()
