"""Protocol for orphan reclamation observability.

Defines the interface for domain probes that capture reclamation events:
candidates registered after a group deletion, each reclaimed candidate and
the outcome of every sweep.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from reclamation.domain.value_objects import SweepResult
    from shared_kernel.observability_context import ObservationContext


class ReclamationProbe(Protocol):
    """Domain probe for the reclamation engine and its strategies."""

    def group_deletion_received(
        self, group_id: str, strategy: str, candidates: int, orphaned: int
    ) -> None:
        """Record that a deleted group's content was classified."""
        ...

    def candidates_registered(self, strategy: str, count: int) -> None:
        """Record that candidates entered the orphan queue."""
        ...

    def candidate_reclaimed(
        self, strategy: str, content_id: str, deleted_group_id: str, outcome: str
    ) -> None:
        """Record that one candidate was reclaimed."""
        ...

    def candidate_failed(
        self, strategy: str, content_id: str, error: str, attempts: int
    ) -> None:
        """Record that reclaiming a candidate failed and it stays queued."""
        ...

    def candidate_dead_lettered(
        self, strategy: str, content_id: str, error: str, attempts: int
    ) -> None:
        """Record that a candidate exhausted its retries."""
        ...

    def malformed_candidate(self, strategy: str, item_id: int, error: str) -> None:
        """Record a queue entry that could not be decoded."""
        ...

    def sweep_completed(self, result: SweepResult) -> None:
        """Record the outcome of a successful process() call."""
        ...

    def sweep_failed(self, result: SweepResult, error: str) -> None:
        """Record a process() call that stopped on a storage failure."""
        ...

    def with_context(self, context: ObservationContext) -> ReclamationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultReclamationProbe:
    """Default implementation of ReclamationProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultReclamationProbe:
        """Create a new probe with observation context bound."""
        return DefaultReclamationProbe(logger=self._logger, context=context)

    def group_deletion_received(
        self, group_id: str, strategy: str, candidates: int, orphaned: int
    ) -> None:
        """Record that a deleted group's content was classified."""
        self._logger.info(
            "group_deletion_received",
            deleted_group_id=group_id,
            strategy=strategy,
            candidates=candidates,
            orphaned=orphaned,
            **self._get_context_kwargs(),
        )

    def candidates_registered(self, strategy: str, count: int) -> None:
        """Record that candidates entered the orphan queue."""
        self._logger.info(
            "orphan_candidates_registered",
            strategy=strategy,
            count=count,
            **self._get_context_kwargs(),
        )

    def candidate_reclaimed(
        self, strategy: str, content_id: str, deleted_group_id: str, outcome: str
    ) -> None:
        """Record that one candidate was reclaimed."""
        self._logger.debug(
            "orphan_candidate_reclaimed",
            strategy=strategy,
            content_id=content_id,
            deleted_group_id=deleted_group_id,
            outcome=outcome,
            **self._get_context_kwargs(),
        )

    def candidate_failed(
        self, strategy: str, content_id: str, error: str, attempts: int
    ) -> None:
        """Record that reclaiming a candidate failed."""
        self._logger.warning(
            "orphan_candidate_failed",
            strategy=strategy,
            content_id=content_id,
            error=error,
            attempts=attempts,
            **self._get_context_kwargs(),
        )

    def candidate_dead_lettered(
        self, strategy: str, content_id: str, error: str, attempts: int
    ) -> None:
        """Record that a candidate exhausted its retries."""
        self._logger.error(
            "orphan_candidate_dead_lettered",
            strategy=strategy,
            content_id=content_id,
            error=error,
            attempts=attempts,
            **self._get_context_kwargs(),
        )

    def malformed_candidate(self, strategy: str, item_id: int, error: str) -> None:
        """Record a queue entry that could not be decoded."""
        self._logger.error(
            "orphan_candidate_malformed",
            strategy=strategy,
            item_id=item_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def sweep_completed(self, result: SweepResult) -> None:
        """Record the outcome of a successful process() call."""
        self._logger.info(
            "orphan_sweep_completed",
            strategy=result.strategy,
            handled=result.handled,
            deleted=result.deleted,
            relinked=result.relinked,
            skipped=result.skipped,
            remaining=result.remaining,
            finished=result.finished,
            **self._get_context_kwargs(),
        )

    def sweep_failed(self, result: SweepResult, error: str) -> None:
        """Record a process() call that stopped on a storage failure."""
        self._logger.error(
            "orphan_sweep_failed",
            strategy=result.strategy,
            handled=result.handled,
            remaining=result.remaining,
            error=error,
            **self._get_context_kwargs(),
        )
