"""Orphan deletion strategies and the factory that selects one by plugin id."""

from __future__ import annotations

from reclamation.application.observability import ReclamationProbe
from reclamation.application.strategies.base import OrphanDeletionStrategy
from reclamation.application.strategies.batch import BatchStrategy
from reclamation.application.strategies.cron import CronStrategy
from reclamation.application.strategies.simple import SimpleStrategy
from reclamation.ports.repositories import IContentStore, IGroupContentIndex
from shared_kernel.queue import IJobQueue

STRATEGIES: dict[str, type[OrphanDeletionStrategy]] = {
    SimpleStrategy.plugin_id: SimpleStrategy,
    BatchStrategy.plugin_id: BatchStrategy,
    CronStrategy.plugin_id: CronStrategy,
}


def create_strategy(
    plugin_id: str,
    queue: IJobQueue,
    index: IGroupContentIndex,
    content_store: IContentStore,
    probe: ReclamationProbe | None = None,
    batch_size: int = 10,
    cron_item_limit: int = 100,
    cron_time_limit_seconds: float = 30.0,
    max_retries: int = 5,
) -> OrphanDeletionStrategy:
    """Create the strategy registered under a plugin id.

    Options that do not apply to the selected strategy are ignored.

    Raises:
        ValueError: If no strategy has this plugin id
    """
    if plugin_id == SimpleStrategy.plugin_id:
        return SimpleStrategy(queue, index, content_store, probe)
    if plugin_id == BatchStrategy.plugin_id:
        return BatchStrategy(
            queue, index, content_store, probe, batch_size=batch_size
        )
    if plugin_id == CronStrategy.plugin_id:
        return CronStrategy(
            queue,
            index,
            content_store,
            probe,
            item_limit=cron_item_limit,
            time_limit_seconds=cron_time_limit_seconds,
            max_retries=max_retries,
        )
    raise ValueError(
        f"Unknown orphan deletion strategy '{plugin_id}', "
        f"expected one of {sorted(STRATEGIES)}"
    )


__all__ = [
    "STRATEGIES",
    "BatchStrategy",
    "CronStrategy",
    "OrphanDeletionStrategy",
    "SimpleStrategy",
    "create_strategy",
]
