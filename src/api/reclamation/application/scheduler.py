"""Background loop that runs a deferred strategy on a fixed interval.

The scheduler runs as a background task within the FastAPI application,
started and stopped by the application lifespan.
"""

from __future__ import annotations

import asyncio

from reclamation.application.observability import (
    DefaultSchedulerProbe,
    SchedulerProbe,
)
from reclamation.application.strategies import OrphanDeletionStrategy
from reclamation.domain.value_objects import SweepResult
from reclamation.ports.exceptions import ProcessingError


class CronSweepScheduler:
    """Calls ``strategy.process()`` every ``interval_seconds``.

    A run that fails with ProcessingError is logged and the
    loop carries on; the candidates it could not reclaim are still queued
    for the next run.
    """

    def __init__(
        self,
        strategy: OrphanDeletionStrategy,
        interval_seconds: float = 60.0,
        probe: SchedulerProbe | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            strategy: The strategy to run
            interval_seconds: Pause between the end of one run and the next
            probe: Optional domain probe for observability
        """
        self._strategy = strategy
        self._interval = interval_seconds
        self._probe = probe or DefaultSchedulerProbe()
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        """True while the loop is active."""
        return self._running

    async def start(self) -> None:
        """Start the loop in a background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        self._probe.scheduler_started(self._strategy.plugin_id, self._interval)

    async def stop(self) -> None:
        """Stop the loop and wait for the background task to finish."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._probe.scheduler_stopped(self._strategy.plugin_id)

    async def run_once(self) -> SweepResult | None:
        """Run the strategy once.

        Returns:
            The sweep result, or None if the run failed
        """
        try:
            return await self._strategy.process()
        except ProcessingError as e:
            self._probe.run_failed(
                self._strategy.plugin_id, e.result.handled, str(e)
            )
            return None

    async def _loop(self) -> None:
        while self._running:
            await self.run_once()
            await asyncio.sleep(self._interval)
