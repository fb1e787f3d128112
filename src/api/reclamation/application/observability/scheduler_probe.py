"""Observability probe for the cron sweep scheduler."""

from __future__ import annotations

from typing import Protocol

import structlog


class SchedulerProbe(Protocol):
    """Domain probe for the periodic sweep loop."""

    def scheduler_started(self, strategy: str, interval_seconds: float) -> None:
        """Record that the loop started."""
        ...

    def scheduler_stopped(self, strategy: str) -> None:
        """Record that the loop stopped."""
        ...

    def run_failed(self, strategy: str, handled: int, error: str) -> None:
        """Record a run that stopped early; the loop keeps going."""
        ...


class DefaultSchedulerProbe:
    """Default implementation of SchedulerProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()

    def scheduler_started(self, strategy: str, interval_seconds: float) -> None:
        """Log scheduler start."""
        self._logger.info(
            "sweep_scheduler_started",
            strategy=strategy,
            interval_seconds=interval_seconds,
        )

    def scheduler_stopped(self, strategy: str) -> None:
        """Log scheduler stop."""
        self._logger.info("sweep_scheduler_stopped", strategy=strategy)

    def run_failed(self, strategy: str, handled: int, error: str) -> None:
        """Log a failed run."""
        self._logger.error(
            "sweep_scheduler_run_failed",
            strategy=strategy,
            handled=handled,
            error=error,
        )
