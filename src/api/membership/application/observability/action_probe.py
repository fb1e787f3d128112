"""Observability probe for membership actions."""

from __future__ import annotations

from typing import Protocol

import structlog


class ActionProbe(Protocol):
    """Domain probe for membership action execution."""

    def action_executed(self, plugin_id: str, group_id: str, user_id: str) -> None:
        """Record a successful action on one membership."""
        ...

    def action_failed(
        self, plugin_id: str, group_id: str, user_id: str, error: str
    ) -> None:
        """Record an action that failed validation on one membership."""
        ...

    def bulk_action_completed(
        self, plugin_id: str, succeeded: int, failed: int
    ) -> None:
        """Record the outcome of running an action over many memberships."""
        ...


class DefaultActionProbe:
    """Default implementation of ActionProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()

    def action_executed(self, plugin_id: str, group_id: str, user_id: str) -> None:
        """Log a successful action."""
        self._logger.info(
            "membership_action_executed",
            plugin_id=plugin_id,
            group_id=group_id,
            user_id=user_id,
        )

    def action_failed(
        self, plugin_id: str, group_id: str, user_id: str, error: str
    ) -> None:
        """Log a failed action."""
        self._logger.warning(
            "membership_action_failed",
            plugin_id=plugin_id,
            group_id=group_id,
            user_id=user_id,
            error=error,
        )

    def bulk_action_completed(
        self, plugin_id: str, succeeded: int, failed: int
    ) -> None:
        """Log the outcome of a bulk run."""
        self._logger.info(
            "membership_bulk_action_completed",
            plugin_id=plugin_id,
            succeeded=succeeded,
            failed=failed,
        )
