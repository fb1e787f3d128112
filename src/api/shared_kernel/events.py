"""Group lifecycle events and the in-process dispatcher that delivers them.

The entity lifecycle collaborator reports a group deletion once the group's
own removal is durable. Both bounded contexts react to it: membership cascades
the group's memberships away and reclamation sweeps orphaned content. Neither
context imports the other; they only share this event.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

import structlog

from shared_kernel.exceptions import StorageError
from shared_kernel.identifiers import GroupRef


@dataclass(frozen=True)
class GroupDeleted:
    """A group has been destroyed by the entity lifecycle collaborator.

    Attributes:
        group: The deleted group
        occurred_at: When the deletion happened
    """

    group: GroupRef
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


EventHandler = Callable[[Any], Awaitable[Any]]


class EventDispatcherProbe(Protocol):
    """Domain probe for event dispatch."""

    def event_dispatched(self, event_type: str, handler_count: int) -> None:
        """Record that an event was handed to its handlers."""
        ...

    def handler_failed(self, event_type: str, handler: str, error: str) -> None:
        """Record that a handler raised while processing an event."""
        ...


class DefaultEventDispatcherProbe:
    """Default implementation of EventDispatcherProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()

    def event_dispatched(self, event_type: str, handler_count: int) -> None:
        """Log event dispatch."""
        self._logger.info(
            "event_dispatched",
            event_type=event_type,
            handler_count=handler_count,
        )

    def handler_failed(self, event_type: str, handler: str, error: str) -> None:
        """Log handler failure."""
        self._logger.error(
            "event_handler_failed",
            event_type=event_type,
            handler=handler,
            error=error,
        )


class EventDispatcher:
    """In-process registry of async event handlers keyed by event class.

    Handlers run in registration order. A failing handler is logged and the
    remaining handlers still run. Once they all had their turn, the first
    StorageError is re-raised so the publisher can report the event again;
    other failures stay logged only.
    """

    def __init__(self, probe: EventDispatcherProbe | None = None) -> None:
        self._handlers: dict[type, list[EventHandler]] = {}
        self._probe = probe or DefaultEventDispatcherProbe()

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """Register a handler for an event class.

        Args:
            event_type: The event class to listen for
            handler: Async callable receiving the event
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def handlers_for(self, event_type: type) -> list[EventHandler]:
        """Return the handlers registered for an event class."""
        return list(self._handlers.get(event_type, []))

    async def publish(self, event: Any) -> list[Any]:
        """Deliver an event to every handler registered for its class.

        Args:
            event: The event instance

        Returns:
            Return values of the handlers that completed

        Raises:
            StorageError: If any handler hit a storage failure
        """
        event_type = type(event).__name__
        handlers = self.handlers_for(type(event))
        self._probe.event_dispatched(event_type, len(handlers))

        results = []
        storage_error: StorageError | None = None
        for handler in handlers:
            try:
                results.append(await handler(event))
            except Exception as e:
                self._probe.handler_failed(
                    event_type,
                    getattr(handler, "__qualname__", repr(handler)),
                    str(e),
                )
                if isinstance(e, StorageError) and storage_error is None:
                    storage_error = e
        if storage_error is not None:
            raise storage_error
        return results
