"""Value objects for the job queue."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class QueueItem:
    """A single entry of a job queue.

    Attributes:
        id: Queue-assigned identifier; larger ids were enqueued later
        payload: JSON-compatible job data
        enqueued_at: When the entry entered the queue
        attempts: Number of failed processing attempts so far
        last_error: The most recent processing error (if any)
    """

    id: int
    payload: dict[str, Any]
    enqueued_at: datetime
    attempts: int = 0
    last_error: str | None = None

    def with_failure(self, error: str) -> QueueItem:
        """Return a copy recording one more failed attempt."""
        return replace(self, attempts=self.attempts + 1, last_error=error)
