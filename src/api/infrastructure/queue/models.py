"""SQLAlchemy ORM model for the job queue table."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, utc_now
from shared_kernel.queue.value_objects import QueueItem


class JobQueueModel(Base):
    """ORM model for the job_queue table.

    Several named queues share the table. Ordering within a queue follows
    the autoincrement id, so requeueing an entry means inserting a new row.

    Column semantics:
    - claimed_at: set while a consumer holds the entry; stale claims older
      than the lease become claimable again
    - failed_at: set when the entry is dead-lettered; never claimed again
    """

    __tablename__ = "job_queue"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    queue_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    enqueued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utc_now,
        nullable=False,
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    failed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def to_value_object(self) -> QueueItem:
        """Convert this ORM model to a QueueItem value object."""
        return QueueItem(
            id=self.id,
            payload=dict(self.payload),
            enqueued_at=self.enqueued_at,
            attempts=self.attempts,
            last_error=self.last_error,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<JobQueueModel("
            f"id={self.id}, "
            f"queue_name={self.queue_name}, "
            f"attempts={self.attempts}, "
            f"claimed_at={self.claimed_at}"
            f")>"
        )
