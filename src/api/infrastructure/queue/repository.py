"""PostgreSQL implementation of IJobQueue.

Each operation opens its own short-lived session and commits before
returning, so a claimed chunk is durable before any work on it starts.
Claims use FOR UPDATE SKIP LOCKED so concurrent consumers never receive the
same entry.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.queue.models import JobQueueModel
from shared_kernel.exceptions import StorageError
from shared_kernel.queue.value_objects import QueueItem


class JobQueueRepository:
    """Durable FIFO stored in the job_queue table.

    Claims expire after ``lease_seconds`` so entries held by a crashed
    consumer are picked up again.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        name: str,
        lease_seconds: int = 300,
    ) -> None:
        """Initialize the queue.

        Args:
            session_factory: Factory for creating database sessions
            name: Queue name; rows of other queues are never touched
            lease_seconds: Age after which an unacknowledged claim expires
        """
        self._session_factory = session_factory
        self._name = name
        self._lease = timedelta(seconds=lease_seconds)

    @property
    def name(self) -> str:
        """The queue name."""
        return self._name

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating database failures to StorageError."""
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(f"Queue '{self._name}' storage failed: {e}") from e

    async def enqueue(self, payloads: Sequence[dict[str, Any]]) -> int:
        """Append payloads to the tail of the queue."""
        if not payloads:
            return 0
        async with self._session() as session:
            session.add_all(
                [
                    JobQueueModel(queue_name=self._name, payload=dict(payload))
                    for payload in payloads
                ]
            )
            await session.commit()
        return len(payloads)

    async def claim(self, limit: int) -> list[QueueItem]:
        """Claim up to ``limit`` entries from the head of the queue."""
        now = datetime.now(UTC)
        stmt = (
            select(JobQueueModel)
            .where(JobQueueModel.queue_name == self._name)
            .where(JobQueueModel.failed_at.is_(None))
            .where(
                or_(
                    JobQueueModel.claimed_at.is_(None),
                    JobQueueModel.claimed_at < now - self._lease,
                )
            )
            .order_by(JobQueueModel.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            models = result.scalars().all()
            for model in models:
                model.claimed_at = now
            await session.commit()
            return [model.to_value_object() for model in models]

    async def ack(self, items: Sequence[QueueItem]) -> None:
        """Delete processed entries."""
        if not items:
            return
        stmt = delete(JobQueueModel).where(
            JobQueueModel.id.in_([item.id for item in items])
        )
        async with self._session() as session:
            await session.execute(stmt)
            await session.commit()

    async def release(self, items: Sequence[QueueItem]) -> None:
        """Clear the claim on entries so they are claimed again first."""
        if not items:
            return
        stmt = (
            update(JobQueueModel)
            .where(JobQueueModel.id.in_([item.id for item in items]))
            .values(claimed_at=None)
        )
        async with self._session() as session:
            await session.execute(stmt)
            await session.commit()

    async def requeue(self, item: QueueItem) -> None:
        """Replace the entry with a new row at the tail of the queue."""
        async with self._session() as session:
            await session.execute(
                delete(JobQueueModel).where(JobQueueModel.id == item.id)
            )
            session.add(
                JobQueueModel(
                    queue_name=self._name,
                    payload=dict(item.payload),
                    attempts=item.attempts,
                    last_error=item.last_error,
                    enqueued_at=item.enqueued_at,
                )
            )
            await session.commit()

    async def dead_letter(self, item: QueueItem) -> None:
        """Mark the entry as permanently failed."""
        stmt = (
            update(JobQueueModel)
            .where(JobQueueModel.id == item.id)
            .values(
                attempts=item.attempts,
                last_error=item.last_error,
                claimed_at=None,
                failed_at=datetime.now(UTC),
            )
        )
        async with self._session() as session:
            await session.execute(stmt)
            await session.commit()

    async def size(self) -> int:
        """Count unclaimed, live entries."""
        stmt = (
            select(func.count())
            .select_from(JobQueueModel)
            .where(JobQueueModel.queue_name == self._name)
            .where(JobQueueModel.failed_at.is_(None))
            .where(JobQueueModel.claimed_at.is_(None))
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())
