"""Job queue transports.

Implementations of ``shared_kernel.queue.IJobQueue``: an in-process queue
for development and tests, and a PostgreSQL-backed durable queue.
"""

from infrastructure.queue.memory import InMemoryJobQueue
from infrastructure.queue.repository import JobQueueRepository

__all__ = ["InMemoryJobQueue", "JobQueueRepository"]
