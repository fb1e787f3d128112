"""Job-queue contract for deferred work.

Bounded contexts enqueue payloads and drain them later from a worker or a
scheduler. Only the contract lives here; transports live in infrastructure.
"""

from shared_kernel.queue.ports import IJobQueue
from shared_kernel.queue.value_objects import QueueItem

__all__ = ["IJobQueue", "QueueItem"]
