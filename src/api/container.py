"""Application wiring.

Builds every long-lived component once, for the configured storage backend,
and subscribes both bounded contexts to group deletion. The membership
cascade is subscribed before reclamation so memberships are gone before
content is swept.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database import Base, create_session_factory
from infrastructure.database.engines import create_engine
from infrastructure.queue import InMemoryJobQueue, JobQueueRepository
from infrastructure.settings import Settings
from membership.application.actions import ActionManager
from membership.application.services import MembershipService
from membership.infrastructure.in_memory import (
    InMemoryGroupTypeRepository,
    InMemoryMembershipRepository,
)
from membership.infrastructure.membership_repository import MembershipRepository
from reclamation.application.engine import ReclamationEngine
from reclamation.application.scheduler import CronSweepScheduler
from reclamation.application.strategies import create_strategy
from reclamation.infrastructure.content_index import InMemoryGroupContentIndex
from reclamation.infrastructure.content_index_repository import (
    GroupContentIndexRepository,
)
from reclamation.infrastructure.content_store import (
    HttpContentStore,
    InMemoryContentStore,
)
from reclamation.ports.repositories import IContentStore, IGroupContentIndex
from shared_kernel.events import EventDispatcher, GroupDeleted
from shared_kernel.queue import IJobQueue


@dataclass
class Container:
    """Long-lived application components."""

    dispatcher: EventDispatcher
    membership_service: MembershipService
    action_manager: ActionManager
    content_index: IGroupContentIndex
    content_store: IContentStore
    orphan_queue: IJobQueue
    reclamation_engine: ReclamationEngine
    scheduler: CronSweepScheduler | None = None
    engine: AsyncEngine | None = field(default=None, repr=False)

    @property
    def local_content_store(self) -> InMemoryContentStore | None:
        """The in-process content store, when no content service is configured."""
        if isinstance(self.content_store, InMemoryContentStore):
            return self.content_store
        return None

    async def start(self) -> None:
        """Start background work."""
        if self.scheduler is not None:
            await self.scheduler.start()

    async def aclose(self) -> None:
        """Stop background work and release connections."""
        if self.scheduler is not None:
            await self.scheduler.stop()
        if isinstance(self.content_store, HttpContentStore):
            await self.content_store.aclose()
        if self.engine is not None:
            await self.engine.dispose()


async def build_container(settings: Settings) -> Container:
    """Build and wire every component for the given settings.

    Args:
        settings: Application settings

    Returns:
        The wired Container; call ``start()`` to begin background work
    """
    dispatcher = EventDispatcher()
    reclamation = settings.reclamation
    engine: AsyncEngine | None = None

    if settings.storage_backend == "postgres":
        engine = create_engine(settings.database)
        if settings.database.create_schema:
            async with engine.begin() as connection:
                await connection.run_sync(Base.metadata.create_all)
        session_factory = create_session_factory(engine)

        membership_repository = MembershipRepository(session_factory)
        content_index: IGroupContentIndex = GroupContentIndexRepository(
            session_factory, dispatcher
        )
        orphan_queue: IJobQueue = JobQueueRepository(
            session_factory,
            name=reclamation.queue_name,
            lease_seconds=reclamation.queue_lease_seconds,
        )
    else:
        membership_repository = InMemoryMembershipRepository()
        content_index = InMemoryGroupContentIndex(dispatcher)
        orphan_queue = InMemoryJobQueue(reclamation.queue_name)

    content_service = settings.content_service
    content_store: IContentStore
    if content_service.base_url:
        content_store = HttpContentStore(
            content_service.base_url, timeout=content_service.timeout_seconds
        )
    else:
        content_store = InMemoryContentStore()

    membership_service = MembershipService(
        membership_repository,
        InMemoryGroupTypeRepository(),
        default_roles=settings.membership.default_roles,
    )
    for entity_type, bundle in settings.membership.parsed_group_types():
        await membership_service.register_group_type(entity_type, bundle)

    strategy = create_strategy(
        reclamation.strategy,
        orphan_queue,
        content_index,
        content_store,
        batch_size=reclamation.batch_size,
        cron_item_limit=reclamation.cron_item_limit,
        cron_time_limit_seconds=reclamation.cron_time_limit_seconds,
        max_retries=reclamation.max_retries,
    )
    reclamation_engine = ReclamationEngine(content_index, strategy)

    dispatcher.subscribe(GroupDeleted, membership_service.on_group_deleted)
    dispatcher.subscribe(GroupDeleted, reclamation_engine.on_group_deleted)

    scheduler = None
    if strategy.deferred:
        scheduler = CronSweepScheduler(
            strategy, interval_seconds=reclamation.cron_interval_seconds
        )

    return Container(
        dispatcher=dispatcher,
        membership_service=membership_service,
        action_manager=ActionManager(membership_service),
        content_index=content_index,
        content_store=content_store,
        orphan_queue=orphan_queue,
        reclamation_engine=reclamation_engine,
        scheduler=scheduler,
        engine=engine,
    )
