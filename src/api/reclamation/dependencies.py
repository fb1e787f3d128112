"""FastAPI dependency providers for the reclamation context.

Components are built once at startup and stored on ``app.state.container``.
"""

from typing import Annotated

from fastapi import Depends, Request

from reclamation.application.engine import ReclamationEngine
from reclamation.application.strategies import OrphanDeletionStrategy
from reclamation.infrastructure.content_store import InMemoryContentStore
from reclamation.ports.repositories import IGroupContentIndex


def get_content_index(request: Request) -> IGroupContentIndex:
    """Get the application-wide group/content index."""
    return request.app.state.container.content_index


def get_local_content_store(request: Request) -> InMemoryContentStore | None:
    """Get the in-process content store, or None with a content service."""
    return request.app.state.container.local_content_store


def get_reclamation_engine(request: Request) -> ReclamationEngine:
    """Get the application-wide reclamation engine."""
    return request.app.state.container.reclamation_engine


def get_strategy(
    engine: Annotated[ReclamationEngine, Depends(get_reclamation_engine)],
) -> OrphanDeletionStrategy:
    """Get the orphan deletion strategy the engine was configured with."""
    return engine.strategy
