"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from container import build_container
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from membership.presentation import router as membership_router
from reclamation.presentation import router as reclamation_router


@asynccontextmanager
async def organic_groups_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Component wiring (stored on ``app.state.container``)
    - The cron sweep scheduler, when the cron strategy is configured
    """
    settings = get_settings()
    configure_logging(settings.log_level, app_name=settings.app_name)

    container = await build_container(settings)
    app.state.container = container
    await container.start()

    yield

    await container.aclose()


app = FastAPI(
    title="Organic Groups API",
    description="Group membership lifecycle and orphaned content reclamation",
    version=__version__,
    lifespan=organic_groups_lifespan,
)

app.include_router(membership_router)
app.include_router(reclamation_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
