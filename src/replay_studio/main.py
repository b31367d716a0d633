"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import UUID

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from replay_studio import __version__
from replay_studio.api.routes import discovery, health, jobs, system
from replay_studio.config import settings
from replay_studio.logging import (
    bind_session_context,
    clear_session_context,
    get_logger,
    setup_logging,
)
from replay_studio.services.session import StudioSession

# Setup logging
setup_logging()
logger = get_logger(__name__)


def _hydrate_from_store(studio: StudioSession) -> None:
    """Load the signed-in user's stored state into the session."""
    if not settings.persistence_enabled or not settings.session_user_id:
        return

    try:
        from replay_studio.db.session import get_session_context
        from replay_studio.services.store import load_snapshot

        with get_session_context() as db:
            state = load_snapshot(db, UUID(settings.session_user_id))
        studio.hydrate(state)
    except Exception as e:
        logger.error("session_hydration_failed", error=str(e))
        # Start empty - health checks report the store issue


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    bind_session_context(user_id=settings.session_user_id)
    studio = StudioSession()
    _hydrate_from_store(studio)
    app.state.studio = studio

    yield

    # Shutdown: no scheduled search or job outlives the app
    logger.info("application_shutting_down")
    await studio.close()
    clear_session_context()


# Create FastAPI app
app = FastAPI(
    title="Replay Studio",
    description="League of Legends replay discovery and upload queue",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router)
app.include_router(discovery.router, prefix="/api/v1")
app.include_router(jobs.router, prefix="/api/v1")
app.include_router(system.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint pointing at the docs."""
    return {
        "name": "Replay Studio",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "replay_studio.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
