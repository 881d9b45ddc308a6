"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from wtd.auth.router import router as auth_router
from wtd.bets.router import router as bets_router
from wtd.config import get_settings
from wtd.database import close_db, create_schema, get_session, init_db
from wtd.features.router import router as features_router
from wtd.health.router import router as health_router
from wtd.middleware import setup_middleware
from wtd.redis_client import close_redis, init_redis
from wtd.shows.router import episodes_router
from wtd.shows.router import router as shows_router
from wtd.shows.seed import seed_catalog
from wtd.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.cache_enabled:
        await init_redis(settings.redis_url)

    if settings.seed_on_startup:
        try:
            if settings.database_url.startswith("sqlite"):
                await create_schema()
            async for db in get_session():
                await seed_catalog(db)
                break
        except Exception:
            logger.warning("seed_failed", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Will They Die API",
        description="Backend API for Will They Die — bet on who survives the next episode",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(shows_router)
    app.include_router(episodes_router)
    app.include_router(bets_router)
    app.include_router(users_router)
    app.include_router(features_router)

    return app


app = create_app()
