"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from poketactix.achievements.router import router as achievements_router
from poketactix.achievements.seed import seed_achievements
from poketactix.auth.router import router as auth_router
from poketactix.cards.router import router as cards_router
from poketactix.config import get_settings
from poketactix.database import close_db, get_session, init_db
from poketactix.health.router import router as health_router
from poketactix.middleware import setup_middleware
from poketactix.progression.router import router as progression_router
from poketactix.stats.router import router as stats_router
from poketactix.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings)

    # Seed the achievement catalog (idempotent)
    try:
        async for db in get_session():
            await seed_achievements(db)
            break
    except SQLAlchemyError:
        logger.warning("achievement_seeding_failed", exc_info=True)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PokeTacTix API",
        description="Player progression backend for PokeTacTix: cards, decks, stats and achievements",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(cards_router)
    app.include_router(stats_router)
    app.include_router(achievements_router)
    app.include_router(progression_router)

    return app


app = create_app()
