"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from rada.admin.router import router as admin_router
from rada.community.router import router as community_router
from rada.config import get_settings
from rada.database import check_connection, close_db, get_engine, get_session, init_db
from rada.db.reconciler import SchemaReconciler
from rada.gamification.router import router as gamification_router
from rada.gamification.seed import seed_badges
from rada.health.router import router as health_router
from rada.learning.router import router as learning_router
from rada.middleware import setup_middleware
from rada.redis_client import close_redis, init_redis
from rada.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle.

    An unreachable database aborts startup. Tables that fail to be created
    are logged and the API keeps serving.
    """
    settings = get_settings()
    await init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    engine = get_engine()

    try:
        await check_connection(engine)
    except (SQLAlchemyError, OSError):
        logger.critical("Database unreachable at startup; refusing to start", exc_info=True)
        await close_db()
        raise

    report = await SchemaReconciler(engine).reconcile()
    if not report.ok:
        logger.error("Running with incomplete schema; missing tables: %s", ", ".join(report.failed))

    if settings.seed_badges_on_startup and "badges" not in report.failed:
        async for db in get_session():
            await seed_badges(db)
            break

    if settings.redis_url:
        await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Rada.ke API",
        description="Civic engagement API: learning rewards, community actions and voting records",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(gamification_router)
    app.include_router(learning_router)
    app.include_router(community_router)
    app.include_router(admin_router)

    return app


app = create_app()
