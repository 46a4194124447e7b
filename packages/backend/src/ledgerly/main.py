"""FastAPI application factory.

create_app() returns a configured FastAPI instance. Lifespan manages
startup/shutdown (Redis pool, database engine). Middleware, CORS,
error handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledgerly import __version__
from ledgerly.api import api_router
from ledgerly.config import settings
from ledgerly.errors import register_exception_handlers
from ledgerly.logs import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    from ledgerly.cache import close_redis, init_redis
    from ledgerly.db.engine import create_schema, engine

    configure_logging()
    logger.info(
        "ledgerly.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if settings.create_schema_on_startup:
        await create_schema()
        logger.info("ledgerly.schema_created")

    try:
        await init_redis()
        logger.info("ledgerly.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional — the API works without rate limiting
        logger.warning("ledgerly.redis_unavailable", error=str(e))

    yield

    logger.info("ledgerly.shutdown")
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Ledgerly",
        description="Multi-tenant personal-finance records: categories, transactions, goals, bills",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from ledgerly.middleware.rate_limit import RateLimitMiddleware
    from ledgerly.middleware.request_id import RequestIdMiddleware
    from ledgerly.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: ledgerly.main:app)
app = create_app()
