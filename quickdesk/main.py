from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from redis.asyncio import Redis
from redis.exceptions import RedisError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import quickdesk.db.base  # noqa: F401
from quickdesk.analytics.routes import analytics
from quickdesk.auth.routes import profile
from quickdesk.core import redis as redis_module
from quickdesk.core.config import settings
from quickdesk.core.exceptions import register_exception_handlers
from quickdesk.core.log_config import RequestLoggingMiddleware, setup_logging
from quickdesk.core.rate_limit import limiter
from quickdesk.db.session import SessionLocal
from quickdesk.notifications.routes import notifications
from quickdesk.tickets.routes import attachments, categories, tickets

API_VERSION = "1.0.0"

setup_logging()
logger = structlog.get_logger(__name__)

ROUTERS = (
    (profile.router, "profile"),
    (categories.router, "categories"),
    (tickets.router, "tickets"),
    (attachments.router, "attachments"),
    (notifications.router, "notifications"),
    (analytics.router, "analytics"),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    client = Redis.from_url(settings.REDIS_URL, decode_responses=True, encoding="utf-8")
    try:
        await client.ping()
    except RedisError as exc:
        # Caching and rate limiting degrade; the API itself keeps serving
        logger.warning("redis_unavailable", url=settings.REDIS_URL, error=str(exc))
    else:
        logger.info("redis_connected")
    redis_module.redis_client = client

    yield

    redis_module.redis_client = None
    await client.aclose()
    logger.info("redis_closed")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="QuickDesk support ticketing API",
        version=API_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    register_exception_handlers(application, debug=settings.DEBUG)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    if settings.STORAGE_BACKEND == "local":
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        application.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    for router, tag in ROUTERS:
        application.include_router(router, prefix=settings.API_V1_PREFIX, tags=[tag])

    return application


app = create_app()


async def _redis_status() -> str:
    if redis_module.redis_client is None:
        return "unknown"
    try:
        await redis_module.redis_client.ping()
    except RedisError:
        return "unhealthy"
    return "healthy"


def _database_status() -> str:
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return "unhealthy"
    return "healthy"


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": API_VERSION, "status": "running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    checks = {"redis": await _redis_status(), "database": _database_status()}
    overall = "healthy" if all(value == "healthy" for value in checks.values()) else "degraded"
    return {"status": overall, **checks}
