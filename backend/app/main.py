"""User Items API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map UserItemsError → structured JSON responses
    - Every request passes RequestContextMiddleware: request id, access log, metrics
    - Database, cache, publisher, validator, and service built once in the lifespan,
      torn down in reverse order

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Composition lives here; every collaborator reaches the service by injection
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.error_handlers import register_error_handlers
from app.api.middleware import RequestContextMiddleware
from app.api.routes import health, metrics, users
from app.config import Settings, get_settings
from app.core.validation import ParamValidator
from app.infrastructure.cache import NullCache, RedisCache
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.event_publisher import KafkaEventPublisher, LoggingPublisher
from app.infrastructure.observability import setup_logging
from app.infrastructure.store import SqlStore
from app.services.user_items import UserItemsService

logger = logging.getLogger(__name__)


def _build_cache(settings: Settings):
    if not settings.redis_url:
        logger.warning("REDIS_URL not set, running without a cache")
        return NullCache()
    return RedisCache.from_url(
        settings.redis_url,
        ttl_seconds=settings.cache_ttl_seconds,
        pool_size=settings.redis_pool_size,
        pool_timeout=settings.redis_pool_timeout_seconds,
        connect_timeout=settings.redis_connect_timeout_seconds,
    )


async def _build_publisher(settings: Settings):
    if not settings.kafka_brokers:
        logger.warning("KAFKA_BROKERS not set, read events go to the log only")
        return LoggingPublisher(settings.event_topic)
    return await KafkaEventPublisher.connect(
        settings.kafka_brokers, settings.event_topic, settings.publish_mode,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    cache = _build_cache(settings)
    publisher = await _build_publisher(settings)
    app.state.db = db
    app.state.cache = cache
    app.state.service = UserItemsService(
        SqlStore(db, settings.environment),
        cache,
        publisher,
        ParamValidator(settings.max_id_length, settings.max_name_length),
        revision=settings.revision,
        timeout_seconds=settings.request_timeout_seconds,
    )
    logger.info("User items API started")
    try:
        yield
    finally:
        logger.info("User items API shutting down")
        await publisher.close()
        await cache.close()
        await db.dispose()


app = FastAPI(
    title="User Items API", version="1.0.0", lifespan=lifespan,
)

# Routes — explicit registration
app.include_router(health.ping_router)
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(users.router)

app.add_middleware(RequestContextMiddleware)
register_error_handlers(app)
