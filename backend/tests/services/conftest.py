"""Service test fixtures — in-memory SQLite store, fake cache, recording publisher, HTTP client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - Items are seeded directly (the service never writes them)
    - The FastAPI app gets its collaborators through dependency overrides and app.state

Design Decisions:
    - StaticPool: one shared connection, so every session sees the same in-memory DB
    - Manual clock for the cache: TTL expiry tested without sleeping
"""

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_user_items_service
from app.core.validation import ParamValidator
from app.db.base import Base
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.store import SqlStore
from app.main import app
from app.models.item import Item
from app.services.user_items import UserItemsService

from tests.services.fakes import (
    CountingStore, FakeCache, ManualClock, RecordingPublisher,
)

SEED_ITEMS = [
    {"item_id": "item-1", "item_name": "sword"},
    {"item_id": "item-2", "item_name": "shield"},
    {"item_id": "item-3", "item_name": "potion"},
]


@pytest.fixture
async def db_manager():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    manager = DatabaseSessionManager.for_engine(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(insert(Item.__table__), SEED_ITEMS)
    yield manager
    await manager.dispose()


@pytest.fixture
def sql_store(db_manager):
    return SqlStore(db_manager, env="test")


@pytest.fixture
def store(sql_store):
    return CountingStore(sql_store)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cache(clock):
    return FakeCache(clock, ttl_seconds=2.0)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def validator():
    return ParamValidator(max_id_length=36, max_name_length=64)


@pytest.fixture
def service(store, cache, publisher, validator):
    return UserItemsService(
        store, cache, publisher, validator, revision="rev-00001",
    )


@pytest.fixture
async def client(service, db_manager, cache):
    """FastAPI test client wired to the test service."""
    app.dependency_overrides[get_user_items_service] = lambda: service
    app.state.db = db_manager
    app.state.cache = cache

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    del app.state.db
    del app.state.cache
