"""Service test fixtures — async DB, seeded users, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB
    - db_manager patched for channel handlers that open sessions themselves
    - app.state.connection_registry set per test (ASGITransport skips lifespan)

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares one connection, so
      rows committed by the route are visible to the test's own session
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from socialhub.db.base import Base
from socialhub.infrastructure.connection_registry import ConnectionRegistry
from socialhub.infrastructure.database import get_db, DatabaseSessionManager
from socialhub.models.post import Post
from socialhub.models.user import User
from socialhub.services.delivery_router import DeliveryRouter
from socialhub.services.persistence_gateway import PersistenceGateway
import socialhub.infrastructure.database as db_module
from socialhub.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine (no pool settings)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def gateway(test_db):
    return PersistenceGateway(test_db)


@pytest.fixture
def delivery(registry):
    return DeliveryRouter(registry)


@pytest.fixture
async def client(test_session_factory, fake_manager, registry):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.connection_registry = registry

    original_manager = db_module.db_manager
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def users(test_db):
    """Alice (1), Bob (2), Carol (3)."""
    rows = [
        User(username="alice", name="Alice", profile_picture="a.png"),
        User(username="bob", name="Bob"),
        User(username="carol", name="Carol"),
    ]
    test_db.add_all(rows)
    await test_db.commit()
    return {row.username: row for row in rows}


@pytest.fixture
async def bob_post(test_db, users):
    post = Post(user_id=users["bob"].id, content="hello world")
    test_db.add(post)
    await test_db.commit()
    return post
