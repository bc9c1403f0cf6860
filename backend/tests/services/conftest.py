"""Service test fixtures - async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session factory
    - get_notifier overridden with the RecordingNotifier from the root conftest
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from fulfillment.db.base import Base
from fulfillment.infrastructure.database import get_db, DatabaseSessionManager
from fulfillment.models.order import Order
from fulfillment.models.product import Product
from fulfillment.services.notification_service import get_notifier
import fulfillment.infrastructure.database as db_module
import fulfillment.models  # noqa: F401
from fulfillment.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
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
async def client(test_engine, test_session_factory, notifier):
    """FastAPI test client with DB and notifier dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def seed_order(test_db):
    """Insert products and an order containing them; returns the Order."""
    async def _seed(*products: Product) -> Order:
        test_db.add_all(products)
        order = Order(items=set(products))
        test_db.add(order)
        await test_db.commit()
        await test_db.refresh(order)
        return order

    return _seed


@pytest.fixture
def load_products(test_session_factory):
    """Read products through a fresh session: {name: Product}."""
    async def _load() -> dict[str, Product]:
        async with test_session_factory() as session:
            result = await session.execute(select(Product))
            return {p.name: p for p in result.scalars().all()}

    return _load
