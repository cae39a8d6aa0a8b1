"""Service test fixtures — async DB, transaction manager, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with db_version seeded at 0
    - get_db dependency overridden to use the test engine through DatabaseSessionManager
    - db_manager singleton patched for routes that use it directly (readiness probe)
"""

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import create_async_engine
from httpx import ASGITransport, AsyncClient

from recipes.db.base import Base
from recipes.db.session import create_session_factory
from recipes.infrastructure.database import get_db, DatabaseSessionManager
from recipes.models.db_version import DbVersion
import recipes.infrastructure.database as db_module
from recipes.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(insert(DbVersion).values(version=0))
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def manager(test_engine):
    """DatabaseSessionManager bound to the test engine (SQLite takes no pool sizing)."""
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = create_session_factory(test_engine)
    return fake_manager


@pytest.fixture
async def client(manager):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    db_module.db_manager = manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def count_rows(manager):
    """Count rows of an ORM model in a fresh transaction."""
    async def _count(model) -> int:
        async with manager.transaction() as tx:
            return await tx.scalar(select(func.count()).select_from(model))
    return _count
