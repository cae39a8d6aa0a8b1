"""Async Session Factory — provides async DB sessions outside FastAPI.

Invariants:
    - Sessions never expire attributes on commit
    - Meant for scripts, migrations, and test fixtures
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to `engine`."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
