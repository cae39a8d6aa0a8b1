"""Schema Version Gate — reads db_version and applies registered steps."""

import pytest
from sqlalchemy import delete

from recipes.core.errors import InternalError
from recipes.infrastructure.schema_version import get_schema_version, run_migrations
from recipes.models.db_version import DbVersion


async def test_reads_seeded_version(manager):
    async with manager.transaction() as tx:
        assert await get_schema_version(tx) == 0


async def test_no_registered_steps_keeps_version(manager):
    async with manager.transaction() as tx:
        assert await run_migrations(tx) == 0
    async with manager.transaction() as tx:
        assert await get_schema_version(tx) == 0


async def test_steps_are_chained_and_persisted(manager):
    applied = []

    async def zero_to_two(session):
        applied.append(0)
        return 2

    async def two_to_three(session):
        applied.append(2)
        return 3

    async with manager.transaction() as tx:
        version = await run_migrations(tx, {0: zero_to_two, 2: two_to_three})
    assert version == 3
    assert applied == [0, 2]
    async with manager.transaction() as tx:
        assert await get_schema_version(tx) == 3


async def test_step_that_does_not_advance_is_rejected(manager):
    async def stuck(session):
        return 0

    with pytest.raises(InternalError, match="did not advance"):
        async with manager.transaction() as tx:
            await run_migrations(tx, {0: stuck})


async def test_empty_version_table_is_internal_error(manager):
    async with manager.transaction() as tx:
        await tx.execute(delete(DbVersion))
    with pytest.raises(InternalError, match="empty"):
        async with manager.transaction() as tx:
            await get_schema_version(tx)
