"""Schema Version Gate — reports and advances the db_version number.

Invariants:
    - The version only ever increases; each step must return a larger number
    - The final version is written with a compare-and-set on the starting version
    - Table creation belongs to Alembic; steps registered here are data-only upgrades

Design Decisions:
    - MIGRATIONS is keyed by the version a step upgrades from; it is empty today,
      so run_migrations() only confirms and reports the current version
"""

import logging
from typing import Awaitable, Callable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.core.errors import InternalError
from recipes.models.db_version import DbVersion

logger = logging.getLogger(__name__)

Migration = Callable[[AsyncSession], Awaitable[int]]

MIGRATIONS: dict[int, Migration] = {}


async def get_schema_version(session: AsyncSession) -> int:
    """Read the current schema version."""
    version = await session.scalar(select(DbVersion.version))
    if version is None:
        raise InternalError("db_version table is empty")
    return int(version)


async def run_migrations(
    session: AsyncSession, migrations: dict[int, Migration] | None = None,
) -> int:
    """Apply registered steps starting at the stored version; return the final version."""
    steps = MIGRATIONS if migrations is None else migrations
    starting_version = await get_schema_version(session)
    logger.debug(f"Running database migrations starting at version {starting_version}")

    current = starting_version
    migration = steps.get(current)
    while migration is not None:
        logger.debug(f"Applying migration from version {current}")
        new_version = await migration(session)
        if new_version <= current:
            raise InternalError(
                f"migration from version {current} did not advance (got {new_version})",
            )
        logger.debug(f"After applying migration, version is now {new_version}")
        current = new_version
        migration = steps.get(current)

    result = await session.execute(
        update(DbVersion)
        .where(DbVersion.version == starting_version)
        .values(version=current),
    )
    if result.rowcount != 1:
        raise InternalError("db_version changed while migrations were running")
    return current
