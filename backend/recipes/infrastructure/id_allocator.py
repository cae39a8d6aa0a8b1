"""Sequential Id Allocator — "max existing + 1" identifiers inside the caller's transaction.

Invariants:
    - Empty scope -> 0; otherwise MAX(column) + 1, so ids are dense and zero-based per scope
    - The read runs in the caller's transaction; the caller's insert must follow in the same one
    - No row lock and no sequence object: two transactions that read before either inserts
      compute the same id under weak isolation, and the later insert fails on the primary key

Design Decisions:
    - Entities depend on the IdAllocator protocol only, so a native sequence can replace
      MaxPlusOneAllocator without touching entity code
"""

from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


class IdAllocator(Protocol):
    """Contract for identifier allocation within a transaction."""
    async def next_id(
        self, session: AsyncSession, column: Any, *criteria: Any,
    ) -> int: ...


class MaxPlusOneAllocator:
    """Derives the next id from the largest id visible to the transaction."""

    async def next_id(
        self, session: AsyncSession, column: Any, *criteria: Any,
    ) -> int:
        query = select(func.max(column))
        if criteria:
            query = query.where(*criteria)
        current = await session.scalar(query)
        return 0 if current is None else int(current) + 1


default_allocator: IdAllocator = MaxPlusOneAllocator()
