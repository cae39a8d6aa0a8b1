"""Category Entity — a named group of recipes.

Invariants:
    - fetch() raises NotFoundError when no row has the id
    - Owns no references, so resolve_references() does nothing
    - Categories are created once and never changed
"""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.core.domain_types import fits_storage_int
from recipes.core.errors import NotFoundError
from recipes.infrastructure.id_allocator import IdAllocator, default_allocator
from recipes.models.category import Category as CategoryModel


@dataclass
class Category:
    id: int
    name: str

    @classmethod
    async def fetch(cls, session: AsyncSession, category_id: int) -> "Category":
        name = await session.scalar(
            select(CategoryModel.name).where(CategoryModel.id == category_id),
        )
        if name is None:
            raise NotFoundError("Category", category_id)
        return cls(id=category_id, name=name)

    async def resolve_references(self, session: AsyncSession) -> None:
        return None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        name: str,
        *,
        allocator: IdAllocator = default_allocator,
    ) -> int:
        """Store a new category and return its id."""
        category_id = await allocator.next_id(session, CategoryModel.id)
        session.add(CategoryModel(id=category_id, name=name))
        await session.flush()
        return category_id

    @classmethod
    async def exists(cls, session: AsyncSession, category_id: int) -> bool:
        if not fits_storage_int(category_id):
            return False
        count = await session.scalar(
            select(func.count(CategoryModel.id))
            .where(CategoryModel.id == category_id),
        )
        return count == 1

    @classmethod
    async def list_all(cls, session: AsyncSession, limit: int) -> list["Category"]:
        rows = await session.execute(
            select(CategoryModel.id, CategoryModel.name)
            .order_by(CategoryModel.id)
            .limit(limit),
        )
        return [cls(id=row.id, name=row.name) for row in rows]
