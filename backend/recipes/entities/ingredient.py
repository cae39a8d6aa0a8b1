"""Ingredient Entity — a raw ingredient and its energy density (J/kg)."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.core.domain_types import fits_storage_int
from recipes.core.errors import NotFoundError
from recipes.infrastructure.id_allocator import IdAllocator, default_allocator
from recipes.models.ingredient import Ingredient as IngredientModel


@dataclass
class Ingredient:
    id: int
    name: str
    energy_density: float

    @classmethod
    async def fetch(cls, session: AsyncSession, ingredient_id: int) -> "Ingredient":
        row = (await session.execute(
            select(IngredientModel.name, IngredientModel.energy_density)
            .where(IngredientModel.id == ingredient_id),
        )).one_or_none()
        if row is None:
            raise NotFoundError("Ingredient", ingredient_id)
        return cls(
            id=ingredient_id, name=row.name, energy_density=row.energy_density,
        )

    async def resolve_references(self, session: AsyncSession) -> None:
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "energy_density": self.energy_density,
        }

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        name: str,
        energy_density: float,
        *,
        allocator: IdAllocator = default_allocator,
    ) -> int:
        """Store a new ingredient and return its id."""
        ingredient_id = await allocator.next_id(session, IngredientModel.id)
        session.add(IngredientModel(
            id=ingredient_id, name=name, energy_density=energy_density,
        ))
        await session.flush()
        return ingredient_id

    @classmethod
    async def exists(cls, session: AsyncSession, ingredient_id: int) -> bool:
        if not fits_storage_int(ingredient_id):
            return False
        count = await session.scalar(
            select(func.count(IngredientModel.id))
            .where(IngredientModel.id == ingredient_id),
        )
        return count == 1

    @classmethod
    async def list_all(cls, session: AsyncSession, limit: int) -> list["Ingredient"]:
        rows = await session.execute(
            select(
                IngredientModel.id, IngredientModel.name,
                IngredientModel.energy_density,
            )
            .order_by(IngredientModel.id)
            .limit(limit),
        )
        return [
            cls(id=row.id, name=row.name, energy_density=row.energy_density)
            for row in rows
        ]
