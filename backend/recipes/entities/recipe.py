"""Recipe Entity — a named recipe, its revisions, and its categories.

Invariants:
    - Hidden recipes are invisible to fetch(), list_visible() and list_versions()
    - fetch() returns identifier-only references; resolve_references() fetches each
      version and category one level deep (a version's ingredients stay unresolved)
    - create() validates every category before inserting any membership row and
      relies on the caller's transaction to discard the recipe row on failure
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.core.domain_types import RecipeVersionID
from recipes.core.entity import fetch_and_resolve
from recipes.core.errors import ErrorContext, InvalidReferenceError, NotFoundError
from recipes.core.reference import Reference
from recipes.entities.category import Category
from recipes.entities.recipe_version import RecipeVersion, is_recipe_visible
from recipes.infrastructure.id_allocator import IdAllocator, default_allocator
from recipes.models.recipe import Recipe as RecipeModel, RecipeCategory
from recipes.models.recipe_version import RecipeVersion as RecipeVersionModel

logger = logging.getLogger(__name__)


@dataclass
class Recipe:
    id: int
    name: str
    versions: dict[int, Reference[RecipeVersion]] = field(default_factory=dict)
    categories: list[Reference[Category]] = field(default_factory=list)

    @classmethod
    async def fetch(cls, session: AsyncSession, recipe_id: int) -> "Recipe":
        name = await session.scalar(
            select(RecipeModel.name)
            .where(RecipeModel.id == recipe_id, RecipeModel.hidden.is_(False)),
        )
        if name is None:
            raise NotFoundError("Recipe", recipe_id, ErrorContext(recipe_id=recipe_id))

        version_ids = (await session.scalars(
            select(RecipeVersionModel.version_id)
            .where(RecipeVersionModel.recipe_id == recipe_id)
            .order_by(RecipeVersionModel.version_id),
        )).all()

        category_ids = (await session.scalars(
            select(RecipeCategory.category_id)
            .where(RecipeCategory.recipe_id == recipe_id)
            .order_by(RecipeCategory.category_id),
        )).all()

        return cls(
            id=recipe_id,
            name=name,
            versions={
                version_id: Reference(
                    RecipeVersion, RecipeVersionID(recipe_id, version_id),
                )
                for version_id in version_ids
            },
            categories=[Reference(Category, cid) for cid in category_ids],
        )

    async def resolve_references(self, session: AsyncSession) -> None:
        for version in self.versions.values():
            await version.resolve(session)
        for category in self.categories:
            await category.resolve(session)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "versions": {
                version_id: ref.to_dict()
                for version_id, ref in self.versions.items()
            },
            "categories": [ref.to_dict() for ref in self.categories],
        }

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        name: str,
        categories: Sequence[Category],
        *,
        allocator: IdAllocator = default_allocator,
    ) -> int:
        """Store a new visible recipe in `categories` and return its id."""
        recipe_id = await allocator.next_id(session, RecipeModel.id)
        session.add(RecipeModel(id=recipe_id, name=name, hidden=False))
        await session.flush()

        category_ids = list(dict.fromkeys(category.id for category in categories))
        for category_id in category_ids:
            if not await Category.exists(session, category_id):
                raise InvalidReferenceError(
                    "Category", category_id, ErrorContext(recipe_id=recipe_id),
                )

        session.add_all([
            RecipeCategory(recipe_id=recipe_id, category_id=category_id)
            for category_id in category_ids
        ])
        await session.flush()
        logger.debug(f"Stored recipe {recipe_id} in {len(category_ids)} categories")
        return recipe_id

    @classmethod
    async def list_visible(
        cls, session: AsyncSession, text: str | None = None, limit: int = 100,
    ) -> list["Recipe"]:
        """Visible recipes by id, optionally filtered by a name substring."""
        query = select(RecipeModel.id).where(RecipeModel.hidden.is_(False))
        if text:
            query = query.where(RecipeModel.name.icontains(text, autoescape=True))
        recipe_ids = (await session.scalars(
            query.order_by(RecipeModel.id).limit(limit),
        )).all()
        return [
            await fetch_and_resolve(cls, session, recipe_id)
            for recipe_id in recipe_ids
        ]

    @classmethod
    async def list_versions(
        cls, session: AsyncSession, recipe_id: int, limit: int,
    ) -> list[RecipeVersion]:
        """All revisions of a visible recipe, oldest first, with ingredients resolved."""
        if not await is_recipe_visible(session, recipe_id):
            raise NotFoundError("Recipe", recipe_id, ErrorContext(recipe_id=recipe_id))

        version_ids = (await session.scalars(
            select(RecipeVersionModel.version_id)
            .where(RecipeVersionModel.recipe_id == recipe_id)
            .order_by(RecipeVersionModel.version_id)
            .limit(limit),
        )).all()
        return [
            await fetch_and_resolve(
                RecipeVersion, session, RecipeVersionID(recipe_id, version_id),
            )
            for version_id in version_ids
        ]

    @classmethod
    async def set_hidden(
        cls, session: AsyncSession, recipe_id: int, hidden: bool,
    ) -> None:
        """Toggle the soft-delete flag of an existing recipe."""
        result = await session.execute(
            update(RecipeModel)
            .where(RecipeModel.id == recipe_id)
            .values(hidden=hidden),
        )
        if result.rowcount != 1:
            raise NotFoundError("Recipe", recipe_id, ErrorContext(recipe_id=recipe_id))
