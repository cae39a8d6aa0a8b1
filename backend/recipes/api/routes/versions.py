"""Recipe Version Routes — list, create, and fetch revisions of one recipe.

Invariants:
    - Versions of hidden or missing recipes are never returned
    - Creating a version for a hidden or missing recipe answers 400
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.api.params import StorageId
from recipes.config import get_settings
from recipes.core.domain_types import RecipeVersionID
from recipes.core.entity import fetch_and_resolve
from recipes.core.reference import Reference
from recipes.entities.ingredient import Ingredient
from recipes.entities.recipe import Recipe
from recipes.entities.recipe_version import (
    Instruction, QuantifiedIngredient, RecipeVersion,
)
from recipes.infrastructure.database import get_db
from recipes.schemas.catalog import RecipeVersionCreate, RecipeVersionCreatedResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/recipes/{recipe_id}/versions", tags=["versions"])


@router.get("")
async def list_versions(recipe_id: StorageId, db: AsyncSession = Depends(get_db)):
    """List every version of a visible recipe, oldest first."""
    logger.debug(f"Listing all versions of recipe {recipe_id}")
    async with db.begin():
        versions = await Recipe.list_versions(
            db, recipe_id, get_settings().listing_limit,
        )
    return [v.to_dict() for v in versions]


@router.post(
    "",
    response_model=RecipeVersionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_version(
    recipe_id: StorageId, body: RecipeVersionCreate, db: AsyncSession = Depends(get_db),
):
    ingredients = [
        QuantifiedIngredient(
            ingredient=Reference(Ingredient, item.ingredient_id),
            quantity=item.quantity,
            measurement=item.measurement_type,
        )
        for item in body.ingredients
    ]
    instructions = [Instruction(text=text) for text in body.instructions]
    async with db.begin():
        version_key = await RecipeVersion.create(
            db,
            recipe_id,
            body.created or datetime.now(timezone.utc),
            ingredients,
            instructions,
            timedelta(seconds=body.duration),
        )
    logger.info(
        f"Created recipe {recipe_id} version {version_key.version_id}",
        extra={"recipe_id": recipe_id, "version_id": version_key.version_id},
    )
    return RecipeVersionCreatedResponse(**version_key.to_dict())


@router.get("/{version_id}")
async def get_version(
    recipe_id: StorageId, version_id: StorageId, db: AsyncSession = Depends(get_db),
):
    logger.debug(f"Getting recipe {recipe_id} version {version_id}")
    async with db.begin():
        version = await fetch_and_resolve(
            RecipeVersion, db, RecipeVersionID(recipe_id, version_id),
        )
    return version.to_dict()
