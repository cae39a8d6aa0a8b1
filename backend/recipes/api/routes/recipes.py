"""Recipe Routes — list, create, and fetch recipes.

Invariants:
    - Hidden recipes answer 404 exactly like missing ones
    - A create that names an unknown category answers 400 and commits nothing
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.api.params import ListingLimit, StorageId
from recipes.config import get_settings
from recipes.core.entity import fetch_and_resolve
from recipes.entities.category import Category
from recipes.entities.recipe import Recipe
from recipes.infrastructure.database import get_db
from recipes.schemas.catalog import CreatedResponse, RecipeCreate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/recipes", tags=["recipes"])


@router.get("")
async def list_recipes(
    text: str | None = Query(None, max_length=200),
    limit: ListingLimit = None,
    db: AsyncSession = Depends(get_db),
):
    """List visible recipes, optionally matching `text`."""
    limit = limit or get_settings().recipe_filter_limit
    if text:
        logger.debug(f"Listing recipes matching \"{text}\" with limit {limit}")
    else:
        logger.debug(f"Listing all recipes with limit {limit}")
    async with db.begin():
        found = await Recipe.list_visible(db, text=text, limit=limit)
    return [r.to_dict() for r in found]


@router.post(
    "", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED,
)
async def create_recipe(body: RecipeCreate, db: AsyncSession = Depends(get_db)):
    categories = [Category(id=c.id, name=c.name) for c in body.categories]
    async with db.begin():
        recipe_id = await Recipe.create(db, body.name, categories)
    logger.info(
        f"Created recipe {recipe_id}",
        extra={"entity": "Recipe", "recipe_id": recipe_id},
    )
    return CreatedResponse(id=recipe_id)


@router.get("/{recipe_id}")
async def get_recipe(recipe_id: StorageId, db: AsyncSession = Depends(get_db)):
    logger.debug(f"Getting recipe {recipe_id}")
    async with db.begin():
        recipe = await fetch_and_resolve(Recipe, db, recipe_id)
    return recipe.to_dict()
