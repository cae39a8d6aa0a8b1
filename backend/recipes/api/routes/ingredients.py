"""Ingredient Routes — list, create, and fetch ingredients."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.api.params import StorageId
from recipes.config import get_settings
from recipes.core.entity import fetch_and_resolve
from recipes.entities.ingredient import Ingredient
from recipes.infrastructure.database import get_db
from recipes.schemas.catalog import CreatedResponse, IngredientCreate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])


@router.get("")
async def list_ingredients(db: AsyncSession = Depends(get_db)):
    logger.debug("Listing all ingredients")
    async with db.begin():
        ingredients = await Ingredient.list_all(db, get_settings().listing_limit)
    return [i.to_dict() for i in ingredients]


@router.post(
    "", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED,
)
async def create_ingredient(
    body: IngredientCreate, db: AsyncSession = Depends(get_db),
):
    async with db.begin():
        ingredient_id = await Ingredient.create(db, body.name, body.energy_density)
    logger.info(f"Created ingredient {ingredient_id}", extra={"entity": "Ingredient"})
    return CreatedResponse(id=ingredient_id)


@router.get("/{ingredient_id}")
async def get_ingredient(ingredient_id: StorageId, db: AsyncSession = Depends(get_db)):
    logger.debug(f"Getting ingredient {ingredient_id}")
    async with db.begin():
        ingredient = await fetch_and_resolve(Ingredient, db, ingredient_id)
    return ingredient.to_dict()
