"""Category Routes — list, create, and fetch categories."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.api.params import StorageId
from recipes.config import get_settings
from recipes.core.entity import fetch_and_resolve
from recipes.entities.category import Category
from recipes.infrastructure.database import get_db
from recipes.schemas.catalog import CategoryCreate, CreatedResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
async def list_categories(db: AsyncSession = Depends(get_db)):
    logger.debug("Listing all categories")
    async with db.begin():
        categories = await Category.list_all(db, get_settings().listing_limit)
    return [c.to_dict() for c in categories]


@router.post(
    "", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED,
)
async def create_category(body: CategoryCreate, db: AsyncSession = Depends(get_db)):
    async with db.begin():
        category_id = await Category.create(db, body.name)
    logger.info(f"Created category {category_id}", extra={"entity": "Category"})
    return CreatedResponse(id=category_id)


@router.get("/{category_id}")
async def get_category(category_id: StorageId, db: AsyncSession = Depends(get_db)):
    logger.debug(f"Getting category {category_id}")
    async with db.begin():
        category = await fetch_and_resolve(Category, db, category_id)
    return category.to_dict()
