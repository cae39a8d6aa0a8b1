"""ORM Models — SQLAlchemy table mappings for the catalog schema.

Invariants:
    - All models inherit from Base (db/base.py)
    - Identifiers are BIGINT and supplied by the application, never autoincremented

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from recipes.models.category import Category  # noqa: F401
from recipes.models.ingredient import Ingredient  # noqa: F401
from recipes.models.recipe import Recipe, RecipeCategory  # noqa: F401
from recipes.models.recipe_version import (  # noqa: F401
    RecipeVersion, RecipeIngredient, RecipeInstruction,
)
from recipes.models.db_version import DbVersion  # noqa: F401
