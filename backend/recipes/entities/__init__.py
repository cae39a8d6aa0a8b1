"""Entities — Category, Ingredient, Recipe, RecipeVersion.

Invariants:
    - Each entity satisfies core.entity.Entity structurally (fetch, resolve_references, to_dict)
    - Every operation takes the caller's session and never commits it
"""

from recipes.entities.category import Category  # noqa: F401
from recipes.entities.ingredient import Ingredient  # noqa: F401
from recipes.entities.recipe_version import (  # noqa: F401
    Instruction, QuantifiedIngredient, RecipeVersion,
)
from recipes.entities.recipe import Recipe  # noqa: F401
