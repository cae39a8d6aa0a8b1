"""Recipe ORM — recipe rows and their category memberships.

Invariants:
    - hidden is the soft-delete flag; hidden rows are filtered from every read path
    - recipes_categories has one row per (recipe, category) membership
"""

from sqlalchemy import BigInteger, Boolean, ForeignKey, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from recipes.db.base import Base


class Recipe(Base):
    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    hidden: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )


class RecipeCategory(Base):
    __tablename__ = "recipes_categories"

    recipe_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("recipes.id"), primary_key=True,
    )
    category_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("categories.id"), primary_key=True,
    )
