"""RecipeVersion ORM — immutable revisions with ordered ingredients and steps.

Invariants:
    - (recipe_id, version_id) identifies a revision; version_id starts at 0 per recipe
    - created is stored as integer seconds since the Unix epoch (UTC)
    - duration is stored as integer seconds
    - list_order and step_number carry the original list positions
"""

from sqlalchemy import BigInteger, Float, ForeignKey, ForeignKeyConstraint, Text
from sqlalchemy.orm import Mapped, mapped_column

from recipes.db.base import Base


class RecipeVersion(Base):
    __tablename__ = "recipes_versions"

    recipe_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("recipes.id"), primary_key=True,
    )
    version_id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    created: Mapped[int] = mapped_column(BigInteger, nullable=False)
    duration: Mapped[int] = mapped_column(BigInteger, nullable=False)


class RecipeIngredient(Base):
    __tablename__ = "recipes_ingredients"
    __table_args__ = (
        ForeignKeyConstraint(
            ["recipe_id", "version_id"],
            ["recipes_versions.recipe_id", "recipes_versions.version_id"],
        ),
    )

    recipe_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    version_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    list_order: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    ingredient_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("ingredients.id"), nullable=False,
    )
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    measurement: Mapped[int] = mapped_column(BigInteger, nullable=False)


class RecipeInstruction(Base):
    __tablename__ = "recipes_instructions"
    __table_args__ = (
        ForeignKeyConstraint(
            ["recipe_id", "version_id"],
            ["recipes_versions.recipe_id", "recipes_versions.version_id"],
        ),
    )

    recipe_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    version_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    step_number: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    step_text: Mapped[str] = mapped_column(Text, nullable=False)
