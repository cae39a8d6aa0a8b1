"""Initial schema — categories, ingredients, recipes, versions, db_version.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("name", sa.Text, nullable=False),
    )

    op.create_table(
        "ingredients",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("energy_density", sa.Float, nullable=False),
    )

    op.create_table(
        "recipes",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("hidden", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "recipes_categories",
        sa.Column("recipe_id", sa.BigInteger, sa.ForeignKey("recipes.id"), primary_key=True),
        sa.Column("category_id", sa.BigInteger, sa.ForeignKey("categories.id"), primary_key=True),
    )

    op.create_table(
        "recipes_versions",
        sa.Column("recipe_id", sa.BigInteger, sa.ForeignKey("recipes.id"), primary_key=True),
        sa.Column("version_id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("created", sa.BigInteger, nullable=False),
        sa.Column("duration", sa.BigInteger, nullable=False),
    )

    op.create_table(
        "recipes_ingredients",
        sa.Column("recipe_id", sa.BigInteger, primary_key=True),
        sa.Column("version_id", sa.BigInteger, primary_key=True),
        sa.Column("list_order", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("ingredient_id", sa.BigInteger, sa.ForeignKey("ingredients.id"), nullable=False),
        sa.Column("quantity", sa.Float, nullable=False),
        sa.Column("measurement", sa.BigInteger, nullable=False),
        sa.ForeignKeyConstraint(
            ["recipe_id", "version_id"],
            ["recipes_versions.recipe_id", "recipes_versions.version_id"],
        ),
    )

    op.create_table(
        "recipes_instructions",
        sa.Column("recipe_id", sa.BigInteger, primary_key=True),
        sa.Column("version_id", sa.BigInteger, primary_key=True),
        sa.Column("step_number", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("step_text", sa.Text, nullable=False),
        sa.ForeignKeyConstraint(
            ["recipe_id", "version_id"],
            ["recipes_versions.recipe_id", "recipes_versions.version_id"],
        ),
    )

    db_version = op.create_table(
        "db_version",
        sa.Column("version", sa.BigInteger, primary_key=True, autoincrement=False),
    )
    op.bulk_insert(db_version, [{"version": 0}])


def downgrade() -> None:
    op.drop_table("db_version")
    op.drop_table("recipes_instructions")
    op.drop_table("recipes_ingredients")
    op.drop_table("recipes_versions")
    op.drop_table("recipes_categories")
    op.drop_table("recipes")
    op.drop_table("ingredients")
    op.drop_table("categories")
