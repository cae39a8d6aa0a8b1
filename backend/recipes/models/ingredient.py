"""Ingredient ORM — a raw ingredient with its energy density.

Invariants:
    - energy_density is stored in J/kg
"""

from sqlalchemy import BigInteger, Float, Text
from sqlalchemy.orm import Mapped, mapped_column

from recipes.db.base import Base


class Ingredient(Base):
    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    energy_density: Mapped[float] = mapped_column(Float, nullable=False)
