"""Category ORM — a named grouping of recipes.

Invariants:
    - id is assigned by the sequential allocator, never by the database
    - name is intended to be unique but is not constrained
"""

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from recipes.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
