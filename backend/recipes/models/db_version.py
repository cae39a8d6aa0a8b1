"""DbVersion ORM — single-row table holding the schema version number."""

from sqlalchemy import BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from recipes.db.base import Base


class DbVersion(Base):
    __tablename__ = "db_version"

    version: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
