"""Shared request parameters — path ids bounded to the BIGINT columns."""

from typing import Annotated

from fastapi import Path, Query

from recipes.core.domain_types import STORAGE_INT_MAX, STORAGE_INT_MIN

StorageId = Annotated[int, Path(ge=STORAGE_INT_MIN, le=STORAGE_INT_MAX)]
ListingLimit = Annotated[int | None, Query(ge=1, le=STORAGE_INT_MAX)]
