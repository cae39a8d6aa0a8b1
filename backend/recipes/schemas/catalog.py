"""Catalog Schemas — Pydantic request/response models for the HTTP boundary.

Invariants:
    - Names are stripped and non-empty
    - Quantities, energy densities and durations are non-negative
    - Ids fit the BIGINT columns; durations fit both the column and timedelta
    - created must survive the round trip through stored UTC seconds
    - measurement accepts only the serialized MeasurementType labels
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from recipes.core.domain_types import (
    MAX_DURATION_SECONDS, MeasurementType, STORAGE_INT_MAX, to_storage_timestamp,
)


class _Named(BaseModel):
    name: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CategoryCreate(_Named):
    pass


class IngredientCreate(_Named):
    energy_density: float = Field(ge=0)  # J/kg


class CategoryRef(BaseModel):
    """A category as supplied by the client; only the id is checked."""
    id: int = Field(ge=0, le=STORAGE_INT_MAX)
    name: str = ""


class RecipeCreate(_Named):
    categories: list[CategoryRef] = Field(default_factory=list)


class QuantifiedIngredientIn(BaseModel):
    ingredient_id: int = Field(ge=0, le=STORAGE_INT_MAX)
    quantity: float = Field(ge=0)  # SI units
    measurement: Literal["Mass", "Volume", "Count"]

    @property
    def measurement_type(self) -> MeasurementType:
        return MeasurementType[self.measurement.upper()]


class RecipeVersionCreate(BaseModel):
    created: datetime | None = None
    duration: int = Field(ge=0, le=MAX_DURATION_SECONDS)  # seconds
    ingredients: list[QuantifiedIngredientIn] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)

    @field_validator("created")
    @classmethod
    def created_is_storable(cls, v: datetime | None) -> datetime | None:
        if v is not None and to_storage_timestamp(v) is None:
            raise ValueError("created is outside the storable UTC range")
        return v


class CreatedResponse(BaseModel):
    id: int


class RecipeVersionCreatedResponse(BaseModel):
    recipe_id: int
    version_id: int
