"""Domain Types — identity types and enums shared by every entity.

Invariants:
    - CategoryId, IngredientId, RecipeId, VersionId wrap 64-bit integers
    - RecipeVersionID is always addressed relative to its owning recipe
    - MeasurementType codes are the integers stored in recipes_ingredients.measurement
    - A timestamp is storable only if its integer seconds decode back to a UTC datetime

Design Decisions:
    - NewType over dataclass wrappers for scalar ids: zero runtime cost
    - RecipeVersionID is a frozen dataclass so it can key dicts and serialize as a record
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CategoryId = NewType("CategoryId", int)
IngredientId = NewType("IngredientId", int)
RecipeId = NewType("RecipeId", int)
VersionId = NewType("VersionId", int)

# Bounds of the signed BIGINT columns used for ids and positions.
STORAGE_INT_MIN = -(2 ** 63)
STORAGE_INT_MAX = 2 ** 63 - 1


def fits_storage_int(value: int) -> bool:
    return STORAGE_INT_MIN <= value <= STORAGE_INT_MAX


# Longest duration, in whole seconds, that both the column and timedelta hold.
MAX_DURATION_SECONDS = min(
    timedelta.max.days * 86400 + timedelta.max.seconds, STORAGE_INT_MAX,
)


@dataclass(frozen=True)
class RecipeVersionID:
    """Composite key of one revision of one recipe."""
    recipe_id: int
    version_id: int

    def to_dict(self) -> dict:
        return {"recipe_id": self.recipe_id, "version_id": self.version_id}


# ─── Enums ───────────────────────────────────────────────────────

class MeasurementType(IntEnum):
    """How an ingredient quantity is measured. Values are the stored codes."""
    MASS = 0
    VOLUME = 1
    COUNT = 2

    @property
    def label(self) -> str:
        """Serialized name: Mass, Volume, Count."""
        return self.name.capitalize()

    @classmethod
    def from_code(cls, code: int) -> "MeasurementType | None":
        """Decode a stored integer, or None when the code is unknown."""
        try:
            return cls(code)
        except ValueError:
            return None


# ─── Timestamps ──────────────────────────────────────────────────

def to_storage_timestamp(moment: datetime) -> int | None:
    """Whole UTC seconds for `moment`, or None when they would not read back.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        seconds = int(moment.timestamp())
        datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return seconds
