"""RecipeVersion Entity — one immutable revision of a recipe.

Invariants:
    - Addressed by RecipeVersionID; the owning recipe must be visible for reads and writes
    - version_id is allocated per recipe, starting at 0
    - Ingredients come back in list_order, instructions in step_number order
    - An unknown stored measurement code reads as COUNT with a warning, never an error
    - resolve_references() resolves ingredient references only

Design Decisions:
    - created/duration are stored as integer seconds; sub-second precision is dropped
    - Ingredient references are validated on create so a bad id is a 400, not a store failure
    - created and duration are range-checked on create so every stored row reads back
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recipes.core.domain_types import (
    MAX_DURATION_SECONDS, MeasurementType, RecipeVersionID, STORAGE_INT_MAX,
    to_storage_timestamp,
)
from recipes.core.errors import (
    ErrorContext, InternalError, InvalidReferenceError, InvalidValueError,
    NotFoundError,
)
from recipes.core.reference import Reference
from recipes.entities.ingredient import Ingredient
from recipes.infrastructure.id_allocator import IdAllocator, default_allocator
from recipes.models.recipe import Recipe as RecipeModel
from recipes.models.recipe_version import (
    RecipeIngredient, RecipeInstruction, RecipeVersion as RecipeVersionModel,
)

logger = logging.getLogger(__name__)


async def is_recipe_visible(session: AsyncSession, recipe_id: int) -> bool:
    """True when exactly one non-hidden recipe has this id."""
    count = await session.scalar(
        select(func.count(RecipeModel.id))
        .where(RecipeModel.id == recipe_id, RecipeModel.hidden.is_(False)),
    )
    return count == 1


@dataclass
class QuantifiedIngredient:
    """An ingredient reference with its amount in SI units."""
    ingredient: Reference[Ingredient]
    quantity: float
    measurement: MeasurementType

    def to_dict(self) -> dict:
        return {
            "ingredient": self.ingredient.to_dict(),
            "quantity": self.quantity,
            "measurement": self.measurement.label,
        }


@dataclass
class Instruction:
    text: str

    def to_dict(self) -> dict:
        return {"text": self.text}


@dataclass
class RecipeVersion:
    id: int
    created: datetime
    duration: timedelta
    ingredients: list[QuantifiedIngredient] = field(default_factory=list)
    instructions: list[Instruction] = field(default_factory=list)

    @classmethod
    async def fetch(
        cls, session: AsyncSession, version_key: RecipeVersionID,
    ) -> "RecipeVersion":
        recipe_id, version_id = version_key.recipe_id, version_key.version_id
        ctx = ErrorContext(recipe_id=recipe_id, version_id=version_id)

        if not await is_recipe_visible(session, recipe_id):
            raise NotFoundError("Recipe", recipe_id, ctx)

        meta = (await session.execute(
            select(RecipeVersionModel.created, RecipeVersionModel.duration)
            .where(
                RecipeVersionModel.recipe_id == recipe_id,
                RecipeVersionModel.version_id == version_id,
            ),
        )).one_or_none()
        if meta is None:
            raise NotFoundError("RecipeVersion", f"{recipe_id}/{version_id}", ctx)

        ingredient_rows = (await session.execute(
            select(
                RecipeIngredient.ingredient_id,
                RecipeIngredient.quantity,
                RecipeIngredient.measurement,
            )
            .where(
                RecipeIngredient.recipe_id == recipe_id,
                RecipeIngredient.version_id == version_id,
            )
            .order_by(RecipeIngredient.list_order),
        )).all()

        step_texts = (await session.scalars(
            select(RecipeInstruction.step_text)
            .where(
                RecipeInstruction.recipe_id == recipe_id,
                RecipeInstruction.version_id == version_id,
            )
            .order_by(RecipeInstruction.step_number),
        )).all()

        ingredients = [
            QuantifiedIngredient(
                ingredient=Reference(Ingredient, row.ingredient_id),
                quantity=row.quantity,
                measurement=_decode_measurement(
                    row.measurement, version_key, row.ingredient_id,
                ),
            )
            for row in ingredient_rows
        ]

        return cls(
            id=version_id,
            created=_decode_timestamp(meta.created, ctx),
            duration=_decode_duration(meta.duration, ctx),
            ingredients=ingredients,
            instructions=[Instruction(text=text) for text in step_texts],
        )

    async def resolve_references(self, session: AsyncSession) -> None:
        for quantified in self.ingredients:
            await quantified.ingredient.resolve(session)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created": self.created.isoformat(),
            "duration": self.duration // timedelta(seconds=1),
            "ingredients": [i.to_dict() for i in self.ingredients],
            "instructions": [i.to_dict() for i in self.instructions],
        }

    @classmethod
    async def create(
        cls,
        session: AsyncSession,
        recipe_id: int,
        created: datetime,
        ingredients: Sequence[QuantifiedIngredient],
        instructions: Sequence[Instruction],
        duration: timedelta,
        *,
        allocator: IdAllocator = default_allocator,
    ) -> RecipeVersionID:
        """Store a new revision of `recipe_id` and return its composite id."""
        ctx = ErrorContext(recipe_id=recipe_id)
        created_seconds = to_storage_timestamp(created)
        if created_seconds is None:
            raise InvalidValueError("created", created.isoformat(), ctx)
        duration_seconds = duration // timedelta(seconds=1)
        if not 0 <= duration_seconds <= MAX_DURATION_SECONDS:
            raise InvalidValueError("duration", duration_seconds, ctx)

        if not await is_recipe_visible(session, recipe_id):
            raise InvalidReferenceError("Recipe", recipe_id, ctx)

        for ingredient_id in dict.fromkeys(q.ingredient.id for q in ingredients):
            if not await Ingredient.exists(session, ingredient_id):
                raise InvalidReferenceError("Ingredient", ingredient_id, ctx)

        version_id = await allocator.next_id(
            session,
            RecipeVersionModel.version_id,
            RecipeVersionModel.recipe_id == recipe_id,
        )
        ctx.version_id = version_id

        session.add(RecipeVersionModel(
            recipe_id=recipe_id,
            version_id=version_id,
            created=created_seconds,
            duration=duration_seconds,
        ))
        await session.flush()

        session.add_all([
            RecipeIngredient(
                recipe_id=recipe_id,
                version_id=version_id,
                ingredient_id=quantified.ingredient.id,
                list_order=_to_storage_int(list_order, ctx),
                quantity=quantified.quantity,
                measurement=int(quantified.measurement),
            )
            for list_order, quantified in enumerate(ingredients)
        ])
        session.add_all([
            RecipeInstruction(
                recipe_id=recipe_id,
                version_id=version_id,
                step_number=_to_storage_int(step_number, ctx),
                step_text=instruction.text,
            )
            for step_number, instruction in enumerate(instructions)
        ])
        await session.flush()

        return RecipeVersionID(recipe_id=recipe_id, version_id=version_id)


def _decode_measurement(
    code: int, version_key: RecipeVersionID, ingredient_id: int,
) -> MeasurementType:
    measurement = MeasurementType.from_code(code)
    if measurement is not None:
        return measurement
    logger.warning(
        f"Invalid measurement {code} while retrieving recipe={version_key.recipe_id} "
        f"version={version_key.version_id}, ingredient={ingredient_id}",
        extra={
            "recipe_id": version_key.recipe_id,
            "version_id": version_key.version_id,
            "ingredient_id": ingredient_id,
        },
    )
    return MeasurementType.COUNT


def _decode_timestamp(seconds: int, ctx: ErrorContext) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        logger.error(f"Stored timestamp {seconds} is out of range")
        raise InternalError("timestamp out-of-range", ctx) from e


def _decode_duration(seconds: int, ctx: ErrorContext) -> timedelta:
    try:
        return timedelta(seconds=seconds)
    except OverflowError as e:
        logger.error(f"Stored duration {seconds} is out of range")
        raise InternalError("duration out-of-range", ctx) from e


def _to_storage_int(position: int, ctx: ErrorContext) -> int:
    if position > STORAGE_INT_MAX:
        raise InternalError(f"list position {position} does not fit in storage", ctx)
    return position
