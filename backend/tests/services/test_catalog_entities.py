"""Catalog Entities — creation, retrieval, visibility, and one-level resolution.

Invariants:
    - Ids are allocated 0, 1, 2, ... per table and per recipe for versions
    - fetch() returns identifier-only references; fetch_and_resolve() resolves one level
    - Hidden recipes are unreachable by every read path
    - A recipe naming an unknown category leaves no rows behind
    - Unknown measurement codes read as COUNT with a warning
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from recipes.core.domain_types import (
    MAX_DURATION_SECONDS, MeasurementType, RecipeVersionID, STORAGE_INT_MAX,
)
from recipes.core.entity import fetch_and_resolve
from recipes.core.errors import (
    InternalError, InvalidReferenceError, InvalidValueError, NotFoundError,
)
from recipes.core.reference import Reference
from recipes.entities import (
    Category, Ingredient, Instruction, QuantifiedIngredient, Recipe, RecipeVersion,
)
from recipes.models.recipe import Recipe as RecipeModel, RecipeCategory
from recipes.models.recipe_version import (
    RecipeIngredient, RecipeInstruction, RecipeVersion as RecipeVersionModel,
)

CREATED = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _quantified(ingredient_id, quantity=0.2, measurement=MeasurementType.MASS):
    return QuantifiedIngredient(
        ingredient=Reference(Ingredient, ingredient_id),
        quantity=quantity,
        measurement=measurement,
    )


async def _create_version(tx, recipe_id, ingredients, steps, seconds=600):
    return await RecipeVersion.create(
        tx, recipe_id, CREATED, ingredients,
        [Instruction(text=s) for s in steps], timedelta(seconds=seconds),
    )


@pytest.fixture
async def cake(manager):
    """Dessert, Sugar, Flour, and a Cake recipe with one version."""
    async with manager.transaction() as tx:
        dessert = await Category.create(tx, "Dessert")
        sugar = await Ingredient.create(tx, "Sugar", 1700.0)
        flour = await Ingredient.create(tx, "Flour", 1450.0)
        recipe_id = await Recipe.create(
            tx, "Cake", [Category(id=dessert, name="Dessert")],
        )
        version = await _create_version(
            tx, recipe_id, [_quantified(sugar)], ["Mix", "Bake"],
        )
    return {
        "dessert": dessert, "sugar": sugar, "flour": flour,
        "recipe_id": recipe_id, "version": version,
    }


# ─── Creation ────────────────────────────────────────────────────

async def test_first_category_gets_id_zero(manager):
    async with manager.transaction() as tx:
        assert await Category.create(tx, "Dessert") == 0


async def test_ingredients_numbered_sequentially(manager):
    async with manager.transaction() as tx:
        assert await Ingredient.create(tx, "Sugar", 1700.0) == 0
        assert await Ingredient.create(tx, "Flour", 1450.0) == 1


async def test_new_recipe_holds_unresolved_category_reference(manager, cake):
    async with manager.transaction() as tx:
        recipe = await Recipe.fetch(tx, cake["recipe_id"])
    assert cake["recipe_id"] == 0
    assert [ref.id for ref in recipe.categories] == [0]
    assert not recipe.categories[0].is_resolved
    assert recipe.to_dict()["categories"] == [{"id": 0}]


async def test_first_version_key(cake):
    assert cake["version"] == RecipeVersionID(recipe_id=0, version_id=0)


async def test_version_ids_are_scoped_per_recipe(manager, cake):
    async with manager.transaction() as tx:
        second = await _create_version(tx, cake["recipe_id"], [], ["Eat"])
        bread = await Recipe.create(tx, "Bread", [])
        first_of_bread = await _create_version(tx, bread, [], ["Knead"])
    assert second == RecipeVersionID(0, 1)
    assert first_of_bread == RecipeVersionID(bread, 0)


async def test_unknown_category_rolls_back_recipe(manager, cake, count_rows):
    with pytest.raises(InvalidReferenceError) as exc_info:
        async with manager.transaction() as tx:
            await Recipe.create(tx, "Bad", [Category(id=999, name="Ghost")])
    assert exc_info.value.entity_id == 999
    assert await count_rows(RecipeModel) == 1
    assert await count_rows(RecipeCategory) == 1
    assert await count_rows(RecipeVersionModel) == 1


async def test_one_unknown_category_attaches_none(manager, cake, count_rows):
    categories = [
        Category(id=cake["dessert"], name="Dessert"),
        Category(id=999, name="Ghost"),
    ]
    with pytest.raises(InvalidReferenceError):
        async with manager.transaction() as tx:
            await Recipe.create(tx, "Half", categories)
    assert await count_rows(RecipeCategory) == 1


async def test_version_for_unknown_recipe_rejected(manager):
    with pytest.raises(InvalidReferenceError):
        async with manager.transaction() as tx:
            await _create_version(tx, 12, [], ["Mix"])


async def test_version_with_unknown_ingredient_rejected(manager, cake, count_rows):
    with pytest.raises(InvalidReferenceError) as exc_info:
        async with manager.transaction() as tx:
            await _create_version(tx, cake["recipe_id"], [_quantified(77)], ["Mix"])
    assert exc_info.value.entity == "Ingredient"
    assert await count_rows(RecipeVersionModel) == 1


# ─── Retrieval ───────────────────────────────────────────────────

async def test_missing_category_and_ingredient_not_found(manager):
    async with manager.transaction() as tx:
        with pytest.raises(NotFoundError):
            await Category.fetch(tx, 5)
        with pytest.raises(NotFoundError):
            await Ingredient.fetch(tx, 5)


async def test_fetch_recipe_leaves_references_unresolved(manager, cake):
    async with manager.transaction() as tx:
        recipe = await Recipe.fetch(tx, cake["recipe_id"])
    assert recipe.to_dict() == {
        "id": 0,
        "name": "Cake",
        "versions": {0: {"id": {"recipe_id": 0, "version_id": 0}}},
        "categories": [{"id": 0}],
    }


async def test_fetch_and_resolve_recipe_is_one_level(manager, cake):
    async with manager.transaction() as tx:
        recipe = await fetch_and_resolve(Recipe, tx, cake["recipe_id"])

    assert recipe.categories[0].value == Category(id=0, name="Dessert")
    version = recipe.versions[0].value
    assert version.instructions == [Instruction("Mix"), Instruction("Bake")]
    assert not version.ingredients[0].ingredient.is_resolved

    body = recipe.to_dict()
    assert body["categories"] == [{"id": 0, "name": "Dessert"}]
    assert body["versions"][0]["ingredients"] == [
        {"ingredient": {"id": 0}, "quantity": 0.2, "measurement": "Mass"},
    ]


async def test_fetch_and_resolve_version_resolves_ingredients(manager, cake):
    async with manager.transaction() as tx:
        version = await fetch_and_resolve(RecipeVersion, tx, cake["version"])

    ref = version.ingredients[0].ingredient
    assert ref.value == Ingredient(id=0, name="Sugar", energy_density=1700.0)
    assert version.to_dict() == {
        "id": 0,
        "created": "2024-01-01T12:00:00+00:00",
        "duration": 600,
        "ingredients": [{
            "ingredient": {"id": 0, "name": "Sugar", "energy_density": 1700.0},
            "quantity": 0.2,
            "measurement": "Mass",
        }],
        "instructions": [{"text": "Mix"}, {"text": "Bake"}],
    }


@pytest.mark.parametrize("entity_type,key", [
    (Category, 0),
    (Ingredient, 0),
    (Recipe, 0),
    (RecipeVersion, RecipeVersionID(0, 0)),
])
async def test_fetch_and_resolve_matches_fetch_then_resolve(
    manager, cake, entity_type, key,
):
    async with manager.transaction() as tx:
        combined = await fetch_and_resolve(entity_type, tx, key)
        stepwise = await entity_type.fetch(tx, key)
        await stepwise.resolve_references(tx)
    assert combined.to_dict() == stepwise.to_dict()


async def test_resolve_fetches_once(manager, cake, monkeypatch):
    calls = []
    original = Category.fetch

    async def counting_fetch(cls, session, category_id):
        calls.append(category_id)
        return await original(session, category_id)

    monkeypatch.setattr(Category, "fetch", classmethod(counting_fetch))

    ref = Reference(Category, cake["dessert"])
    async with manager.transaction() as tx:
        first = await ref.resolve(tx)
        second = await ref.resolve(tx)
    assert first is second
    assert calls == [cake["dessert"]]


async def test_ordering_round_trips(manager, cake):
    ingredients = [
        _quantified(cake["flour"], 0.5),
        _quantified(cake["sugar"], 0.1, MeasurementType.VOLUME),
        _quantified(cake["flour"], 3, MeasurementType.COUNT),
    ]
    async with manager.transaction() as tx:
        key = await _create_version(
            tx, cake["recipe_id"], ingredients, ["Mix", "Bake", "Cool"],
        )
    async with manager.transaction() as tx:
        version = await fetch_and_resolve(RecipeVersion, tx, key)

    assert [i.text for i in version.instructions] == ["Mix", "Bake", "Cool"]
    assert [
        (q.ingredient.id, q.quantity, q.measurement) for q in version.ingredients
    ] == [
        (cake["flour"], 0.5, MeasurementType.MASS),
        (cake["sugar"], 0.1, MeasurementType.VOLUME),
        (cake["flour"], 3, MeasurementType.COUNT),
    ]


async def test_created_and_duration_round_trip(manager, cake):
    async with manager.transaction() as tx:
        version = await RecipeVersion.fetch(tx, cake["version"])
    assert version.created == CREATED
    assert version.duration == timedelta(seconds=600)


async def test_naive_created_is_treated_as_utc(manager, cake):
    async with manager.transaction() as tx:
        key = await RecipeVersion.create(
            tx, cake["recipe_id"], datetime(2024, 1, 1, 12, 0), [], [],
            timedelta(0),
        )
        version = await RecipeVersion.fetch(tx, key)
    assert version.created == CREATED


async def test_missing_version_not_found(manager, cake):
    async with manager.transaction() as tx:
        with pytest.raises(NotFoundError):
            await RecipeVersion.fetch(tx, RecipeVersionID(cake["recipe_id"], 9))


async def test_malformed_measurement_reads_as_count(manager, cake, caplog):
    async with manager.transaction() as tx:
        await tx.execute(update(RecipeIngredient).values(measurement=42))

    caplog.set_level(logging.WARNING)
    async with manager.transaction() as tx:
        version = await RecipeVersion.fetch(tx, cake["version"])

    assert version.ingredients[0].measurement is MeasurementType.COUNT
    assert "Invalid measurement 42" in caplog.text


async def test_out_of_range_timestamp_is_internal_error(manager, cake):
    async with manager.transaction() as tx:
        await tx.execute(update(RecipeVersionModel).values(created=10 ** 18))
    with pytest.raises(InternalError, match="timestamp out-of-range"):
        async with manager.transaction() as tx:
            await RecipeVersion.fetch(tx, cake["version"])


async def test_unstorable_created_rejected_and_reads_unaffected(
    manager, cake, count_rows,
):
    # Year 9999 at UTC-5 is year 10000 in UTC.
    late = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone(timedelta(hours=-5)))
    with pytest.raises(InvalidValueError) as exc_info:
        async with manager.transaction() as tx:
            await RecipeVersion.create(
                tx, cake["recipe_id"], late, [], [], timedelta(0),
            )
    assert exc_info.value.field_name == "created"
    assert exc_info.value.http_status == 400
    assert await count_rows(RecipeVersionModel) == 1

    async with manager.transaction() as tx:
        assert [r.name for r in await Recipe.list_visible(tx)] == ["Cake"]


async def test_latest_storable_created_round_trips(manager, cake):
    latest = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    async with manager.transaction() as tx:
        key = await RecipeVersion.create(
            tx, cake["recipe_id"], latest, [], [], timedelta(0),
        )
        version = await RecipeVersion.fetch(tx, key)
    assert version.created == latest


async def test_negative_duration_rejected(manager, cake):
    with pytest.raises(InvalidValueError) as exc_info:
        async with manager.transaction() as tx:
            await RecipeVersion.create(
                tx, cake["recipe_id"], CREATED, [], [], timedelta(seconds=-1),
            )
    assert exc_info.value.field_name == "duration"


async def test_longest_duration_round_trips(manager, cake):
    longest = timedelta(seconds=MAX_DURATION_SECONDS)
    async with manager.transaction() as tx:
        key = await RecipeVersion.create(
            tx, cake["recipe_id"], CREATED, [], [], longest,
        )
        version = await RecipeVersion.fetch(tx, key)
    assert version.duration == longest
    assert version.to_dict()["duration"] == MAX_DURATION_SECONDS


async def test_ingredient_id_beyond_storage_is_unknown(manager, cake):
    with pytest.raises(InvalidReferenceError) as exc_info:
        async with manager.transaction() as tx:
            await _create_version(
                tx, cake["recipe_id"], [_quantified(STORAGE_INT_MAX + 1)], ["Mix"],
            )
    assert exc_info.value.entity_id == STORAGE_INT_MAX + 1


# ─── Visibility ──────────────────────────────────────────────────

async def test_hidden_recipe_is_unreachable(manager, cake):
    recipe_id = cake["recipe_id"]
    async with manager.transaction() as tx:
        await Recipe.set_hidden(tx, recipe_id, True)

    async with manager.transaction() as tx:
        with pytest.raises(NotFoundError):
            await Recipe.fetch(tx, recipe_id)
        with pytest.raises(NotFoundError):
            await fetch_and_resolve(Recipe, tx, recipe_id)
        with pytest.raises(NotFoundError):
            await Recipe.list_versions(tx, recipe_id, 10)
        with pytest.raises(NotFoundError):
            await RecipeVersion.fetch(tx, cake["version"])
        assert await Recipe.list_visible(tx) == []


async def test_hidden_recipe_rejects_new_versions(manager, cake):
    async with manager.transaction() as tx:
        await Recipe.set_hidden(tx, cake["recipe_id"], True)
    with pytest.raises(InvalidReferenceError):
        async with manager.transaction() as tx:
            await _create_version(tx, cake["recipe_id"], [], ["Mix"])


async def test_unhiding_restores_recipe(manager, cake):
    async with manager.transaction() as tx:
        await Recipe.set_hidden(tx, cake["recipe_id"], True)
        await Recipe.set_hidden(tx, cake["recipe_id"], False)
        recipe = await Recipe.fetch(tx, cake["recipe_id"])
    assert recipe.name == "Cake"


async def test_set_hidden_on_unknown_recipe(manager):
    async with manager.transaction() as tx:
        with pytest.raises(NotFoundError):
            await Recipe.set_hidden(tx, 3, True)


# ─── Listings ────────────────────────────────────────────────────

async def test_list_versions_oldest_first_and_resolved(manager, cake):
    async with manager.transaction() as tx:
        await _create_version(tx, cake["recipe_id"], [_quantified(cake["flour"])], ["Eat"])
        versions = await Recipe.list_versions(tx, cake["recipe_id"], 10)
    assert [v.id for v in versions] == [0, 1]
    assert versions[1].ingredients[0].ingredient.value.name == "Flour"


async def test_list_versions_respects_limit(manager, cake):
    async with manager.transaction() as tx:
        await _create_version(tx, cake["recipe_id"], [], ["Eat"])
        versions = await Recipe.list_versions(tx, cake["recipe_id"], 1)
    assert [v.id for v in versions] == [0]


async def test_list_visible_filters_by_name(manager, cake):
    async with manager.transaction() as tx:
        await Recipe.create(tx, "Carrot cake", [])
        await Recipe.create(tx, "Bread", [])
        matching = await Recipe.list_visible(tx, text="CAKE")
        limited = await Recipe.list_visible(tx, limit=1)
        everything = await Recipe.list_visible(tx)
    assert [r.name for r in matching] == ["Cake", "Carrot cake"]
    assert [r.name for r in limited] == ["Cake"]
    assert [r.id for r in everything] == [0, 1, 2]


async def test_list_visible_escapes_wildcards(manager, cake):
    async with manager.transaction() as tx:
        await Recipe.create(tx, "100% rye", [])
        matching = await Recipe.list_visible(tx, text="0%")
        none = await Recipe.list_visible(tx, text="_ake")
    assert [r.name for r in matching] == ["100% rye"]
    assert none == []


async def test_list_all_orders_by_id(manager, cake):
    async with manager.transaction() as tx:
        ingredients = await Ingredient.list_all(tx, 10)
        categories = await Category.list_all(tx, 10)
    assert [i.name for i in ingredients] == ["Sugar", "Flour"]
    assert categories == [Category(id=0, name="Dessert")]


async def test_instruction_rows_carry_step_numbers(manager, cake):
    async with manager.transaction() as tx:
        rows = (await tx.execute(
            RecipeInstruction.__table__.select().order_by(RecipeInstruction.step_number),
        )).all()
    assert [(r.step_number, r.step_text) for r in rows] == [(0, "Mix"), (1, "Bake")]
