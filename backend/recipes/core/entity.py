"""Entity Contract — the capability every retrievable catalog entity implements.

Invariants:
    - fetch() loads exactly one visible row-set by identity or raises NotFoundError
    - resolve_references() resolves only the references the entity owns directly
    - fetch_and_resolve() is the single shared composition of the two

Design Decisions:
    - Protocol over ABC: entities satisfy the contract structurally, no base class
    - The session is always passed in; no entity holds one between calls
"""

from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

E = TypeVar("E", bound="Entity")


class Entity(Protocol):
    """Structural contract for Category, Ingredient, Recipe, RecipeVersion."""

    @classmethod
    async def fetch(cls: type[E], session: "AsyncSession", entity_id: Any) -> E: ...

    async def resolve_references(self, session: "AsyncSession") -> None: ...

    def to_dict(self) -> dict: ...


async def fetch_and_resolve(
    entity_type: type[E], session: "AsyncSession", entity_id: Any,
) -> E:
    """Fetch an entity, then resolve its direct references (one level)."""
    entity = await entity_type.fetch(session, entity_id)
    await entity.resolve_references(session)
    return entity
