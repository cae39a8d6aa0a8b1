"""Reference Cell — a deferred, cacheable pointer to another entity by identity.

Invariants:
    - The identifier never changes after construction
    - State moves one way only: Unresolved -> Resolved
    - resolve() calls the target's fetch() at most once, never fetch_and_resolve()
    - to_dict() emits {"id": ...} while unresolved and the full entity once resolved

Design Decisions:
    - Tagged variant (Unresolved | Resolved) instead of an Optional value slot;
      serialization switches on the tag
    - The target type travels with the reference so resolve() knows which fetch() to call
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from recipes.core.entity import Entity

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

E = TypeVar("E", bound=Entity)


@dataclass(frozen=True)
class Unresolved:
    """Only the target's identifier is known."""
    id: Any


@dataclass(frozen=True)
class Resolved(Generic[E]):
    """The target has been fetched and cached alongside its identifier."""
    id: Any
    value: E


class Reference(Generic[E]):
    """Pointer to an entity of type `target`, resolved on demand."""

    __slots__ = ("_target", "_state")

    def __init__(self, target: type[E], entity_id: Any):
        self._target = target
        self._state: Unresolved | Resolved[E] = Unresolved(entity_id)

    @property
    def target(self) -> type[E]:
        return self._target

    @property
    def id(self) -> Any:
        return self._state.id

    @property
    def state(self) -> "Unresolved | Resolved[E]":
        return self._state

    @property
    def is_resolved(self) -> bool:
        return isinstance(self._state, Resolved)

    @property
    def value(self) -> E:
        """The cached entity. Raises if resolve() has not succeeded yet."""
        if isinstance(self._state, Resolved):
            return self._state.value
        raise RuntimeError(
            f"Reference to {self._target.__name__} {self._state.id!r} is not resolved",
        )

    async def resolve(self, session: "AsyncSession") -> E:
        """Return the cached entity, fetching it through `session` on first use."""
        if isinstance(self._state, Resolved):
            return self._state.value
        value = await self._target.fetch(session, self._state.id)
        self._state = Resolved(self._state.id, value)
        return value

    def to_dict(self) -> dict:
        state = self._state
        if isinstance(state, Resolved):
            return state.value.to_dict()
        return {"id": _serialize_id(state.id)}

    def __repr__(self) -> str:
        tag = "resolved" if self.is_resolved else "unresolved"
        return f"Reference({self._target.__name__}, {self.id!r}, {tag})"


def _serialize_id(entity_id: Any) -> Any:
    """Composite ids (RecipeVersionID) serialize as nested records."""
    to_dict = getattr(entity_id, "to_dict", None)
    return to_dict() if callable(to_dict) else entity_id
