"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Persistence accessed only through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Entities cross the boundary as plain dicts, so core never sees ORM objects
"""

from typing import Any, Protocol

from formflow.core.domain_types import EntityId, FieldSet


class EntityRepository(Protocol):
    """Contract for the store that durably holds a form's target entity."""

    async def save(
        self, draft: FieldSet, entity_id: EntityId | None = None,
    ) -> EntityId:
        """Write draft as a new entity, or overwrite entity_id. Raises PersistenceError."""
        ...

    async def find_by_id(self, entity_id: EntityId) -> dict[str, Any] | None: ...
