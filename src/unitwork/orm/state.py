"""Lifecycle state and the tracked-entity record."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from unitwork.orm.entity import Entity


class EntityState(str, Enum):
    """Lifecycle state of a tracked entity.

    ``CLEAN`` → ``UPDATE`` (set by change detection), or ``ADD`` / ``DELETE``
    (set explicitly by the caller) → back to ``CLEAN`` after a commit.
    ``ADD`` and ``DELETE`` are never relabelled by change detection.
    """

    CLEAN = "clean"
    UPDATE = "update"
    ADD = "add"
    DELETE = "delete"


@dataclass(eq=False)
class TrackedEntity:
    """Bookkeeping the unit of work keeps for one live entity."""

    entity: Entity
    state: EntityState = EntityState.CLEAN
    changed_fields: set[str] = field(default_factory=set)
    # 0 means "not explicitly ordered"
    index: int = 0

    @property
    def is_explicit(self) -> bool:
        """True for entities the caller added or deleted."""
        return self.state in (EntityState.ADD, EntityState.DELETE)

    def reset(self) -> None:
        self.state = EntityState.CLEAN
        self.changed_fields.clear()
        self.index = 0


__all__ = [
    "EntityState",
    "TrackedEntity",
]
