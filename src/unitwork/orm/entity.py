"""Entity base class.

An entity is a dataclass with a process-generated :class:`uuid.UUID`
identifier.  Identity, not field values, decides equality: a row read back
from the database and the instance the unit of work is tracking are
different Python objects that represent the same persisted row, so every
comparison in the package goes through :meth:`Entity.is_equal`.

Concrete types are declared with :func:`unitwork.orm.metadata.entity`::

    @entity
    class City(Entity):
        name: str = ""

Tags:
    unitwork, orm, entity, identity, dataclasses
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, TypeVar

#: The zero identifier.  Never assigned to a live entity; rejected on delete.
EMPTY_ID = uuid.UUID(int=0)

E = TypeVar("E", bound="Entity")


@dataclass(eq=False, kw_only=True)
class Entity:
    """Base record type with identity and shallow-copy capability."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def shallow_clone(self: E) -> E:
        """Field-wise copy; nested entity references are shared, not copied."""
        return copy.copy(self)

    def is_equal(self, other: Any) -> bool:
        """True when *other* has the same identifier and concrete type."""
        if other is None or not isinstance(other, Entity):
            return False
        return type(other) is type(self) and other.id == self.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((type(self), self.id))


__all__ = [
    "EMPTY_ID",
    "Entity",
]
