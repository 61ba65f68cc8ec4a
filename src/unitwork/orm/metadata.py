"""Field descriptor table and entity registry.

Every component that needs to know what an entity type looks like (the
command builder, the repository and the unit of work) asks an
:class:`EntityRegistry` for its :class:`EntityDescriptor`.  The descriptor is
built once per type, the first time it is requested, and cached; after that
no component inspects the class again.

Descriptor layout::

    EntityDescriptor(Person)
    ├── table    "Person"
    ├── factory  Person            (zero-argument constructor)
    └── fields
        ├── id               → "Id"             SCALAR     uuid.UUID
        ├── name             → "Name"           SCALAR     str
        ├── passport_number  → "PassportNumber" SCALAR     str | None
        └── city             → "CityId"         REFERENCE  City

Column names are the PascalCase form of the attribute name; a reference to
another entity is stored as that entity's identifier under ``<Name>Id``.
A field can override its column with ``field(metadata={"column": "..."})``.

The type map below mirrors what SQLite and PostgreSQL drivers accept as
bind values: UUIDs and timestamps travel as text and are coerced back on
read.

Tags:
    unitwork, orm, metadata, descriptor, registry
"""

from __future__ import annotations

import dataclasses
import datetime
import types
import typing
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from unitwork.core.errors import ConfigurationError, SchemaMismatchError
from unitwork.core.logging import get_logger
from unitwork.orm.entity import Entity

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)

ID_COLUMN = "Id"
REFERENCE_SUFFIX = "Id"


class FieldKind(str, Enum):
    """Whether a field stores a plain value or a reference to another entity."""

    SCALAR = "scalar"
    REFERENCE = "reference"


def _as_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, bytes):
        return uuid.UUID(bytes=value)
    return uuid.UUID(str(value))


def _as_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(str(value))


def _as_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


# python type → bind value conversion
_TO_DB: dict[type, Callable[[Any], Any]] = {
    uuid.UUID: str,
    datetime.datetime: datetime.datetime.isoformat,
    datetime.date: datetime.date.isoformat,
}

# python type → coercion of a value read from a row
_FROM_DB: dict[type, Callable[[Any], Any]] = {
    uuid.UUID: _as_uuid,
    bool: bool,
    datetime.datetime: _as_datetime,
    datetime.date: _as_date,
}


def to_column_name(attribute: str) -> str:
    """``passport_number`` → ``PassportNumber``; ``id`` → ``Id``."""
    return "".join(part[:1].upper() + part[1:] for part in attribute.split("_") if part)


def _unwrap_optional(hint: Any) -> Any:
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _bind_value(value: Any) -> Any:
    if value is None:
        return None
    convert = _TO_DB.get(type(value))
    return convert(value) if convert else value


@dataclass(frozen=True)
class FieldDescriptor:
    """One persistable field of an entity type."""

    name: str
    column: str
    kind: FieldKind
    python_type: Any
    ref_type: type[Entity] | None = None

    @property
    def is_reference(self) -> bool:
        return self.kind is FieldKind.REFERENCE

    def get(self, entity: Entity) -> Any:
        return getattr(entity, self.name)

    def set(self, entity: Entity, value: Any) -> None:
        setattr(entity, self.name, value)

    def to_db(self, entity: Entity) -> Any:
        """Bind value for this field: scalar value, referenced id, or ``None`` (SQL NULL)."""
        value = self.get(entity)
        if self.is_reference:
            if value is None:
                return None
            if not isinstance(value, Entity):
                raise ConfigurationError(
                    f"{type(entity).__name__}.{self.name} is not an Entity"
                ).with_context(entity_type=type(entity).__name__, field=self.name)
            return str(value.id)
        return _bind_value(value)

    def from_db(self, value: Any) -> Any:
        """Coerce a scalar value read from a row to the declared type."""
        if value is None:
            return None
        convert = _FROM_DB.get(self.python_type)
        return convert(value) if convert else value


@dataclass(frozen=True)
class EntityDescriptor:
    """Descriptor table of one entity type."""

    entity_type: type[Entity]
    table: str
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[[], Entity]

    @property
    def columns(self) -> list[str]:
        return [f.column for f in self.fields]

    @property
    def persistable_fields(self) -> tuple[FieldDescriptor, ...]:
        """Fields that take part in change detection (everything except ``id``)."""
        return tuple(f for f in self.fields if f.column != ID_COLUMN)

    def field_named(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def field_for_column(self, column: str) -> FieldDescriptor:
        """Resolve a column to its field; raises :class:`SchemaMismatchError`."""
        for f in self.fields:
            if f.column == column:
                return f
        raise SchemaMismatchError(
            f"Property for column {column!r} not found in {self.table}"
        ).with_context(entity_type=self.table, column=column)

    def resolve_columns(self, names: Iterable[str]) -> list[str]:
        """Canonical column names for *names* (column or attribute names), deduplicated."""
        resolved: dict[str, None] = {}
        for name in names:
            f = self.field_named(name)
            if f is None:
                f = self.field_for_column(name)
            resolved[f.column] = None
        return list(resolved)


class EntityRegistry:
    """
    Type metadata provider and type-tag → factory registry.

    Types are registered by :func:`entity` (or implicitly on first
    :meth:`describe`); descriptors are built lazily so forward references
    between entity modules resolve once every module is imported.
    """

    def __init__(self) -> None:
        self._types: dict[str, type[Entity]] = {}
        self._descriptors: dict[type[Entity], EntityDescriptor] = {}

    def register(self, entity_type: type[E]) -> type[E]:
        if not (isinstance(entity_type, type) and issubclass(entity_type, Entity)):
            raise ConfigurationError(f"{entity_type!r} is not an Entity subclass")
        # a subclass inherits __dataclass_fields__ from Entity; its own fields need @entity
        if "__dataclass_fields__" not in vars(entity_type):
            raise ConfigurationError(
                f"{entity_type.__name__} must be a dataclass (declare it with @entity)"
            )
        previous = self._types.get(entity_type.__name__)
        if previous is not None and previous is not entity_type:
            logger.debug("entity_type_replaced", table=entity_type.__name__)
            self._descriptors.pop(previous, None)
        self._types[entity_type.__name__] = entity_type
        return entity_type

    def is_registered(self, type_name: str) -> bool:
        return type_name in self._types

    def describe(self, entity_type: type[Entity]) -> EntityDescriptor:
        descriptor = self._descriptors.get(entity_type)
        if descriptor is None:
            self.register(entity_type)
            descriptor = self._build(entity_type)
            self._descriptors[entity_type] = descriptor
        return descriptor

    def create(self, type_name: str) -> Entity:
        """Construct a fresh instance of the registered type *type_name*."""
        entity_type = self._types.get(type_name)
        if entity_type is None:
            raise ConfigurationError(f"Entity type {type_name!r} is not registered")
        return self.describe(entity_type).factory()

    def _build(self, entity_type: type[Entity]) -> EntityDescriptor:
        hints = typing.get_type_hints(entity_type)
        fields: list[FieldDescriptor] = []
        seen: set[str] = set()
        for dc_field in dataclasses.fields(entity_type):
            if dc_field.name.startswith("_"):
                continue
            python_type = _unwrap_optional(hints.get(dc_field.name, Any))
            is_ref = isinstance(python_type, type) and issubclass(python_type, Entity)
            column = dc_field.metadata.get("column") or to_column_name(dc_field.name)
            if is_ref and "column" not in dc_field.metadata:
                column += REFERENCE_SUFFIX
            if column in seen:
                raise ConfigurationError(
                    f"{entity_type.__name__} maps more than one field to column {column!r}"
                ).with_context(entity_type=entity_type.__name__, column=column)
            seen.add(column)
            fields.append(
                FieldDescriptor(
                    name=dc_field.name,
                    column=column,
                    kind=FieldKind.REFERENCE if is_ref else FieldKind.SCALAR,
                    python_type=python_type,
                    ref_type=python_type if is_ref else None,
                )
            )
        logger.debug("entity_described", table=entity_type.__name__, columns=[f.column for f in fields])
        return EntityDescriptor(
            entity_type=entity_type,
            table=entity_type.__name__,
            fields=tuple(fields),
            factory=entity_type,
        )


#: Registry used when a component is not given one explicitly.
default_registry = EntityRegistry()


def entity(cls: type[E] | None = None, *, registry: EntityRegistry | None = None) -> Any:
    """Declare an entity type: a keyword-only dataclass with identity equality.

    Usage::

        @entity
        class City(Entity):
            name: str = ""
    """

    def wrap(c: type[E]) -> type[E]:
        c = dataclass(eq=False, kw_only=True)(c)
        return (registry or default_registry).register(c)

    return wrap if cls is None else wrap(cls)


__all__ = [
    "ID_COLUMN",
    "FieldKind",
    "FieldDescriptor",
    "EntityDescriptor",
    "EntityRegistry",
    "default_registry",
    "entity",
    "to_column_name",
]
