"""Read path: SELECT an entity type and materialize its rows.

:class:`Repository` issues ``SELECT <cols> FROM "<Type>";`` (full-table
scans are the only supported read shape) and turns each row into a fresh
instance of the requested type.  Reference columns (``CityId``) become
*stub* instances of the referenced type that carry only the identifier.

The connection is opened just before the query and closed right after,
on every exit path, via :func:`unitwork.core.protocols.opened`.

Usage:
    >>> repo = Repository(connection)
    >>> people = await repo.read(Person)                     # every column
    >>> names = await repo.read(Person, {"Id", "Name"})      # column subset

Tags:
    unitwork, orm, repository, read-path, materialization
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from unitwork.core.errors import ConfigurationError, EmptyOperationError, SchemaMismatchError
from unitwork.core.logging import get_logger
from unitwork.core.protocols import AsyncConnection, opened
from unitwork.orm._helpers import to_csv
from unitwork.orm.command import SELECT_TEMPLATE, SqlCommand
from unitwork.orm.entity import Entity
from unitwork.orm.metadata import ID_COLUMN, EntityDescriptor, EntityRegistry, FieldDescriptor, default_registry

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)


class Repository:
    """Reads entities of one type at a time through an :class:`AsyncConnection`."""

    def __init__(self, connection: AsyncConnection, metadata: EntityRegistry | None = None) -> None:
        if connection is None:
            raise ConfigurationError("connection cannot be None")
        self.connection = connection
        self._metadata = metadata or default_registry

    async def read(self, entity_type: type[E], columns: Iterable[str] | None = None) -> list[E]:
        """Read every row of *entity_type*, restricted to *columns* when given.

        *columns* may hold column names (``"CityId"``) or attribute names
        (``"city"``).  When omitted or empty, every declared field is read.

        Raises:
            SchemaMismatchError: a requested column has no field on the type
            EmptyOperationError: the type declares no fields at all
        """
        descriptor = self._metadata.describe(entity_type)

        names = descriptor.resolve_columns(columns) if columns is not None else []
        column_list = to_csv(names)
        if not column_list:
            names = descriptor.columns
            column_list = to_csv(names)
            if not column_list:
                raise EmptyOperationError(
                    f"{descriptor.table} does not have any public fields"
                ).with_context(entity_type=descriptor.table, operation="read")

        command = SqlCommand.single(SELECT_TEMPLATE.format(columns=column_list, table=descriptor.table))
        async with opened(self.connection) as conn:
            rows = await conn.execute_reader(command)

        result = [self._materialize(descriptor, names, row) for row in rows]
        logger.debug("entities_read", table=descriptor.table, columns=len(names), rows=len(result))
        return result

    def _materialize(self, descriptor: EntityDescriptor, columns: list[str], row: Mapping[str, Any]) -> Any:
        instance = descriptor.factory()
        for column in columns:
            f = descriptor.field_for_column(column)
            try:
                value = row[column]
            except KeyError as e:
                raise SchemaMismatchError(
                    f"Column {column!r} missing from {descriptor.table} result row", cause=e
                ).with_context(entity_type=descriptor.table, column=column) from e

            if value is None:
                f.set(instance, None)
            elif f.is_reference:
                f.set(instance, self._stub(f, value))
            else:
                f.set(instance, f.from_db(value))
        return instance

    def _stub(self, f: FieldDescriptor, value: Any) -> Entity:
        """Instance of the referenced type holding only its identifier."""
        if f.ref_type is None:
            raise SchemaMismatchError(
                f"Field {f.name!r} is not a reference to an entity type"
            ).with_context(column=f.column)
        try:
            ref = self._metadata.describe(f.ref_type)
            stub = ref.factory()
        except (TypeError, ConfigurationError) as e:
            raise SchemaMismatchError(
                f"Could not create {f.ref_type.__name__} instance", cause=e
            ).with_context(entity_type=f.ref_type.__name__, column=f.column) from e
        id_field = ref.field_for_column(ID_COLUMN)
        id_field.set(stub, id_field.from_db(value))
        return stub


__all__ = ["Repository"]
