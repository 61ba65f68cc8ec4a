"""SQL command buffer and builder.

:class:`CommandBuilder` renders INSERT / UPDATE / DELETE statements into one
shared :class:`SqlCommand`, so a whole commit travels to the database as a
single batch.  Values are always bound parameters; the only text spliced
into the SQL is table and column names, which come from entity metadata
and never from callers' data.

Rendered shapes::

    INSERT INTO "Person" ("Id","Name","Age","CityId") VALUES (:p0,:p1,:p2,:p3);
    UPDATE "Person" SET "Name"=:p4,"Age"=:p5 WHERE "Id"=:p6;
    DELETE FROM "Person" WHERE "Id" IN (:p7);

Parameter names come from a counter owned by the builder instance, so they
are unique across every statement appended to the same command.

Tags:
    unitwork, orm, sql, command-builder, parameters
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from unitwork.core.errors import ConfigurationError, EmptyOperationError
from unitwork.core.logging import get_logger
from unitwork.orm._helpers import quote, to_csv
from unitwork.orm.entity import EMPTY_ID, Entity
from unitwork.orm.metadata import ID_COLUMN, EntityRegistry, default_registry
from unitwork.orm.state import TrackedEntity

logger = get_logger(__name__)

INSERT_TEMPLATE = 'INSERT INTO "{table}" ({columns}) VALUES {values};'
UPDATE_TEMPLATE = 'UPDATE "{table}" SET {assignments} WHERE "Id"={id_param};'
DELETE_TEMPLATE = 'DELETE FROM "{table}" WHERE "Id" IN ({ids});'
SELECT_TEMPLATE = 'SELECT {columns} FROM "{table}";'

PARAMETER_PREFIX = "p"


@dataclass(frozen=True)
class Parameter:
    """A named bind parameter."""

    name: str
    value: Any

    @property
    def placeholder(self) -> str:
        return f":{self.name}"


@dataclass
class Statement:
    """One rendered statement and the parameters it binds."""

    sql: str
    parameters: list[Parameter] = field(default_factory=list)

    @property
    def params(self) -> dict[str, Any]:
        return {p.name: p.value for p in self.parameters}


@dataclass
class SqlCommand:
    """
    Mutable command buffer: text plus ordered parameters.

    ``text`` is the concatenation of every appended statement; ``statements``
    keeps each one with its own parameters so adapters whose drivers cannot
    bind a multi-statement string can still run the batch in one call.
    """

    statements: list[Statement] = field(default_factory=list)

    @classmethod
    def single(cls, sql: str, parameters: list[Parameter] | None = None) -> SqlCommand:
        return cls([Statement(sql, list(parameters or []))])

    @property
    def text(self) -> str:
        return "".join(s.sql for s in self.statements)

    @property
    def parameters(self) -> list[Parameter]:
        return [p for s in self.statements for p in s.parameters]

    def append(self, statement: Statement) -> None:
        self.statements.append(statement)

    def __repr__(self) -> str:
        return f"SqlCommand(statements={len(self.statements)}, parameters={len(self.parameters)})"


class CommandBuilder:
    """Appends INSERT/UPDATE/DELETE statements to a shared :class:`SqlCommand`."""

    def __init__(
        self,
        command: SqlCommand | None = None,
        metadata: EntityRegistry | None = None,
    ) -> None:
        self.command = command if command is not None else SqlCommand()
        self._metadata = metadata or default_registry
        self._counter = 0

    def _next_parameter_name(self) -> str:
        name = f"{PARAMETER_PREFIX}{self._counter}"
        self._counter += 1
        return name

    def _bind(self, statement: Statement, value: Any) -> Parameter:
        parameter = Parameter(self._next_parameter_name(), value)
        statement.parameters.append(parameter)
        return parameter

    def append_insert(self, entity: Entity) -> None:
        """Append ``INSERT INTO "<Type>" (<cols>) VALUES (<params>);`` for *entity*."""
        if entity is None:
            raise ConfigurationError("entity cannot be None").with_context(operation="insert")

        descriptor = self._metadata.describe(type(entity))
        columns = to_csv(f.column for f in descriptor.fields)
        if not columns:
            raise EmptyOperationError(
                f"{descriptor.table} does not have any public fields"
            ).with_context(entity_type=descriptor.table, operation="insert")

        statement = Statement(sql="")
        placeholders = [self._bind(statement, f.to_db(entity)).placeholder for f in descriptor.fields]
        if not placeholders:
            raise EmptyOperationError("Insert query does not have any parameters").with_context(
                entity_type=descriptor.table, operation="insert"
            )
        values = f"({','.join(placeholders)})"

        statement.sql = INSERT_TEMPLATE.format(table=descriptor.table, columns=columns, values=values)
        self.command.append(statement)
        logger.debug("insert_appended", table=descriptor.table, entity_id=str(entity.id))

    def append_update(self, tracked: TrackedEntity) -> None:
        """Append an UPDATE covering only the tracked entity's changed fields.

        A tracked entity without changed fields is skipped with a warning.
        """
        if tracked is None:
            raise ConfigurationError("tracked entity cannot be None").with_context(operation="update")

        entity = tracked.entity
        descriptor = self._metadata.describe(type(entity))
        if not tracked.changed_fields:
            logger.warning(
                "update_skipped_no_changes",
                table=descriptor.table,
                entity_id=str(entity.id),
            )
            return

        statement = Statement(sql="")
        assignments = []
        for f in descriptor.persistable_fields:
            if f.name not in tracked.changed_fields:
                continue
            parameter = self._bind(statement, f.to_db(entity))
            assignments.append(f"{quote(f.column)}={parameter.placeholder}")
        if not assignments:
            raise EmptyOperationError("Update SET block is empty").with_context(
                entity_type=descriptor.table,
                entity_id=str(entity.id),
                operation="update",
                changed_fields=sorted(tracked.changed_fields),
            )

        id_parameter = self._bind(statement, descriptor.field_for_column(ID_COLUMN).to_db(entity))
        statement.sql = UPDATE_TEMPLATE.format(
            table=descriptor.table,
            assignments=",".join(assignments),
            id_param=id_parameter.placeholder,
        )
        self.command.append(statement)
        logger.debug("update_appended", table=descriptor.table, entity_id=str(entity.id), fields=len(assignments))

    def append_delete(self, entity_id: uuid.UUID | str | None, table: str) -> None:
        """Append ``DELETE FROM "<table>" WHERE "Id" IN (<param>);``."""
        if not table:
            raise ConfigurationError("table cannot be empty").with_context(operation="delete")
        if entity_id is None or str(entity_id) in ("", str(EMPTY_ID)):
            raise ConfigurationError("id cannot be an empty identifier").with_context(
                entity_type=table, operation="delete"
            )

        statement = Statement(sql="")
        id_parameter = self._bind(statement, str(entity_id))
        statement.sql = DELETE_TEMPLATE.format(table=table, ids=id_parameter.placeholder)
        self.command.append(statement)
        logger.debug("delete_appended", table=table, entity_id=str(entity_id))


__all__ = [
    "Parameter",
    "Statement",
    "SqlCommand",
    "CommandBuilder",
    "INSERT_TEMPLATE",
    "UPDATE_TEMPLATE",
    "DELETE_TEMPLATE",
    "SELECT_TEMPLATE",
]
