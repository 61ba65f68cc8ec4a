"""DDL rendering for registered entity types.

Bootstrap helper for demos and tests: renders ``CREATE TABLE IF NOT EXISTS``
from the descriptor table so the rows the command builder writes have a
home.  Not a migration tool; existing tables are left untouched.
"""

from __future__ import annotations

import datetime
import uuid

from unitwork.core.logging import get_logger
from unitwork.core.protocols import AsyncConnection, opened
from unitwork.orm._helpers import quote
from unitwork.orm.command import SqlCommand, Statement
from unitwork.orm.entity import Entity
from unitwork.orm.metadata import ID_COLUMN, EntityRegistry, FieldDescriptor, default_registry

logger = get_logger(__name__)

# python type → portable column type
COLUMN_TYPES: dict[type, str] = {
    str: "TEXT",
    int: "INTEGER",
    bool: "INTEGER",
    float: "REAL",
    uuid.UUID: "TEXT",
    datetime.datetime: "TEXT",
    datetime.date: "TEXT",
}


def _column_type(f: FieldDescriptor) -> str:
    if f.is_reference:
        return "TEXT"
    return COLUMN_TYPES.get(f.python_type, "TEXT")


def create_table_sql(entity_type: type[Entity], metadata: EntityRegistry | None = None) -> str:
    """``CREATE TABLE IF NOT EXISTS "<Type>" (...);`` for *entity_type*."""
    descriptor = (metadata or default_registry).describe(entity_type)
    columns = []
    for f in descriptor.fields:
        definition = f"{quote(f.column)} {_column_type(f)}"
        if f.column == ID_COLUMN:
            definition += " PRIMARY KEY"
        columns.append(definition)
    return f"CREATE TABLE IF NOT EXISTS {quote(descriptor.table)} ({', '.join(columns)});"


async def create_tables(
    connection: AsyncConnection,
    *entity_types: type[Entity],
    metadata: EntityRegistry | None = None,
) -> list[str]:
    """Create a table for each of *entity_types*; returns the table names."""
    command = SqlCommand([Statement(create_table_sql(t, metadata)) for t in entity_types])
    if not command.statements:
        return []
    async with opened(connection) as conn:
        await conn.execute_non_query(command)
    tables = [t.__name__ for t in entity_types]
    logger.info("tables_created", tables=tables)
    return tables


__all__ = [
    "COLUMN_TYPES",
    "create_table_sql",
    "create_tables",
]
