"""Change-tracking ORM layer.

Modules
-------
entity        Entity base class (identity, shallow clone)
metadata      Field descriptor table, EntityRegistry, @entity decorator
state         EntityState and the TrackedEntity record
command       SqlCommand buffer and CommandBuilder (INSERT/UPDATE/DELETE)
repository    Repository read path (SELECT + materialization)
unit_of_work  UnitOfWork orchestrator
schema        CREATE TABLE rendering for registered entity types
"""

from __future__ import annotations

from unitwork.orm.entity import EMPTY_ID, Entity
from unitwork.orm.metadata import (
    EntityDescriptor,
    EntityRegistry,
    FieldDescriptor,
    FieldKind,
    default_registry,
    entity,
)
from unitwork.orm.state import EntityState, TrackedEntity
from unitwork.orm.command import CommandBuilder, Parameter, SqlCommand, Statement
from unitwork.orm.repository import Repository
from unitwork.orm.unit_of_work import UnitOfWork
from unitwork.orm.schema import create_table_sql, create_tables

__all__ = [
    "EMPTY_ID",
    "Entity",
    "EntityDescriptor",
    "EntityRegistry",
    "FieldDescriptor",
    "FieldKind",
    "default_registry",
    "entity",
    "EntityState",
    "TrackedEntity",
    "CommandBuilder",
    "Parameter",
    "SqlCommand",
    "Statement",
    "Repository",
    "UnitOfWork",
    "create_table_sql",
    "create_tables",
]
