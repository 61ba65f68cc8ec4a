"""unitwork: a change-tracking unit of work over parameterized SQL."""

from unitwork.core.errors import (
    ConfigurationError,
    EmptyOperationError,
    InvariantViolationError,
    SchemaMismatchError,
    UnitworkError,
)
from unitwork.orm import Entity, EntityState, Repository, UnitOfWork, entity

VERSION = "0.1.0"

__all__ = [
    "VERSION",
    "ConfigurationError",
    "EmptyOperationError",
    "InvariantViolationError",
    "SchemaMismatchError",
    "UnitworkError",
    "Entity",
    "EntityState",
    "Repository",
    "UnitOfWork",
    "entity",
]
