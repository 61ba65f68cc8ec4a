"""
Structured error types for unitwork.

Every failure the unit of work, command builder or repository can raise is
a :class:`UnitworkError` subclass carrying a category, a retry flag and a
structured :class:`ErrorContext`. None of them are retried internally: they
surface to the immediate caller before any I/O happens (or, for invariant
violations, as soon as the defect is noticed).

Manifesto:
    - **Typed hierarchy:** one subclass per failure family
    - **Explicit retry semantics:** everything here is fatal (``retryable=False``)
    - **Rich context:** the entity type, id and operation travel with the error
    - **Chaining:** the underlying exception is kept as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        UnitworkError                         │
        │           (category, retryable, context, cause)              │
        ├──────────────────────────────────────────────────────────────┤
        │  ConfigurationError      CONFIG      null entity, empty id   │
        │  SchemaMismatchError     VALIDATION  unknown column/field    │
        │  EmptyOperationError     VALIDATION  nothing to render       │
        │  InvariantViolationError INTERNAL    tracking defect         │
        └──────────────────────────────────────────────────────────────┘

    Driver errors (``sqlite3.Error``, ``sqlalchemy.exc.DBAPIError``) are
    NOT wrapped; they propagate unmodified.

Examples:
    >>> error = EmptyOperationError("Person has no persistable fields")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(entity_type="Person").context.entity_type
    'Person'

Tags:
    error-handling, exception-hierarchy, error-context, unitwork
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and logging."""

    CONFIG = "CONFIG"             # Missing or invalid caller arguments
    VALIDATION = "VALIDATION"     # Schema mismatch, empty statements
    INTERNAL = "INTERNAL"         # Bugs, broken invariants


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        entity_type: Name of the entity type involved
        entity_id: Identifier of the entity involved
        operation: Unit-of-work or builder operation (``"insert"``, ``"commit"``, ...)
        metadata: Additional key-value pairs
    """

    entity_type: str | None = None
    entity_id: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["entity_type", "entity_id", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class UnitworkError(Exception):
    """
    Base exception for all unitwork errors.

    Subclasses set ``default_category``; ``default_retryable`` stays ``False``
    across the hierarchy because nothing in the core is transient.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UnitworkError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaMismatchError("Unknown column").with_context(
                entity_type="Person", column="Nickname"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ConfigurationError(UnitworkError):
    """
    Missing or invalid required argument.

    Raised for a ``None`` entity, a non-entity object, the empty identifier,
    an empty table name or an invalid entity declaration.
    """

    default_category = ErrorCategory.CONFIG


class SchemaMismatchError(UnitworkError):
    """A requested or derived column has no matching field on the target type."""

    default_category = ErrorCategory.VALIDATION


class EmptyOperationError(UnitworkError):
    """
    A statement would be rendered without fields, parameters, values or filters.

    Raised at build time so a malformed statement never reaches the database.
    """

    default_category = ErrorCategory.VALIDATION


class InvariantViolationError(UnitworkError):
    """Defect in the tracking logic itself (never caller-recoverable)."""

    default_category = ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "UnitworkError",
    "ConfigurationError",
    "SchemaMismatchError",
    "EmptyOperationError",
    "InvariantViolationError",
]
