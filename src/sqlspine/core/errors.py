"""
Structured error types for sqlspine.

Every failure the library reports is a typed ``SqlSpineError`` carrying a
category, structured context (operation, dialect, table, statement) and the
chained driver exception. Callers branch on the type, not on message text.

Manifesto:
    - **Typed errors:** "nothing matched" is not the same as "the database
      rejected the statement", and neither is "this dialect has no template"
    - **Rich context:** errors name the failing operation and statement
    - **Error chaining:** the original driver exception is kept as ``cause``
    - **No swallowing:** the library never logs-and-continues

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       SqlSpineError                          │
        │              (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  UnsupportedDialectError   InvalidInputError                 │
        │  (DIALECT)                 (VALIDATION)                      │
        │                                                              │
        │  NotFoundError             ExecutionError                    │
        │  (NOT_FOUND)               (DATABASE)                        │
        │                                                              │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NotFoundError("no rows were updated").with_context(table="users")
    >>> error.context.table
    'users'
    >>> error.to_dict()["category"]
    'NOT_FOUND'

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` or return error strings
    ✅ DO: Raise the matching ``SqlSpineError`` subclass

    ❌ DON'T: Drop the driver exception when wrapping
    ✅ DO: Pass it as ``cause=``

Tags:
    error-handling, exception-hierarchy, error-context, sqlspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and routing."""

    DIALECT = "DIALECT"          # No catalog entry for the dialect/operation
    VALIDATION = "VALIDATION"    # Caller contract violations
    NOT_FOUND = "NOT_FOUND"      # Mutation matched nothing, table missing
    DATABASE = "DATABASE"        # Driver rejected the statement
    INTERNAL = "INTERNAL"        # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in ``to_dict()``. Anything that does not
    fit a named field goes into ``metadata``.

    Attributes:
        operation: Library operation that failed (e.g. ``"insert"``)
        dialect: Dialect value the call was made with
        table: Table the call targeted
        statement: SQL text that was executed, if one was built
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    dialect: str | None = None
    table: str | None = None
    statement: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "dialect", "table", "statement"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SqlSpineError(Exception):
    """
    Base exception for all sqlspine errors.

    Subclasses set ``default_category``. Instances carry a message, a
    category, an ``ErrorContext`` and an optional chained ``cause``.

    Examples:
        >>> try:
        ...     raise RuntimeError("disk I/O error")
        ... except RuntimeError as e:
        ...     error = SqlSpineError("insert failed", cause=e)
        >>> error.cause
        RuntimeError('disk I/O error')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SqlSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("record does not exist").with_context(
                operation="delete", table="orders"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
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
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class UnsupportedDialectError(SqlSpineError):
    """The dialect has no catalog entry for the requested operation."""

    default_category = ErrorCategory.DIALECT


class InvalidInputError(SqlSpineError):
    """Caller-level contract violation (empty record, bad identifier...)."""

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class NotFoundError(SqlSpineError):
    """A mutation matched zero rows, or the target table does not exist."""

    default_category = ErrorCategory.NOT_FOUND


class ExecutionError(SqlSpineError):
    """The database rejected a statement."""

    default_category = ErrorCategory.DATABASE

    def __init__(self, operation: str, cause: Exception, *, statement: str | None = None):
        super().__init__(
            f"{operation} failed: {cause}",
            context=ErrorContext(operation=operation, statement=statement),
            cause=cause,
        )
        self.operation = operation


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ExecutionError",
    "InvalidInputError",
    "NotFoundError",
    "SqlSpineError",
    "UnsupportedDialectError",
]
