"""Custom exceptions for Tablesmith.

Every error carries an actionable message plus a JSON-serializable
``context`` dict, so the REST layer and the CLI can render it without
knowing the concrete class:

- ValidationError: bad identifiers, unknown types or columns, empty payloads
- NotFoundError: unknown table, row or context
- ConflictError: table or column already exists with a different shape
- StorageError: anything raised by the underlying database
- EmbeddingError / GenerationError: the external model capabilities failed
"""

from __future__ import annotations

from typing import Any


class TablesmithError(Exception):
    """Base exception for all Tablesmith errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


# === Validation (400) ===


class ValidationError(TablesmithError):
    """Input failed validation before reaching storage."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message, {"field_errors": field_errors or {}})
        self.field_errors = field_errors or {}


class InvalidIdentifierError(ValidationError):
    """Table or column name is not a safe identifier."""

    def __init__(self, name: Any, kind: str = "identifier", reason: str | None = None) -> None:
        reason = reason or "must match ^[A-Za-z_][A-Za-z0-9_]*$"
        message = f"Invalid {kind} name {name!r}: {reason}."
        super().__init__(message, {kind: reason})
        self.context.update({"name": name if isinstance(name, str) else repr(name), "kind": kind})
        self.name = name
        self.kind = kind
        self.reason = reason


class InvalidColumnTypeError(ValidationError):
    """Column type token is not in the type registry."""

    VALID_TYPES = ["VARCHAR(255)", "TEXT", "INTEGER", "REAL", "BOOLEAN", "TIMESTAMP", "JSONB"]

    def __init__(self, column_type: Any) -> None:
        message = (
            f"Invalid column type {column_type!r}. Valid types: {', '.join(self.VALID_TYPES)}"
        )
        super().__init__(message, {"type": f"unknown type {column_type!r}"})
        self.context["valid_types"] = self.VALID_TYPES
        self.column_type = column_type


class NoColumnsProvidedError(ValidationError):
    """A write was requested without any column values."""

    def __init__(self, table_name: str) -> None:
        message = f"No columns provided for '{table_name}'. Pass at least one column: value pair."
        super().__init__(message)
        self.context["table_name"] = table_name
        self.table_name = table_name


class UnknownColumnError(ValidationError):
    """Column does not exist on the table."""

    def __init__(
        self, column_name: str, table_name: str, available_columns: list[str] | None = None
    ) -> None:
        available = available_columns or []
        if available:
            message = (
                f"Column '{column_name}' not found on '{table_name}'. "
                f"Available columns: {', '.join(available)}"
            )
        else:
            message = f"Column '{column_name}' not found on '{table_name}'. No columns defined."

        super().__init__(message, {column_name: "unknown column"})
        self.context.update(
            {
                "column_name": column_name,
                "table_name": table_name,
                "available_columns": available,
            }
        )
        self.column_name = column_name
        self.table_name = table_name
        self.available_columns = available


# === Not found (404) ===


class NotFoundError(TablesmithError):
    """Requested table, row or context does not exist."""

    pass


class TableNotFoundError(NotFoundError):
    """Table does not exist."""

    def __init__(self, table_name: str, available_tables: list[str] | None = None) -> None:
        available = available_tables or []
        if available:
            message = f"Table '{table_name}' not found. Available tables: {', '.join(available)}"
        else:
            message = f"Table '{table_name}' not found. No tables exist yet."

        super().__init__(message, {"table_name": table_name, "available_tables": available})
        self.table_name = table_name
        self.available_tables = available


class RecordNotFoundError(NotFoundError):
    """Row with given ID does not exist."""

    def __init__(self, record_id: Any, table_name: str) -> None:
        message = f"Row {record_id} not found in '{table_name}'."
        super().__init__(message, {"record_id": record_id, "table_name": table_name})
        self.record_id = record_id
        self.table_name = table_name


class ContextNotFoundError(NotFoundError):
    """No context description has been saved for the table."""

    def __init__(self, table_name: str) -> None:
        message = (
            f"Context for '{table_name}' not found. "
            f"Save one with a description first."
        )
        super().__init__(message, {"table_name": table_name})
        self.table_name = table_name


# === Conflicts (409) ===


class ConflictError(TablesmithError):
    """Request collides with existing state."""

    pass


class TableAlreadyExistsError(ConflictError):
    """Table name is taken (by a reserved engine table or a different shape)."""

    def __init__(self, table_name: str, reason: str | None = None) -> None:
        message = reason or f"Table '{table_name}' already exists."
        super().__init__(message, {"table_name": table_name})
        self.table_name = table_name


class SchemaConflictError(TableAlreadyExistsError):
    """Table exists with a column set different from the requested one."""

    def __init__(
        self,
        table_name: str,
        existing_columns: list[dict[str, Any]],
        requested_columns: list[dict[str, Any]],
    ) -> None:
        message = (
            f"Table '{table_name}' already exists with different columns. "
            f"Use alter to add columns or drop the table first."
        )
        super().__init__(table_name, message)
        self.context.update(
            {"existing_columns": existing_columns, "requested_columns": requested_columns}
        )
        self.existing_columns = existing_columns
        self.requested_columns = requested_columns


class ColumnAlreadyExistsError(ConflictError):
    """Column already exists on the table."""

    def __init__(self, column_name: str, table_name: str) -> None:
        message = f"Column '{column_name}' already exists on '{table_name}'."
        super().__init__(message, {"column_name": column_name, "table_name": table_name})
        self.column_name = column_name
        self.table_name = table_name


# === Storage (500) ===


class StorageError(TablesmithError):
    """The underlying database rejected or failed an operation."""

    pass


class DatabaseConnectionError(StorageError):
    """Failed to connect to the database."""

    pass


class SchemaChangeError(StorageError):
    """DDL operation failed."""

    pass


class QueryError(StorageError):
    """DML or query execution failed."""

    pass


# === External capabilities (500) ===


class EmbeddingError(TablesmithError):
    """Embedding capability unavailable or returned a malformed vector."""

    pass


class EmbeddingDimensionError(EmbeddingError):
    """Vector length does not match the stored vectors."""

    def __init__(self, expected: int, actual: int, table_name: str | None = None) -> None:
        message = (
            f"Embedding has {actual} dimensions but stored contexts use {expected}. "
            f"Re-save all contexts with the same embedding model."
        )
        super().__init__(
            message, {"expected": expected, "actual": actual, "table_name": table_name}
        )
        self.expected = expected
        self.actual = actual


class GenerationError(TablesmithError):
    """Text generation capability failed."""

    pass
