"""Schema management for Tablesmith."""

from tablesmith.schema.identifiers import (
    is_reserved_table_name,
    validate_column_name,
    validate_identifier,
    validate_table_name,
)
from tablesmith.schema.manager import SchemaManager
from tablesmith.schema.models import TableContext
from tablesmith.schema.registry import native_type, resolve_column_type, token_for_native

__all__ = [
    "SchemaManager",
    "TableContext",
    "is_reserved_table_name",
    "validate_column_name",
    "validate_identifier",
    "validate_table_name",
    "native_type",
    "resolve_column_type",
    "token_for_native",
]
