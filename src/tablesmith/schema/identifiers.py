"""Identifier validation for table and column names.

Table and column names end up inside generated SQL text, so every one of
them is checked against a closed grammar before use. Values never are:
they always travel as bound parameters.
"""

from __future__ import annotations

import re
from typing import Any

from tablesmith.exceptions import InvalidIdentifierError

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Columns every materialized table carries; users can neither declare nor write them
ENGINE_COLUMNS = ("id", "created_at", "updated_at")

# Engine bookkeeping tables all share this prefix
RESERVED_TABLE_PREFIX = "ts_"
CONTEXT_TABLE_NAME = "ts_table_contexts"

# Backend catalogs and internals
_BACKEND_TABLE_PREFIXES = ("sqlite_", "pg_")


def validate_identifier(name: Any, kind: str = "identifier") -> str:
    """Validate a table or column name.

    Args:
        name: Candidate name
        kind: "table", "column" or a free-form label used in the error

    Returns:
        The name, unchanged

    Raises:
        InvalidIdentifierError: If the name does not match the grammar, or
            names an engine-owned column
    """
    if not isinstance(name, str):
        raise InvalidIdentifierError(name, kind, "must be a string")
    if not name:
        raise InvalidIdentifierError(name, kind, "must not be empty")
    if IDENTIFIER_PATTERN.fullmatch(name) is None:
        raise InvalidIdentifierError(name, kind)
    if kind == "column" and name.lower() in ENGINE_COLUMNS:
        raise InvalidIdentifierError(
            name, kind, f"'{name}' is maintained by the engine and cannot be set"
        )
    return name


def validate_table_name(name: Any) -> str:
    """Validate a table name."""
    return validate_identifier(name, "table")


def validate_column_name(name: Any) -> str:
    """Validate a user column name (engine-owned names are rejected)."""
    return validate_identifier(name, "column")


def is_reserved_table_name(name: str) -> bool:
    """Check whether a table name belongs to the engine or the backend.

    Reserved tables are never listed, created, altered or dropped through
    the schema manager.
    """
    lowered = name.lower()
    return lowered.startswith(RESERVED_TABLE_PREFIX) or lowered.startswith(
        _BACKEND_TABLE_PREFIXES
    )
