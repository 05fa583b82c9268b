"""Column type registry.

Type tokens, unlike values, cannot be bound as parameters in DDL. The
registry is the allow-list every token passes through before it turns into
a native column type, and the reverse map used when introspecting tables.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from tablesmith.core.types import ColumnType
from tablesmith.exceptions import InvalidColumnTypeError

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.types import TypeEngine

# Short names accepted for convenience; each resolves into the closed set
TYPE_ALIASES: dict[str, ColumnType] = {
    "STRING": ColumnType.VARCHAR,
    "VARCHAR": ColumnType.VARCHAR,
    "INT": ColumnType.INTEGER,
    "FLOAT": ColumnType.REAL,
    "BOOL": ColumnType.BOOLEAN,
    "DATETIME": ColumnType.TIMESTAMP,
    "JSON": ColumnType.JSONB,
}

# Mapping from column type tokens to SQLAlchemy column types
COLUMN_TYPE_MAP: dict[ColumnType, Callable[[], Any]] = {
    ColumnType.VARCHAR: lambda: String(255),
    ColumnType.TEXT: lambda: Text(),
    ColumnType.INTEGER: lambda: Integer(),
    ColumnType.REAL: lambda: Float(),
    ColumnType.BOOLEAN: lambda: Boolean(),
    ColumnType.TIMESTAMP: lambda: DateTime(timezone=True),
    # JSONB on PostgreSQL, JSON on SQLite
    ColumnType.JSONB: lambda: JSONB().with_variant(JSON(), "sqlite"),
}


def resolve_column_type(token: Any) -> ColumnType:
    """Resolve a type token into the closed set of column types.

    Matching ignores case and surrounding whitespace.

    Raises:
        InvalidColumnTypeError: For anything outside the registry
    """
    if isinstance(token, ColumnType):
        return token
    if not isinstance(token, str):
        raise InvalidColumnTypeError(token)

    normalized = token.strip().upper()
    try:
        return ColumnType(normalized)
    except ValueError:
        pass
    if normalized in TYPE_ALIASES:
        return TYPE_ALIASES[normalized]
    raise InvalidColumnTypeError(token)


def native_type(token: Any) -> TypeEngine[Any]:
    """Return the SQLAlchemy type for a token (validated first)."""
    return COLUMN_TYPE_MAP[resolve_column_type(token)]()


def token_for_native(type_: TypeEngine[Any], dialect: Dialect | None = None) -> str:
    """Map an introspected column type back to its token.

    Types the registry never creates (tables made outside Tablesmith) are
    reported by their native name instead of being forced into a token.
    """
    # Order matters: Text subclasses String, JSONB subclasses JSON
    if isinstance(type_, Boolean):
        return ColumnType.BOOLEAN.value
    if isinstance(type_, JSON):
        return ColumnType.JSONB.value
    if isinstance(type_, DateTime):
        return ColumnType.TIMESTAMP.value
    if isinstance(type_, Integer):
        return ColumnType.INTEGER.value
    if isinstance(type_, (Float, Numeric)):
        return ColumnType.REAL.value
    if isinstance(type_, Text):
        return ColumnType.TEXT.value
    if isinstance(type_, String):
        if type_.length is None:
            return ColumnType.TEXT.value
        if type_.length == 255:
            return ColumnType.VARCHAR.value

    if dialect is not None:
        with contextlib.suppress(Exception):
            return str(type_.compile(dialect=dialect))
    return type_.__class__.__name__.upper()
