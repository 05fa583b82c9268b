"""Core components for Tablesmith."""

from tablesmith.core.connection import DatabaseConnection
from tablesmith.core.types import (
    ChatAnswer,
    ChatMessage,
    ColumnInfo,
    ColumnSpec,
    ColumnType,
    ContextInfo,
    PageResult,
    RankedContext,
    TableInfo,
)

__all__ = [
    "DatabaseConnection",
    "ColumnType",
    "ColumnSpec",
    "ColumnInfo",
    "TableInfo",
    "PageResult",
    "ContextInfo",
    "RankedContext",
    "ChatMessage",
    "ChatAnswer",
]
