"""Core types and specifications for Tablesmith.

All types are designed to be JSON-serializable for API and CLI output.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ColumnType(StrEnum):
    """Column types accepted for user-defined tables."""

    VARCHAR = "VARCHAR(255)"  # short text
    TEXT = "TEXT"  # unbounded text
    INTEGER = "INTEGER"
    REAL = "REAL"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"
    JSONB = "JSONB"  # unstructured JSON

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid column type tokens."""
        return [t.value for t in cls]


class ColumnSpec(BaseModel):
    """Specification for a column definition.

    This is the input format for creating and altering tables. The type is
    kept as the raw token so the type registry can reject it with a
    Tablesmith error rather than a pydantic one.
    """

    name: str = Field(..., description="Column name (identifier grammar)")
    type: str = Field(..., description="Column type token, e.g. INTEGER or VARCHAR(255)")
    nullable: bool = Field(default=True, description="Whether NULL values are allowed")


class ColumnInfo(BaseModel):
    """Information about an existing column (output format)."""

    name: str
    type: str
    nullable: bool


class TableInfo(BaseModel):
    """Information about an existing table (output format)."""

    name: str
    columns: list[ColumnInfo]
    row_count: int | None = None
    has_update_trigger: bool | None = None
    has_context: bool | None = None


class PageResult(BaseModel):
    """One page of rows plus the total row count."""

    rows: list[dict[str, Any]]
    total_count: int
    limit: int
    offset: int


class ContextInfo(BaseModel):
    """A table's context descriptor (output format)."""

    id: str
    table_name: str
    description: str
    embedding: list[float] = Field(default_factory=list)
    model: str | None = None
    dimensions: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_public(self, include_embedding: bool = False) -> dict[str, Any]:
        """Dump for API responses; the raw vector is omitted unless requested."""
        exclude = None if include_embedding else {"embedding"}
        return self.model_dump(mode="json", exclude=exclude)


class RankedContext(BaseModel):
    """A context descriptor with its distance to a query vector."""

    context: ContextInfo
    distance: float

    @property
    def score(self) -> float:
        """Similarity in [-1, 1] (1 - cosine distance)."""
        return 1.0 - self.distance


class ChatMessage(BaseModel):
    """One turn of a chat conversation."""

    role: Literal["user", "ai"]
    content: str


class ChatAnswer(BaseModel):
    """Result of a grounded chat request."""

    response: str
    sql: str | None = None
    tables: list[str] = Field(default_factory=list)
