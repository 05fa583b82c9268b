"""SQLAlchemy ORM models for Tablesmith's own bookkeeping tables.

User tables are created at runtime and never mapped here; only the
engine-owned tables (all prefixed ``ts_``) are declared statically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tablesmith.core.types import ContextInfo
from tablesmith.schema.identifiers import CONTEXT_TABLE_NAME

# Dialect-aware JSON type: JSONB on PostgreSQL, JSON on SQLite
JSONType = JSONB().with_variant(JSON(), "sqlite")


def generate_uuid() -> str:
    """Generate a new UUID as string."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all Tablesmith models."""

    pass


class TableContext(Base):
    """Context descriptor for one user table: description plus its embedding.

    The row refers to its table by name only; dropping the table deletes
    the row through the schema manager.
    """

    __tablename__ = CONTEXT_TABLE_NAME

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    table_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSONType, nullable=False)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dimensions: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def to_info(self) -> ContextInfo:
        """Convert to the public output model."""
        return ContextInfo(
            id=self.id,
            table_name=self.table_name,
            description=self.description,
            embedding=list(self.embedding or []),
            model=self.model,
            dimensions=self.dimensions,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

