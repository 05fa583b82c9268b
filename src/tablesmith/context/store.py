"""Persistence of table context descriptors.

One descriptor per table: a trimmed free-text description plus the
embedding computed from it. The vector is always computed before the
database is touched, so a failing embedding provider leaves the store
unchanged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from tablesmith.core.types import ContextInfo, RankedContext
from tablesmith.data.query import parse_non_negative_int
from tablesmith.exceptions import (
    ContextNotFoundError,
    EmbeddingDimensionError,
    QueryError,
    ValidationError,
)
from tablesmith.schema.models import TableContext, generate_uuid, utc_now

if TYPE_CHECKING:
    from tablesmith.context.indexer import EmbeddingIndexer
    from tablesmith.core.connection import DatabaseConnection
    from tablesmith.schema.manager import SchemaManager

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 5


class ContextStore:
    """Save, read and search table descriptions."""

    def __init__(
        self,
        connection: DatabaseConnection,
        schema: SchemaManager,
        indexer: EmbeddingIndexer,
    ) -> None:
        """Initialize the store.

        Args:
            connection: Database connection
            schema: Schema manager (tables must exist to receive a context)
            indexer: Embedding indexer used on save and search
        """
        self._connection = connection
        self._schema = schema
        self._indexer = indexer

    def _stored_dimensions(self, table_name: str) -> int | None:
        """Vector length used by the contexts of other tables, if any."""
        with self._connection.get_session() as session:
            return session.execute(
                select(TableContext.dimensions)
                .where(TableContext.table_name != table_name)
                .limit(1)
            ).scalar_one_or_none()

    def save(self, table_name: str, description: Any) -> ContextInfo:
        """Create or replace the context of a table.

        Args:
            table_name: Existing user table
            description: Free text; stored trimmed

        Returns:
            The stored context

        Raises:
            TableNotFoundError: If the table does not exist
            ValidationError: If the description is empty
            EmbeddingError: If embedding fails (nothing is persisted)
            EmbeddingDimensionError: If the vector length differs from the
                contexts already stored
        """
        table_name = self._schema.require_table(table_name)
        if not isinstance(description, str) or not description.strip():
            raise ValidationError(
                f"Description for '{table_name}' must be non-empty text.",
                {"description": "required"},
            )
        text = description.strip()

        vector = self._indexer.embed(text)
        expected = self._stored_dimensions(table_name)
        if expected is not None and expected != len(vector):
            raise EmbeddingDimensionError(expected, len(vector), table_name)

        now = utc_now()
        insert = pg_insert if self._connection.is_postgresql else sqlite_insert
        statement = insert(TableContext).values(
            id=generate_uuid(),
            table_name=table_name,
            description=text,
            embedding=vector,
            model=self._indexer.model_name,
            dimensions=len(vector),
            created_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=[TableContext.table_name],
            set_={
                "description": statement.excluded.description,
                "embedding": statement.excluded.embedding,
                "model": statement.excluded.model,
                "dimensions": statement.excluded.dimensions,
                "updated_at": now,
            },
        )

        try:
            with self._connection.get_session() as session:
                session.execute(statement)
                session.commit()
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to save context for '{table_name}': {e}") from e

        logger.info(f"Saved context for '{table_name}' ({len(vector)} dimensions)")
        return self.get(table_name)

    def _context_key(self, table_name: str) -> str:
        """Key contexts by the stored table name when the table exists."""
        return self._schema.resolve_table_name(table_name) or table_name

    def get(self, table_name: str) -> ContextInfo:
        """Get the context of a table.

        Raises:
            ContextNotFoundError: If no context has been saved
        """
        table_name = self._context_key(table_name)
        with self._connection.get_session() as session:
            context = session.execute(
                select(TableContext).where(TableContext.table_name == table_name)
            ).scalar_one_or_none()
            if context is None:
                raise ContextNotFoundError(table_name)
            return context.to_info()

    def list_all(self) -> list[ContextInfo]:
        """All contexts ordered by table name."""
        with self._connection.get_session() as session:
            contexts = session.execute(
                select(TableContext).order_by(TableContext.table_name)
            ).scalars()
            return [c.to_info() for c in contexts]

    def delete(self, table_name: str) -> bool:
        """Delete the context of a table.

        Returns:
            True if a context was deleted, False if there was none
        """
        table_name = self._context_key(table_name)
        try:
            with self._connection.get_session() as session:
                result = session.execute(
                    delete(TableContext).where(TableContext.table_name == table_name)
                )
                session.commit()
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to delete context for '{table_name}': {e}") from e
        return result.rowcount > 0

    def search(self, query: Any, limit: Any = DEFAULT_SEARCH_LIMIT) -> list[RankedContext]:
        """Rank stored contexts against a natural-language query.

        Args:
            query: Search text
            limit: Maximum results

        Returns:
            Contexts ordered by ascending cosine distance
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Search query must be non-empty text.", {"q": "required"})
        limit = parse_non_negative_int(limit, "limit")

        contexts = self.list_all()
        if not contexts or limit == 0:
            return []
        query_vector = self._indexer.embed(query.strip())
        return self._indexer.rank(query_vector, contexts)[:limit]
