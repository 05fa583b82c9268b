"""Main Tablesmith engine and Table class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tablesmith.context.assistant import DEFAULT_TOP_K, ChatAssistant
from tablesmith.context.indexer import EmbeddingIndexer
from tablesmith.context.store import DEFAULT_SEARCH_LIMIT, ContextStore
from tablesmith.core.connection import DatabaseConnection
from tablesmith.core.types import (
    ChatAnswer,
    ChatMessage,
    ColumnInfo,
    ColumnSpec,
    ContextInfo,
    PageResult,
    RankedContext,
    TableInfo,
)
from tablesmith.data.query import DEFAULT_PAGE_SIZE, TableQuery
from tablesmith.schema.manager import SchemaManager

if TYPE_CHECKING:
    from tablesmith.core.config import Settings
    from tablesmith.embeddings.provider import EmbeddingProvider
    from tablesmith.generation.provider import GenerationProvider


class Table:
    """Handle for CRUD on one user table.

    The handle holds no schema; every call works against the live table.
    """

    def __init__(self, name: str, db: Tablesmith) -> None:
        """Initialize table handle.

        Args:
            name: Table name
            db: Parent Tablesmith instance
        """
        self._query = TableQuery(db._connection.engine, name)
        self._db = db

    @property
    def name(self) -> str:
        """Get table name."""
        return self._query.table_name

    def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored."""
        return self._query.insert_one(row)

    def insert_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows; results are in input order."""
        return self._query.insert_many(rows)

    def select(self, limit: Any = DEFAULT_PAGE_SIZE, offset: Any = 0) -> PageResult:
        """Read one page of rows ordered by id."""
        return self._query.select_page(limit=limit, offset=offset)

    def find_by_id(self, record_id: Any) -> dict[str, Any] | None:
        """Find a row by id, or None."""
        return self._query.find_by_id(record_id)

    def update(self, record_id: Any, partial: dict[str, Any]) -> dict[str, Any]:
        """Update some columns of a row and return it."""
        return self._query.update_by_id(record_id, partial)

    def delete(self, record_id: Any) -> int:
        """Delete a row; returns the number of rows removed."""
        return self._query.delete_by_id(record_id)

    def count(self) -> int:
        """Count rows."""
        return self._query.count()

    def add_column(self, name: str, column_type: str, nullable: bool = True) -> ColumnInfo:
        """Add a column to this table."""
        return self._db.alter_table(
            self.name, ColumnSpec(name=name, type=column_type, nullable=nullable)
        )

    def describe(self) -> TableInfo:
        """Get columns, row count, trigger state and context presence."""
        return self._db.describe_table(self.name)


class Tablesmith:
    """Main Tablesmith class: user-defined tables with semantic context.

    Example:
        db = Tablesmith("sqlite:///./tablesmith.db")
        db.create_table("travelers", [{"name": "age", "type": "INTEGER"}])
        db.table("travelers").insert({"age": 36})
        db.save_context("travelers", "People booked on our summer charters")
        db.search_contexts("who is flying in July?")
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        embedding_provider: str | EmbeddingProvider = "fastembed",
        embedding_model: str | None = None,
        embedding_dimensions: int | None = None,
        generator: str | GenerationProvider = "openai",
        generation_model: str | None = None,
    ) -> None:
        """Initialize Tablesmith.

        Embedding and generation providers are only created when a context
        is saved or searched, or a chat question is asked.

        Args:
            url: Database connection URL
            echo: Whether to echo SQL statements (for debugging)
            embedding_provider: Provider name ("fastembed", "openai") or instance
            embedding_model: Model name (provider-specific)
            embedding_dimensions: Vector dimensions (provider-specific)
            generator: Generation provider name ("openai") or instance
            generation_model: Chat model name
        """
        self._connection = DatabaseConnection(url, echo=echo)
        self._schema = SchemaManager(self._connection)

        options: dict[str, Any] = {}
        if embedding_model:
            options["model"] = embedding_model
        if embedding_dimensions:
            options["dimensions"] = embedding_dimensions
        self._indexer = EmbeddingIndexer(embedding_provider, **options)

        self._contexts = ContextStore(self._connection, self._schema, self._indexer)
        self._assistant = ChatAssistant(
            self._connection.engine,
            self._schema,
            self._contexts,
            generator,
            model=generation_model,
        )

        # Bookkeeping tables and the PostgreSQL trigger function
        self._schema.initialize()

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> Tablesmith:
        """Build an instance from Settings; keyword arguments win."""
        options: dict[str, Any] = {
            "url": settings.database_url,
            "echo": settings.echo,
            "embedding_provider": settings.embedding_provider,
            "embedding_model": settings.embedding_model,
            "embedding_dimensions": settings.embedding_dimensions,
            "generation_model": settings.generation_model,
        }
        options.update(overrides)
        return cls(**options)

    @property
    def connection(self) -> DatabaseConnection:
        return self._connection

    @property
    def schema(self) -> SchemaManager:
        return self._schema

    @property
    def contexts(self) -> ContextStore:
        return self._contexts

    @property
    def indexer(self) -> EmbeddingIndexer:
        return self._indexer

    @property
    def assistant(self) -> ChatAssistant:
        return self._assistant

    def close(self) -> None:
        """Close the database connection."""
        self._connection.close()

    def __enter__(self) -> Tablesmith:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()

    # === Tables ===

    def list_tables(self) -> list[str]:
        """List user tables, sorted."""
        return self._schema.list_tables()

    def table_exists(self, name: str) -> bool:
        """Check whether a user table exists."""
        return self._schema.table_exists(name)

    def create_table(
        self, name: str, columns: list[ColumnSpec | dict[str, Any]]
    ) -> TableInfo:
        """Create a table (no-op if it exists with the same columns).

        Raises:
            SchemaConflictError: If it exists with different columns
        """
        return self._schema.create_table(name, columns)

    def alter_table(self, name: str, column: ColumnSpec | dict[str, Any]) -> ColumnInfo:
        """Add one column to a table."""
        return self._schema.alter_table(name, column)

    def get_schema(self, name: str) -> list[ColumnInfo]:
        """Get the user columns of a table."""
        return self._schema.get_schema(name)

    def describe_table(self, name: str) -> TableInfo:
        """Get columns plus row count, trigger state and context presence."""
        return self._schema.describe_table(name)

    def drop_table(self, name: str) -> bool:
        """Drop a table and its context; returns whether it existed."""
        return self._schema.drop_table(name)

    def table(self, name: str) -> Table:
        """Get a handle for CRUD on an existing table.

        Raises:
            TableNotFoundError: If the table doesn't exist
        """
        return Table(self._schema.require_table(name), self)

    # === Contexts ===

    def save_context(self, table_name: str, description: str) -> ContextInfo:
        """Save (or replace) the description of a table and embed it."""
        return self._contexts.save(table_name, description)

    def get_context(self, table_name: str) -> ContextInfo:
        """Get the saved context of a table."""
        return self._contexts.get(table_name)

    def list_contexts(self) -> list[ContextInfo]:
        """All saved contexts ordered by table name."""
        return self._contexts.list_all()

    def delete_context(self, table_name: str) -> bool:
        """Delete the context of a table; returns whether one existed."""
        return self._contexts.delete(table_name)

    def search_contexts(self, query: str, limit: Any = DEFAULT_SEARCH_LIMIT) -> list[RankedContext]:
        """Rank saved contexts against a natural-language query."""
        return self._contexts.search(query, limit)

    # === Chat ===

    def chat(
        self,
        message: str,
        table_name: str | None = None,
        history: list[ChatMessage | dict[str, Any]] | None = None,
        top_k: int = DEFAULT_TOP_K,
    ) -> ChatAnswer:
        """Ask a question about the data; SQL in the answer is not executed."""
        return self._assistant.ask(message, table_name=table_name, history=history, top_k=top_k)
