"""Tablesmith - runtime-defined tables with semantic context.

Users define relational tables at runtime, run generic CRUD against them,
and attach a free-text description to each table. Descriptions are embedded
so the right tables can be found for a natural-language question.

Example:
    from tablesmith import Tablesmith

    db = Tablesmith("sqlite:///./tablesmith.db")

    db.create_table(
        "travelers",
        [
            {"name": "name", "type": "VARCHAR(255)", "nullable": False},
            {"name": "age", "type": "INTEGER"},
        ],
    )
    travelers = db.table("travelers")
    row = travelers.insert({"name": "Ada", "age": 36})

    db.save_context("travelers", "Passengers booked on summer charter flights")
    for hit in db.search_contexts("who is flying this summer?"):
        print(hit.context.table_name, hit.distance)
"""

from tablesmith.core.config import Settings
from tablesmith.core.engine import Table, Tablesmith
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
from tablesmith.exceptions import (
    ColumnAlreadyExistsError,
    ConflictError,
    ContextNotFoundError,
    DatabaseConnectionError,
    EmbeddingDimensionError,
    EmbeddingError,
    GenerationError,
    InvalidColumnTypeError,
    InvalidIdentifierError,
    NoColumnsProvidedError,
    NotFoundError,
    QueryError,
    RecordNotFoundError,
    SchemaChangeError,
    SchemaConflictError,
    StorageError,
    TableAlreadyExistsError,
    TableNotFoundError,
    TablesmithError,
    UnknownColumnError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "Tablesmith",
    "Table",
    "Settings",
    # Types
    "ColumnType",
    "ColumnSpec",
    "ColumnInfo",
    "TableInfo",
    "PageResult",
    "ContextInfo",
    "RankedContext",
    "ChatMessage",
    "ChatAnswer",
    # Exceptions
    "TablesmithError",
    "ValidationError",
    "InvalidIdentifierError",
    "InvalidColumnTypeError",
    "NoColumnsProvidedError",
    "UnknownColumnError",
    "NotFoundError",
    "TableNotFoundError",
    "RecordNotFoundError",
    "ContextNotFoundError",
    "ConflictError",
    "TableAlreadyExistsError",
    "SchemaConflictError",
    "ColumnAlreadyExistsError",
    "StorageError",
    "DatabaseConnectionError",
    "SchemaChangeError",
    "QueryError",
    "EmbeddingError",
    "EmbeddingDimensionError",
    "GenerationError",
]
