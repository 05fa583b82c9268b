"""Schema management for user-defined tables.

Creates, introspects, alters and drops real database tables whose shape is
supplied at runtime. Every table gets three engine-owned columns:

- ``id``: integer surrogate primary key (autoincrement)
- ``created_at``: set by the database on insert
- ``updated_at``: set on insert and refreshed by a native trigger on update

Create-table and create-trigger are separate statements. A failure between
them leaves a table without its trigger, which ``describe_table`` reports
through ``has_update_trigger``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    delete,
    func,
    inspect,
    select,
    text,
)
from sqlalchemy.exc import SQLAlchemyError

from tablesmith.core.types import ColumnInfo, ColumnSpec, TableInfo
from tablesmith.exceptions import (
    ColumnAlreadyExistsError,
    SchemaChangeError,
    SchemaConflictError,
    TableAlreadyExistsError,
    TableNotFoundError,
    ValidationError,
)
from tablesmith.schema.identifiers import (
    ENGINE_COLUMNS,
    RESERVED_TABLE_PREFIX,
    is_reserved_table_name,
    validate_column_name,
    validate_table_name,
)
from tablesmith.schema.models import Base, TableContext
from tablesmith.schema.registry import native_type, resolve_column_type, token_for_native

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

    from tablesmith.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Shared PL/pgSQL function used by every PostgreSQL update trigger
PG_TOUCH_FUNCTION = f"{RESERVED_TABLE_PREFIX}touch_updated_at"

# SQLite's CURRENT_TIMESTAMP only has second precision
SQLITE_NOW = "strftime('%Y-%m-%d %H:%M:%f', 'now')"


def _format_validation_errors(error: PydanticValidationError) -> dict[str, str]:
    """Flatten pydantic errors into {location: message}."""
    return {
        ".".join(str(part) for part in err["loc"]) or "body": err["msg"] for err in error.errors()
    }


def coerce_column_spec(column: ColumnSpec | dict[str, Any]) -> ColumnSpec:
    """Accept a ColumnSpec or a plain dict and return a ColumnSpec.

    Raises:
        ValidationError: If the dict is missing name/type or has wrong types
    """
    if isinstance(column, ColumnSpec):
        return column
    try:
        return ColumnSpec.model_validate(column)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid column definition: {column!r}", _format_validation_errors(e)
        ) from e


class SchemaManager:
    """Manages DDL for user tables and the engine's bookkeeping tables."""

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize the schema manager.

        Args:
            connection: Database connection to use
        """
        self._connection = connection
        self._initialized = False

    @property
    def _engine(self) -> Engine:
        return self._connection.engine

    @property
    def _is_postgresql(self) -> bool:
        return self._engine.dialect.name == "postgresql"

    def initialize(self) -> None:
        """Create bookkeeping tables (and the PostgreSQL trigger function).

        This is idempotent - safe to call multiple times.
        """
        if self._initialized:
            return

        try:
            Base.metadata.create_all(self._engine)
            if self._is_postgresql:
                with self._engine.begin() as conn:
                    conn.exec_driver_sql(
                        f"""
                        CREATE OR REPLACE FUNCTION {PG_TOUCH_FUNCTION}() RETURNS TRIGGER AS $$
                        BEGIN
                            NEW.updated_at = NOW();
                            RETURN NEW;
                        END;
                        $$ LANGUAGE plpgsql
                        """
                    )
        except SQLAlchemyError as e:
            raise SchemaChangeError(f"Failed to initialize bookkeeping tables: {e}") from e
        self._initialized = True

    def _quote(self, identifier: str) -> str:
        """Quote an already-validated identifier for the current dialect."""
        return self._engine.dialect.identifier_preparer.quote(identifier)

    def _trigger_name(self, table_name: str) -> str:
        return f"{RESERVED_TABLE_PREFIX}touch_{table_name}"

    def _now_default(self) -> Any:
        """Server-side default for the timestamp columns."""
        if self._is_postgresql:
            return func.now()
        return text(f"({SQLITE_NOW})")

    def _has_table(self, table_name: str) -> bool:
        return inspect(self._engine).has_table(table_name)

    def _validate_columns(
        self, table_name: str, columns: list[ColumnSpec | dict[str, Any]] | None
    ) -> list[ColumnSpec]:
        """Validate names, types and uniqueness of user columns."""
        if not columns:
            raise ValidationError(
                f"At least one column is required to create '{table_name}'.",
                {"columns": "at least one column is required"},
            )

        specs: list[ColumnSpec] = []
        seen: set[str] = set()
        for column in columns:
            spec = coerce_column_spec(column)
            validate_column_name(spec.name)
            column_type = resolve_column_type(spec.type)
            key = spec.name.lower()
            if key in seen:
                raise ValidationError(
                    f"Duplicate column '{spec.name}' in definition of '{table_name}'.",
                    {spec.name: "duplicate column name"},
                )
            seen.add(key)
            specs.append(ColumnSpec(name=spec.name, type=column_type.value, nullable=spec.nullable))
        return specs

    # === Discovery ===

    def list_tables(self) -> list[str]:
        """List user tables currently materialized.

        Returns:
            Sorted table names, excluding engine and backend tables
        """
        names = inspect(self._engine).get_table_names()
        return sorted(name for name in names if not is_reserved_table_name(name))

    def resolve_table_name(self, table_name: str) -> str | None:
        """Return the name a user table is stored under, or None.

        SQLite matches table names without regard to case, so ``Travelers``
        resolves to an existing ``travelers``. PostgreSQL identifiers are
        quoted and match exactly.
        """
        validate_table_name(table_name)
        if is_reserved_table_name(table_name):
            return None
        if self._is_postgresql:
            return table_name if self._has_table(table_name) else None
        wanted = table_name.lower()
        for name in inspect(self._engine).get_table_names():
            if name.lower() == wanted and not is_reserved_table_name(name):
                return name
        return None

    def table_exists(self, table_name: str) -> bool:
        """Check whether a user table exists.

        Reserved tables always report False.
        """
        return self.resolve_table_name(table_name) is not None

    def require_table(self, table_name: str) -> str:
        """Return the stored name of an existing user table.

        Raises:
            InvalidIdentifierError: If the name is malformed
            TableNotFoundError: If the table does not exist
        """
        stored = self.resolve_table_name(table_name)
        if stored is None:
            raise TableNotFoundError(table_name, self.list_tables())
        return stored

    def get_schema(self, table_name: str) -> list[ColumnInfo]:
        """Introspect the user columns of a table.

        Engine-owned columns are excluded; native types are mapped back to
        registry tokens.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        table_name = self.require_table(table_name)
        dialect = self._engine.dialect
        columns = inspect(self._engine).get_columns(table_name)
        return [
            ColumnInfo(
                name=col["name"],
                type=token_for_native(col["type"], dialect),
                nullable=bool(col.get("nullable", True)),
            )
            for col in columns
            if col["name"] not in ENGINE_COLUMNS
        ]

    def has_update_trigger(self, table_name: str) -> bool:
        """Check that the update-timestamp trigger is installed on a table."""
        trigger_name = self._trigger_name(table_name)
        with self._engine.connect() as conn:
            if self._is_postgresql:
                result = conn.execute(
                    text(
                        """
                    SELECT COUNT(*) FROM information_schema.triggers
                    WHERE event_object_table = :table AND trigger_name = :trigger
                """
                    ),
                    {"table": table_name, "trigger": trigger_name},
                )
                return (result.scalar() or 0) > 0
            result = conn.execute(
                text(
                    """
                SELECT name FROM sqlite_master
                WHERE type = 'trigger' AND name = :trigger AND tbl_name = :table
            """
                ),
                {"table": table_name, "trigger": trigger_name},
            )
            return result.fetchone() is not None

    def get_row_count(self, table_name: str) -> int:
        """Get the number of rows in a table."""
        with self._engine.connect() as conn:
            result = conn.execute(
                text(f"SELECT COUNT(*) FROM {self._quote(table_name)}")  # noqa: S608
            )
            return result.scalar() or 0

    def describe_table(self, table_name: str) -> TableInfo:
        """Get columns plus row count, trigger state and context presence.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        table_name = self.require_table(table_name)
        columns = self.get_schema(table_name)
        with self._connection.get_session() as session:
            has_context = (
                session.execute(
                    select(TableContext.id).where(TableContext.table_name == table_name)
                ).first()
                is not None
            )
        return TableInfo(
            name=table_name,
            columns=columns,
            row_count=self.get_row_count(table_name),
            has_update_trigger=self.has_update_trigger(table_name),
            has_context=has_context,
        )

    # === DDL ===

    def _build_table(self, table_name: str, specs: list[ColumnSpec]) -> Table:
        """Build the Table definition with engine-owned and user columns."""
        columns: list[Column[Any]] = [
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column(
                "created_at",
                DateTime(timezone=True),
                nullable=False,
                server_default=self._now_default(),
            ),
            Column(
                "updated_at",
                DateTime(timezone=True),
                nullable=False,
                server_default=self._now_default(),
            ),
        ]
        for spec in specs:
            columns.append(Column(spec.name, native_type(spec.type), nullable=spec.nullable))

        # Fresh metadata per table to avoid conflicts between requests
        return Table(table_name, MetaData(), *columns)

    def _install_update_trigger(self, table_name: str) -> None:
        """Install the trigger that refreshes updated_at on every row update."""
        table = self._quote(table_name)
        trigger = self._quote(self._trigger_name(table_name))
        try:
            with self._engine.begin() as conn:
                if self._is_postgresql:
                    conn.exec_driver_sql(f"DROP TRIGGER IF EXISTS {trigger} ON {table}")
                    conn.exec_driver_sql(
                        f"""
                        CREATE TRIGGER {trigger}
                        BEFORE UPDATE ON {table}
                        FOR EACH ROW EXECUTE FUNCTION {PG_TOUCH_FUNCTION}()
                        """
                    )
                else:
                    # Explicit writes to updated_at are left alone
                    conn.exec_driver_sql(
                        f"""
                        CREATE TRIGGER IF NOT EXISTS {trigger}
                        AFTER UPDATE ON {table}
                        FOR EACH ROW WHEN NEW.updated_at IS OLD.updated_at
                        BEGIN
                            UPDATE {table} SET updated_at = {SQLITE_NOW} WHERE id = NEW.id;
                        END
                        """
                    )
        except SQLAlchemyError as e:
            logger.error(f"Table '{table_name}' was created but its update trigger failed: {e}")
            raise SchemaChangeError(
                f"Failed to install update trigger on '{table_name}': {e}",
                {"table_name": table_name},
            ) from e

    def create_table(
        self,
        table_name: str,
        columns: list[ColumnSpec | dict[str, Any]],
    ) -> TableInfo:
        """Create a user table.

        Re-issuing the same definition for an existing table is a no-op.
        A different definition for an existing name is rejected rather
        than reconciled.

        Args:
            table_name: Table name
            columns: Column specs (``{"name", "type", "nullable"}``)

        Returns:
            TableInfo for the (new or existing) table

        Raises:
            InvalidIdentifierError: If a table or column name is malformed
            InvalidColumnTypeError: If a type token is unknown
            ValidationError: If no columns are given or a name repeats
            TableAlreadyExistsError: If the name is reserved by the engine
            SchemaConflictError: If the table exists with different columns
            SchemaChangeError: If the database rejects the DDL
        """
        validate_table_name(table_name)
        if is_reserved_table_name(table_name):
            raise TableAlreadyExistsError(
                table_name,
                f"Table name '{table_name}' is reserved by the engine. Choose another name.",
            )
        specs = self._validate_columns(table_name, columns)

        if self._has_table(table_name):
            existing = self.get_schema(table_name)
            requested = [ColumnInfo(name=s.name, type=s.type, nullable=s.nullable) for s in specs]
            if {c.name: c for c in existing} != {c.name: c for c in requested}:
                raise SchemaConflictError(
                    table_name,
                    [c.model_dump() for c in existing],
                    [c.model_dump() for c in requested],
                )
            logger.info(f"Table '{table_name}' already exists with the same columns")
            return self.describe_table(table_name)

        table = self._build_table(table_name, specs)
        try:
            with self._engine.begin() as conn:
                table.create(conn, checkfirst=True)
        except SQLAlchemyError as e:
            raise SchemaChangeError(
                f"Failed to create table '{table_name}': {e}", {"table_name": table_name}
            ) from e

        self._install_update_trigger(table_name)
        logger.info(f"Created table '{table_name}' with {len(specs)} column(s)")
        return self.describe_table(table_name)

    def alter_table(self, table_name: str, column: ColumnSpec | dict[str, Any]) -> ColumnInfo:
        """Add one column to an existing table.

        Args:
            table_name: Table name
            column: Column spec

        Returns:
            ColumnInfo for the added column

        Raises:
            TableNotFoundError: If the table does not exist
            ColumnAlreadyExistsError: If the column name is taken
            SchemaChangeError: If the database rejects the DDL (e.g. NOT NULL
                on a table with rows)
        """
        validate_table_name(table_name)
        spec = coerce_column_spec(column)
        validate_column_name(spec.name)
        column_type = resolve_column_type(spec.type)
        table_name = self.require_table(table_name)

        existing = {c.name.lower() for c in self.get_schema(table_name)}
        if spec.name.lower() in existing:
            raise ColumnAlreadyExistsError(spec.name, table_name)

        type_sql = native_type(column_type).compile(dialect=self._engine.dialect)
        ddl = f"ALTER TABLE {self._quote(table_name)} ADD COLUMN {self._quote(spec.name)} {type_sql}"
        if not spec.nullable:
            ddl += " NOT NULL"

        try:
            with self._engine.begin() as conn:
                conn.exec_driver_sql(ddl)
        except SQLAlchemyError as e:
            raise SchemaChangeError(
                f"Failed to add column '{spec.name}' to '{table_name}': {e}",
                {"table_name": table_name, "column_name": spec.name},
            ) from e

        logger.info(f"Added column '{spec.name}' ({column_type.value}) to '{table_name}'")
        return ColumnInfo(name=spec.name, type=column_type.value, nullable=spec.nullable)

    def _drop_context(self, conn: Connection, table_name: str) -> None:
        conn.execute(delete(TableContext).where(TableContext.table_name == table_name))

    def drop_table(self, table_name: str) -> bool:
        """Drop a user table and its context descriptor.

        Dropping a table that does not exist is a no-op. Reserved tables are
        never dropped.

        Returns:
            True if a table was dropped
        """
        validate_table_name(table_name)
        if is_reserved_table_name(table_name):
            logger.warning(f"Refusing to drop reserved table '{table_name}'")
            return False

        stored = self.resolve_table_name(table_name)
        existed = stored is not None
        if stored is not None:
            table_name = stored
        statement = f"DROP TABLE IF EXISTS {self._quote(table_name)}"
        if self._is_postgresql:
            statement += " CASCADE"

        try:
            with self._engine.begin() as conn:
                conn.exec_driver_sql(statement)
                self._drop_context(conn, table_name)
        except SQLAlchemyError as e:
            raise SchemaChangeError(
                f"Failed to drop table '{table_name}': {e}", {"table_name": table_name}
            ) from e

        if existed:
            logger.info(f"Dropped table '{table_name}' and its context")
        return existed
