"""Generic CRUD against user tables.

Tables are reflected from the live database at request time, so the query
builder never holds a stale copy of a schema another process altered. Column
names pass the identifier grammar and are checked against the reflected
columns; values always travel as bound parameters.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, MetaData, Table, delete, func, insert, inspect, select, update
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from tablesmith.core.types import PageResult
from tablesmith.exceptions import (
    NoColumnsProvidedError,
    QueryError,
    RecordNotFoundError,
    TableNotFoundError,
    UnknownColumnError,
    ValidationError,
)
from tablesmith.schema.identifiers import (
    ENGINE_COLUMNS,
    is_reserved_table_name,
    validate_column_name,
    validate_table_name,
)

if TYPE_CHECKING:
    from sqlalchemy import Column, Engine, RowMapping

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

_DIGITS = re.compile(r"^[0-9]+$")

# Largest value a signed 64-bit INTEGER column or LIMIT clause accepts
MAX_INT64 = 2**63 - 1


def parse_non_negative_int(value: Any, name: str) -> int:
    """Strictly parse a pagination parameter.

    Accepts ints and all-digit strings up to the signed 64-bit maximum.
    Booleans, floats, negatives and any other text are rejected instead of
    being silently truncated.

    Raises:
        ValidationError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise ValidationError(f"'{name}' must be a non-negative integer.", {name: "boolean"})
    if isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        value = int(value.strip())
    if isinstance(value, int):
        if value < 0:
            raise ValidationError(f"'{name}' must be a non-negative integer.", {name: "negative"})
        if value > MAX_INT64:
            raise ValidationError(
                f"'{name}' must be at most {MAX_INT64}, got {value}.", {name: "out of range"}
            )
        return value
    raise ValidationError(
        f"'{name}' must be a non-negative integer, got {value!r}.", {name: "not an integer"}
    )


def parse_record_id(record_id: Any) -> int:
    """Parse a row id given as an int or a digit string."""
    if isinstance(record_id, bool):
        raise ValidationError(f"Invalid row id {record_id!r}.", {"id": "not an integer"})
    if isinstance(record_id, str) and _DIGITS.fullmatch(record_id.strip()):
        record_id = int(record_id.strip())
    if isinstance(record_id, int):
        if abs(record_id) > MAX_INT64:
            raise ValidationError(f"Row id {record_id} is out of range.", {"id": "out of range"})
        return record_id
    raise ValidationError(f"Invalid row id {record_id!r}.", {"id": "not an integer"})


def _serialize_value(value: Any) -> Any:
    """Render a stored value as JSON-friendly output."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(row: RowMapping) -> dict[str, Any]:
    """Convert a result row to a plain dict."""
    return {key: _serialize_value(value) for key, value in row.items()}


class TableQuery:
    """CRUD operations for one user table.

    Example:
        query = TableQuery(engine, "travelers")
        row = query.insert_one({"name": "Ada", "age": 36})
        page = query.select_page(limit=10)
    """

    def __init__(self, engine: Engine, table_name: str) -> None:
        """Initialize the query builder.

        Args:
            engine: SQLAlchemy engine
            table_name: User table name (validated here)
        """
        self._engine = engine
        self._table_name = validate_table_name(table_name)

    @property
    def table_name(self) -> str:
        return self._table_name

    def _not_found(self) -> TableNotFoundError:
        names = inspect(self._engine).get_table_names()
        return TableNotFoundError(
            self._table_name, sorted(n for n in names if not is_reserved_table_name(n))
        )

    def _reflect(self) -> Table:
        """Load the current table definition from the database."""
        if is_reserved_table_name(self._table_name):
            raise self._not_found()
        try:
            return Table(self._table_name, MetaData(), autoload_with=self._engine)
        except NoSuchTableError as e:
            raise self._not_found() from e
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to load table '{self._table_name}': {e}") from e

    def _user_columns(self, table: Table) -> list[str]:
        return [c.name for c in table.columns if c.name not in ENGINE_COLUMNS]

    def _coerce_value(self, column: Column[Any], value: Any) -> Any:
        """Parse ISO-8601 strings bound for timestamp columns."""
        if isinstance(column.type, DateTime) and isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                # Left for the driver to reject
                return value
        return value

    def _prepare_values(self, table: Table, row: Any) -> dict[str, Any]:
        """Validate column names and map them onto reflected columns."""
        if not isinstance(row, dict):
            raise ValidationError(
                f"Row for '{self._table_name}' must be an object, got {type(row).__name__}.",
                {"data": "expected an object"},
            )

        values: dict[str, Any] = {}
        for name, value in row.items():
            validate_column_name(name)
            if name not in table.c:
                raise UnknownColumnError(name, self._table_name, self._user_columns(table))
            values[name] = self._coerce_value(table.c[name], value)
        return values

    # === Create ===

    def insert_one(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a single row.

        Args:
            row: Column -> value mapping (user columns only)

        Returns:
            The stored row including id and timestamps

        Raises:
            NoColumnsProvidedError: If the row is empty
            UnknownColumnError: If a column does not exist
            QueryError: If the database rejects the row
        """
        if isinstance(row, dict) and not row:
            raise NoColumnsProvidedError(self._table_name)
        table = self._reflect()
        values = self._prepare_values(table, row)

        try:
            with self._engine.begin() as conn:
                result = conn.execute(insert(table).values(values).returning(*table.c))
                stored = row_to_dict(result.mappings().one())
        except (SQLAlchemyError, OverflowError) as e:
            raise QueryError(f"Failed to insert row into '{self._table_name}': {e}") from e

        logger.debug(f"Inserted row {stored.get('id')} into '{self._table_name}'")
        return stored

    def insert_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert several rows in one parameterized statement.

        Columns are the union across rows; a row missing a column binds NULL
        for it. Returned rows are in input order.

        Raises:
            ValidationError: If rows is not a non-empty list of objects
            NoColumnsProvidedError: If no row names any column
        """
        if not isinstance(rows, list) or not rows:
            raise ValidationError(
                f"Bulk insert into '{self._table_name}' needs a non-empty list of rows.",
                {"data": "expected a non-empty array"},
            )
        table = self._reflect()

        prepared = [self._prepare_values(table, row) for row in rows]
        columns: list[str] = []
        for values in prepared:
            for name in values:
                if name not in columns:
                    columns.append(name)
        if not columns:
            raise NoColumnsProvidedError(self._table_name)

        params = [{name: values.get(name) for name in columns} for values in prepared]
        statement = insert(table).values(params).returning(*table.c)

        try:
            with self._engine.begin() as conn:
                result = conn.execute(statement)
                # Ids follow VALUES order; RETURNING order is not guaranteed
                stored = sorted(
                    (row_to_dict(r) for r in result.mappings().all()), key=lambda r: r["id"]
                )
        except (SQLAlchemyError, OverflowError) as e:
            raise QueryError(f"Failed to insert rows into '{self._table_name}': {e}") from e

        logger.debug(f"Inserted {len(stored)} rows into '{self._table_name}'")
        return stored

    # === Read ===

    def select_page(self, limit: Any = DEFAULT_PAGE_SIZE, offset: Any = 0) -> PageResult:
        """Read one page of rows ordered by id.

        Args:
            limit: Maximum rows to return
            offset: Rows to skip

        Returns:
            PageResult with the rows and the table's total row count
        """
        limit = parse_non_negative_int(limit, "limit")
        offset = parse_non_negative_int(offset, "offset")
        table = self._reflect()

        try:
            with self._engine.connect() as conn:
                total = conn.execute(select(func.count()).select_from(table)).scalar() or 0
                result = conn.execute(
                    select(table).order_by(table.c.id).limit(limit).offset(offset)
                )
                rows = [row_to_dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to read rows from '{self._table_name}': {e}") from e

        return PageResult(rows=rows, total_count=total, limit=limit, offset=offset)

    def find_by_id(self, record_id: Any) -> dict[str, Any] | None:
        """Find a row by id, or None."""
        rid = parse_record_id(record_id)
        table = self._reflect()
        try:
            with self._engine.connect() as conn:
                row = conn.execute(select(table).where(table.c.id == rid)).mappings().first()
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to read row {rid} from '{self._table_name}': {e}") from e
        return row_to_dict(row) if row is not None else None

    def count(self) -> int:
        """Count rows in the table."""
        table = self._reflect()
        try:
            with self._engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(table)).scalar() or 0
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to count rows in '{self._table_name}': {e}") from e

    # === Update / Delete ===

    def update_by_id(self, record_id: Any, partial: dict[str, Any]) -> dict[str, Any]:
        """Update some columns of one row.

        ``updated_at`` is refreshed by the table's trigger. The row is read
        back after the update so trigger effects are included.

        Raises:
            NoColumnsProvidedError: If partial is empty
            RecordNotFoundError: If no row has this id
        """
        rid = parse_record_id(record_id)
        if isinstance(partial, dict) and not partial:
            raise NoColumnsProvidedError(self._table_name)
        table = self._reflect()
        values = self._prepare_values(table, partial)

        try:
            with self._engine.begin() as conn:
                result = conn.execute(update(table).where(table.c.id == rid).values(values))
                if result.rowcount == 0:
                    raise RecordNotFoundError(rid, self._table_name)
                row = conn.execute(select(table).where(table.c.id == rid)).mappings().one()
        except (SQLAlchemyError, OverflowError) as e:
            raise QueryError(f"Failed to update row {rid} in '{self._table_name}': {e}") from e

        logger.debug(f"Updated row {rid} in '{self._table_name}'")
        return row_to_dict(row)

    def delete_by_id(self, record_id: Any) -> int:
        """Delete one row by id.

        Returns:
            Number of rows deleted (0 when the id does not exist)
        """
        rid = parse_record_id(record_id)
        table = self._reflect()
        try:
            with self._engine.begin() as conn:
                result = conn.execute(delete(table).where(table.c.id == rid))
        except SQLAlchemyError as e:
            raise QueryError(f"Failed to delete row {rid} from '{self._table_name}': {e}") from e
        return result.rowcount
