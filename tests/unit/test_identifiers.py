"""Tests for identifier validation."""

from __future__ import annotations

import pytest

from tablesmith.exceptions import InvalidIdentifierError, ValidationError
from tablesmith.schema.identifiers import (
    CONTEXT_TABLE_NAME,
    is_reserved_table_name,
    validate_column_name,
    validate_identifier,
    validate_table_name,
)


class TestValidateIdentifier:
    """Grammar: ^[A-Za-z_][A-Za-z0-9_]*$"""

    @pytest.mark.parametrize("name", ["travelers", "_private", "Order2024", "a", "snake_case_1"])
    def test_accepts_valid_names(self, name: str) -> None:
        assert validate_identifier(name, "table") == name

    @pytest.mark.parametrize(
        "name",
        ["1abc", "", "a-b", "a;b", "a b", "drop table x", 'x"; --', "tab\tle", "ünïcode"],
    )
    def test_rejects_invalid_names(self, name: str) -> None:
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(name, "table")

    @pytest.mark.parametrize("name", [None, 42, ["a"], b"abc"])
    def test_rejects_non_strings(self, name: object) -> None:
        with pytest.raises(InvalidIdentifierError, match="must be a string"):
            validate_identifier(name, "column")

    def test_error_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_table_name("1abc")
        assert exc_info.value.kind == "table"
        assert exc_info.value.context["name"] == "1abc"

    def test_error_message_names_the_kind(self) -> None:
        with pytest.raises(InvalidIdentifierError, match="Invalid column name"):
            validate_column_name("bad-name")


class TestEngineColumns:
    """id, created_at and updated_at belong to the engine."""

    @pytest.mark.parametrize("name", ["id", "created_at", "updated_at", "ID", "Updated_At"])
    def test_engine_columns_rejected_as_user_columns(self, name: str) -> None:
        with pytest.raises(InvalidIdentifierError, match="maintained by the engine"):
            validate_column_name(name)

    def test_engine_column_names_allowed_for_tables(self) -> None:
        assert validate_table_name("id") == "id"


class TestReservedTables:
    def test_context_table_is_reserved(self) -> None:
        assert is_reserved_table_name(CONTEXT_TABLE_NAME)

    @pytest.mark.parametrize("name", ["ts_anything", "TS_upper", "sqlite_sequence", "pg_class"])
    def test_reserved_prefixes(self, name: str) -> None:
        assert is_reserved_table_name(name)

    @pytest.mark.parametrize("name", ["travelers", "tsunami", "pgsql_notes", "sqlitefan"])
    def test_regular_names_not_reserved(self, name: str) -> None:
        assert not is_reserved_table_name(name)
