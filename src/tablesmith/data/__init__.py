"""Data operations for Tablesmith."""

from tablesmith.data.query import TableQuery, parse_non_negative_int, parse_record_id

__all__ = [
    "TableQuery",
    "parse_non_negative_int",
    "parse_record_id",
]
