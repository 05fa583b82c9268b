"""Input parsing utilities for CLI commands."""

import json
from pathlib import Path
from typing import Any

NOT_NULL_MODIFIERS = ("notnull", "not-null", "required")


def parse_column_spec(spec: str) -> dict[str, Any]:
    """Parse a column specification string.

    Format: name:TYPE[:notnull]

    Examples:
        "age:INTEGER:notnull" → {"name": "age", "type": "INTEGER", "nullable": False}
        "bio:TEXT" → {"name": "bio", "type": "TEXT", "nullable": True}

    Raises:
        ValueError: If spec format is invalid
    """
    parts = spec.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid column spec: '{spec}'. Expected format: name:TYPE[:notnull]")

    column: dict[str, Any] = {"name": parts[0], "type": parts[1], "nullable": True}
    for modifier in parts[2:]:
        if modifier.lower() in NOT_NULL_MODIFIERS:
            column["nullable"] = False
        elif modifier.lower() == "null":
            column["nullable"] = True
        else:
            raise ValueError(f"Invalid modifier: '{modifier}'. Supported: notnull, null")
    return column


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object given on the command line.

    Raises:
        ValueError: If the text is not a JSON object
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e.msg}") from e
    if not isinstance(value, dict):
        raise ValueError("Expected a JSON object, e.g. '{\"age\": 36}'")
    return value


def read_json_file(path: str) -> Any:
    """Read a JSON document from file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open("r") as f:
        return json.load(f)


def read_jsonl_file(path: str) -> list[dict[str, Any]]:
    """Read a JSON Lines file, one object per line (blank lines skipped).

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If any line contains invalid JSON
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    records = []
    with file_path.open("r") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise json.JSONDecodeError(
                    f"Invalid JSON on line {line_num}: {e.msg}",
                    e.doc,
                    e.pos,
                ) from e

    return records
