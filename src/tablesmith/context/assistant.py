"""Chat grounded in table contexts.

The assistant picks the tables relevant to a question, describes them to a
text generator (columns, saved description, a few sample rows) and returns
the answer together with any SQL the generator proposed. The SQL is never
executed here.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from tablesmith.core.types import ChatAnswer, ChatMessage, ColumnInfo
from tablesmith.data.query import TableQuery
from tablesmith.exceptions import ContextNotFoundError, GenerationError, ValidationError
from tablesmith.generation import get_generator

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from tablesmith.context.store import ContextStore
    from tablesmith.generation.provider import GenerationProvider
    from tablesmith.schema.manager import SchemaManager

logger = logging.getLogger(__name__)

SAMPLE_ROWS = 3
DEFAULT_TOP_K = 3

SQL_BLOCK_PATTERN = re.compile(r"```sql[ \t]*\n(.*?)```", re.DOTALL | re.IGNORECASE)
CODE_BLOCK_PATTERN = re.compile(r"```.*?```", re.DOTALL)

INSTRUCTIONS = [
    "If the question can be answered from the data, write one SQL query for it",
    'Put SQL in a fenced code block with the language "sql"',
    "Only use the tables and columns listed above",
    "Every table also has id, created_at and updated_at columns",
    "Explain the answer briefly and plainly",
]


@dataclass
class TablePrompt:
    """What the generator is told about one table."""

    name: str
    columns: list[ColumnInfo]
    description: str | None = None
    sample_rows: list[dict[str, Any]] = field(default_factory=list)

    def render(self) -> str:
        lines = [f'TABLE "{self.name}"']
        if self.description:
            lines.append(f"DESCRIPTION: {self.description}")
        lines.append("COLUMNS:")
        for column in self.columns:
            null = "" if column.nullable else ", not null"
            lines.append(f"- {column.name} ({column.type}{null})")
        lines.append(f"SAMPLE DATA (first {SAMPLE_ROWS} rows):")
        lines.append(json.dumps(self.sample_rows, indent=2, default=str))
        return "\n".join(lines)


def build_prompt(
    message: str,
    tables: list[TablePrompt],
    history: list[ChatMessage] | None = None,
) -> str:
    """Assemble the generator prompt."""
    sections = [
        "You are a helpful data assistant. You help users understand and query "
        "their database tables."
    ]
    if tables:
        sections.extend(table.render() for table in tables)
    else:
        sections.append("No tables are available yet.")

    if history:
        turns = [
            f"{'USER' if turn.role == 'user' else 'ASSISTANT'}: {turn.content}" for turn in history
        ]
        sections.append("PREVIOUS CONVERSATION:\n" + "\n".join(turns))

    sections.append(f"USER MESSAGE: {message}")
    sections.append(
        "INSTRUCTIONS:\n" + "\n".join(f"{i}. {text}" for i, text in enumerate(INSTRUCTIONS, 1))
    )
    sections.append("RESPONSE:")
    return "\n\n".join(sections)


def split_answer(content: str) -> tuple[str, str | None]:
    """Separate the prose answer from a fenced SQL block.

    Returns:
        (text without code blocks, SQL or None)
    """
    match = SQL_BLOCK_PATTERN.search(content)
    sql = match.group(1).strip() if match else None
    text = CODE_BLOCK_PATTERN.sub("", content).strip()
    return text, sql or None


class ChatAssistant:
    """Answers questions about user tables with help from a text generator."""

    def __init__(
        self,
        engine: Engine,
        schema: SchemaManager,
        contexts: ContextStore,
        generator: str | GenerationProvider = "openai",
        **generator_options: Any,
    ) -> None:
        """Initialize the assistant.

        Args:
            engine: SQLAlchemy engine used to read sample rows
            schema: Schema manager
            contexts: Context store used to pick relevant tables
            generator: Generator name or instance (created on first use)
            **generator_options: Constructor options for a named generator
        """
        self._engine = engine
        self._schema = schema
        self._contexts = contexts
        self._generator_spec = generator
        self._generator_options = generator_options
        self._generator: GenerationProvider | None = None

    @property
    def generator(self) -> GenerationProvider:
        if self._generator is None:
            try:
                self._generator = get_generator(self._generator_spec, **self._generator_options)
            except (ImportError, TypeError, ValueError) as e:
                raise GenerationError(f"Generation provider unavailable: {e}") from e
        return self._generator

    def select_tables(self, message: str, table_name: str | None, top_k: int) -> list[str]:
        """Pick the tables to describe: the named one, or the closest contexts.

        Without any saved context, falls back to the first tables by name.
        """
        if table_name:
            return [self._schema.require_table(table_name)]
        if self._contexts.list_all():
            ranked = self._contexts.search(message, limit=top_k)
            existing = set(self._schema.list_tables())
            return [r.context.table_name for r in ranked if r.context.table_name in existing]
        return self._schema.list_tables()[:top_k]

    def describe(self, table_name: str) -> TablePrompt:
        """Gather schema, description and sample rows for one table."""
        try:
            description: str | None = self._contexts.get(table_name).description
        except ContextNotFoundError:
            description = None
        page = TableQuery(self._engine, table_name).select_page(limit=SAMPLE_ROWS)
        return TablePrompt(
            name=table_name,
            columns=self._schema.get_schema(table_name),
            description=description,
            sample_rows=page.rows,
        )

    def ask(
        self,
        message: Any,
        table_name: str | None = None,
        history: list[ChatMessage | dict[str, Any]] | None = None,
        top_k: int = DEFAULT_TOP_K,
    ) -> ChatAnswer:
        """Answer a question about the data.

        Args:
            message: The user's question
            table_name: Restrict the answer to this table
            history: Previous turns ({"role": "user"|"ai", "content": ...})
            top_k: Number of contexts to use when no table is named

        Returns:
            ChatAnswer with the prose answer, extracted SQL and tables used

        Raises:
            ValidationError: If the message is empty
            TableNotFoundError: If the named table does not exist
            GenerationError: If the generator fails
        """
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Chat message must be non-empty text.", {"message": "required"})
        message = message.strip()
        try:
            turns = [ChatMessage.model_validate(turn) for turn in history or []]
        except PydanticValidationError as e:
            raise ValidationError(
                "Chat history turns need a role (\"user\" or \"ai\") and content.",
                {"history": str(e.errors()[0]["msg"])},
            ) from e

        tables = self.select_tables(message, table_name, top_k)
        prompt = build_prompt(message, [self.describe(t) for t in tables], turns)

        generator = self.generator
        logger.info(f"Chat over {len(tables)} table(s) with '{generator.model_name}'")
        try:
            content = generator.generate(prompt)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Generation provider failed: {e}") from e

        text, sql = split_answer(content or "")
        return ChatAnswer(response=text, sql=sql, tables=tables)
