"""Shared test fixtures for Tablesmith."""

from __future__ import annotations

import hashlib
import math
import os
import re
from collections.abc import Generator

import pytest

from tablesmith import Tablesmith
from tablesmith.embeddings.provider import EmbeddingProvider
from tablesmith.generation.provider import GenerationProvider

_TOKEN = re.compile(r"[a-z0-9]+")


class HashingEmbeddingProvider(EmbeddingProvider):
    """Deterministic bag-of-words embedder: texts sharing words are close."""

    def __init__(self, dimensions: int = 32, model: str = "test-hashing") -> None:
        self._dimensions = dimensions
        self._model = model
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = [0.0] * self._dimensions
        for token in _TOKEN.findall(text.lower()):
            digest = hashlib.sha256(token.encode()).digest()
            vector[int.from_bytes(digest[:4], "big") % self._dimensions] += 1.0
        norm = math.sqrt(sum(x * x for x in vector)) or 1.0
        return [x / norm for x in vector]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model


class FailingEmbeddingProvider(HashingEmbeddingProvider):
    """Embedder whose backend is down."""

    def embed(self, text: str) -> list[float]:
        raise RuntimeError("embedding service unavailable")


class ScriptedGenerator(GenerationProvider):
    """Generator that returns a fixed reply and records prompts."""

    def __init__(self, reply: str = "Sure.") -> None:
        self.reply = reply
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply

    @property
    def model_name(self) -> str:
        return "scripted"


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    from tablesmith.core.connection import DatabaseConnection
    from tablesmith.exceptions import DatabaseConnectionError

    conn = DatabaseConnection(url)
    try:
        return conn.test_connection()
    except DatabaseConnectionError:
        return False
    finally:
        conn.close()


@pytest.fixture
def fake_provider() -> HashingEmbeddingProvider:
    """Deterministic embedding provider (no model download)."""
    return HashingEmbeddingProvider()


@pytest.fixture
def failing_provider() -> FailingEmbeddingProvider:
    """Embedding provider that always raises."""
    return FailingEmbeddingProvider()


@pytest.fixture
def fake_generator() -> ScriptedGenerator:
    """Generator replying with prose and one SQL block."""
    return ScriptedGenerator(
        "Here is the query.\n```sql\nSELECT name FROM travelers WHERE age > 30;\n```\n"
        "It lists travelers older than 30."
    )


@pytest.fixture
def memory_db(
    fake_provider: HashingEmbeddingProvider, fake_generator: ScriptedGenerator
) -> Generator[Tablesmith, None, None]:
    """Tablesmith on in-memory SQLite with fake model providers."""
    database = Tablesmith(
        "sqlite:///:memory:",
        embedding_provider=fake_provider,
        generator=fake_generator,
    )
    yield database
    database.close()


@pytest.fixture
def file_db_url(tmp_path) -> str:
    """URL of a fresh SQLite file database."""
    return f"sqlite:///{tmp_path}/tablesmith.db"


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from TEST_DATABASE_URL or use a local default.

    Skips when psycopg is missing or no server answers.
    """
    url = os.environ.get("TEST_DATABASE_URL") or "postgresql://localhost/tablesmith_test"

    if not _psycopg_available():
        pytest.skip("psycopg not installed")
    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url


@pytest.fixture
def pg_db(
    postgresql_url: str, fake_provider: HashingEmbeddingProvider
) -> Generator[Tablesmith, None, None]:
    """Tablesmith on PostgreSQL; drops every user table afterwards."""
    database = Tablesmith(postgresql_url, embedding_provider=fake_provider)
    yield database
    for name in database.list_tables():
        database.drop_table(name)
    database.close()
