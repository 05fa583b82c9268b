"""Runtime configuration for Tablesmith.

Values come from ``TABLESMITH_*`` environment variables; CLI options
override them. Nothing here opens connections or loads models.
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_DATABASE_URL = "sqlite:///./tablesmith.db"

ENV_PREFIX = "TABLESMITH_"


def get_database_url(url: str | None = None) -> str:
    """Resolve database URL from explicit value, environment variable, or default.

    Priority:
    1. Explicit URL argument
    2. TABLESMITH_URL environment variable
    3. Default: sqlite:///./tablesmith.db
    """
    if url:
        return url
    if env_url := os.getenv(f"{ENV_PREFIX}URL"):
        return env_url
    return DEFAULT_DATABASE_URL


def _env_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Process-wide settings."""

    database_url: str = Field(default=DEFAULT_DATABASE_URL, description="SQLAlchemy URL")
    echo: bool = Field(default=False, description="Echo SQL statements")
    embedding_provider: Literal["fastembed", "openai"] = Field(
        default="fastembed", description="Embedding provider name"
    )
    embedding_model: str | None = Field(default=None, description="Provider-specific model")
    embedding_dimensions: int | None = Field(default=None, description="Vector dimensions")
    generation_model: str | None = Field(default=None, description="Chat completion model")
    log_level: str = Field(default="INFO", description="Root log level for `serve`")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    @classmethod
    def from_env(cls, **overrides: object) -> Settings:
        """Build settings from ``TABLESMITH_*`` variables.

        Keyword overrides that are not None win over the environment.
        """
        env = os.environ
        values: dict[str, object] = {
            "database_url": get_database_url(),
            "echo": _env_bool(env.get(f"{ENV_PREFIX}ECHO")),
        }
        if provider := env.get(f"{ENV_PREFIX}EMBEDDING_PROVIDER"):
            values["embedding_provider"] = provider
        if model := env.get(f"{ENV_PREFIX}EMBEDDING_MODEL"):
            values["embedding_model"] = model
        if dimensions := env.get(f"{ENV_PREFIX}EMBEDDING_DIMENSIONS"):
            values["embedding_dimensions"] = dimensions
        if generation_model := env.get(f"{ENV_PREFIX}GENERATION_MODEL"):
            values["generation_model"] = generation_model
        if log_level := env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = log_level.upper()
        if host := env.get(f"{ENV_PREFIX}HOST"):
            values["host"] = host
        if port := env.get(f"{ENV_PREFIX}PORT"):
            values["port"] = port

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
