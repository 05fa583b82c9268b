"""OpenAI embedding provider."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from tablesmith.embeddings.provider import EmbeddingProvider

if TYPE_CHECKING:
    from openai import OpenAI


class OpenAIProvider(EmbeddingProvider):
    """Hosted embeddings via the OpenAI API.

    Uses text-embedding-3-small truncated to 384 dimensions by default, the
    same length as the local model, so stored contexts stay comparable when
    switching providers.

    Example:
        >>> provider = OpenAIProvider()  # reads OPENAI_API_KEY
        >>> len(provider.embed("Invoices issued per customer"))
        384
    """

    DEFAULT_MODEL = "text-embedding-3-small"
    DEFAULT_DIMENSIONS = 384

    def __init__(
        self,
        model: str | None = None,
        dimensions: int | None = None,
        api_key: str | None = None,
    ) -> None:
        """Create the API client.

        Args:
            model: Embedding model. Defaults to text-embedding-3-small.
            dimensions: Requested vector length. Defaults to 384.
            api_key: API key. Falls back to OPENAI_API_KEY.

        Raises:
            ImportError: If the openai package is missing
            ValueError: If no API key is available
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAI embeddings. "
                "Install it with: pip install tablesmith[openai]"
            ) from e

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: OpenAI = OpenAI(api_key=api_key)
        self._model = model or self.DEFAULT_MODEL
        self._dimensions = dimensions or self.DEFAULT_DIMENSIONS

    def embed(self, text: str) -> list[float]:
        response = self._client.embeddings.create(
            model=self._model,
            input=text,
            dimensions=self._dimensions,
        )
        return list(response.data[0].embedding)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model
