"""OpenAI chat completion provider."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from tablesmith.generation.provider import GenerationProvider

if TYPE_CHECKING:
    from openai import OpenAI


class OpenAIGenerator(GenerationProvider):
    """Generates answers through the OpenAI chat completions API.

    Example:
        >>> generator = OpenAIGenerator()  # reads OPENAI_API_KEY
        >>> generator.generate("Say hello")
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_TEMPERATURE = 0.7
    DEFAULT_MAX_TOKENS = 2048

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        """Create the API client.

        Raises:
            ImportError: If the openai package is missing
            ValueError: If no API key is available
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for chat. Install it with: pip install tablesmith[openai]"
            ) from e

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: OpenAI = OpenAI(api_key=api_key)
        self._model = model or self.DEFAULT_MODEL
        self._temperature = temperature
        self._max_tokens = max_tokens

    def generate(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        return response.choices[0].message.content or ""

    @property
    def model_name(self) -> str:
        return self._model
