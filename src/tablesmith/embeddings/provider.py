"""Embedding provider interface."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Interface for text embedding backends.

    A provider turns a table description (or a search query) into a fixed
    length vector.
    """

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed.

        Returns:
            Vector embedding as list of floats.
        """
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Expected vector length."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier stored next to each vector."""
        ...
