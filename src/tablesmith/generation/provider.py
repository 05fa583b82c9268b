"""Text generation provider interface."""

from abc import ABC, abstractmethod


class GenerationProvider(ABC):
    """Interface for chat/completion backends used by the chat assistant."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate a completion for a prompt.

        Args:
            prompt: Full prompt text.

        Returns:
            Generated text.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier."""
        ...
