"""Text generation providers for the chat assistant."""

from tablesmith.generation.provider import GenerationProvider

__all__ = [
    "GenerationProvider",
    "get_generator",
]


def get_generator(
    generator: str | GenerationProvider = "openai",
    **kwargs: object,
) -> GenerationProvider:
    """Get a generation provider by name, or pass an instance through.

    Raises:
        ValueError: If the provider name is unknown.
        ImportError: If the provider's package is not installed.
    """
    if isinstance(generator, GenerationProvider):
        return generator

    options = {k: v for k, v in kwargs.items() if v is not None}
    if generator == "openai":
        from tablesmith.generation.openai import OpenAIGenerator

        return OpenAIGenerator(**options)  # type: ignore[arg-type]
    raise ValueError(f"Unknown generation provider: {generator}. Available: openai")
