"""Embedding providers used to index table descriptions.

By default Tablesmith embeds locally with fastembed (no API key required).

Example:
    >>> from tablesmith.embeddings import get_provider
    >>> provider = get_provider("fastembed")
    >>> provider = get_provider("openai", api_key="sk-...")
"""

from tablesmith.embeddings.provider import EmbeddingProvider

PROVIDER_NAMES = ("fastembed", "openai")

__all__ = [
    "EmbeddingProvider",
    "PROVIDER_NAMES",
    "get_provider",
]


def get_provider(
    provider: str | EmbeddingProvider = "fastembed",
    **kwargs: object,
) -> EmbeddingProvider:
    """Get an embedding provider by name, or pass an instance through.

    Args:
        provider: "fastembed", "openai" or an EmbeddingProvider instance.
        **kwargs: Passed to the provider constructor; None values are dropped.

    Raises:
        ValueError: If the provider name is unknown.
        ImportError: If the provider's package is not installed.
    """
    if isinstance(provider, EmbeddingProvider):
        return provider

    options = {k: v for k, v in kwargs.items() if v is not None}
    if provider == "fastembed":
        from tablesmith.embeddings.fastembed import FastEmbedProvider

        return FastEmbedProvider(**options)  # type: ignore[arg-type]
    elif provider == "openai":
        from tablesmith.embeddings.openai import OpenAIProvider

        return OpenAIProvider(**options)  # type: ignore[arg-type]
    else:
        raise ValueError(
            f"Unknown embedding provider: {provider}. Available: {', '.join(PROVIDER_NAMES)}"
        )
