"""Embedding indexer: turns descriptions into vectors and ranks them.

Ranking uses cosine distance (``1 - cosine similarity``), so 0 means the
same direction and 2 the opposite. Distances are computed in Python; the
number of stored contexts is one per table.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tablesmith.core.types import ContextInfo, RankedContext
from tablesmith.embeddings import get_provider
from tablesmith.exceptions import EmbeddingDimensionError, EmbeddingError

if TYPE_CHECKING:
    from tablesmith.embeddings.provider import EmbeddingProvider

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Compute cosine similarity between two vectors of equal length."""
    dot_product = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity: float = dot_product / (norm_a * norm_b)
    return similarity


def cosine_distance(a: list[float], b: list[float]) -> float:
    """Cosine distance; zero vectors are treated as orthogonal to everything."""
    return 1.0 - cosine_similarity(a, b)


def validate_vector(raw: Any) -> list[float]:
    """Check a provider's output and normalize it to a list of floats.

    Raises:
        EmbeddingError: If the vector is empty, non-numeric or non-finite
    """
    if raw is None or isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise EmbeddingError(f"Embedding provider returned {type(raw).__name__}, not a vector.")

    vector: list[float] = []
    for value in raw:
        if isinstance(value, bool):
            raise EmbeddingError("Embedding contains a non-numeric value: bool.")
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Embedding contains a non-numeric value: {value!r}."
            ) from e
        if not math.isfinite(number):
            raise EmbeddingError(f"Embedding contains a non-finite value: {number}.")
        vector.append(number)

    if not vector:
        raise EmbeddingError("Embedding provider returned an empty vector.")
    return vector


class EmbeddingIndexer:
    """Wraps an embedding provider with validation and ranking.

    The provider is created lazily so that tables and rows can be used
    without loading an embedding model.
    """

    def __init__(
        self,
        provider: str | EmbeddingProvider = "fastembed",
        **provider_options: Any,
    ) -> None:
        """Initialize the indexer.

        Args:
            provider: Provider name ("fastembed", "openai") or instance
            **provider_options: Constructor options for a named provider
                (model, dimensions, api_key)
        """
        self._provider_spec = provider
        self._provider_options = provider_options
        self._provider: EmbeddingProvider | None = None

    @property
    def provider(self) -> EmbeddingProvider:
        """The embedding provider (created on first access).

        Raises:
            EmbeddingError: If the provider cannot be created
        """
        if self._provider is None:
            try:
                self._provider = get_provider(self._provider_spec, **self._provider_options)
            except (ImportError, TypeError, ValueError) as e:
                raise EmbeddingError(f"Embedding provider unavailable: {e}") from e
            logger.info(f"Using embedding model '{self._provider.model_name}'")
        return self._provider

    @property
    def model_name(self) -> str:
        return self.provider.model_name

    def embed(self, text: str) -> list[float]:
        """Embed one text.

        Raises:
            EmbeddingError: If the provider fails or returns a malformed vector
        """
        provider = self.provider
        try:
            raw = provider.embed(text)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding provider failed: {e}") from e
        return validate_vector(raw)

    def rank(
        self, query_vector: list[float], candidates: list[ContextInfo]
    ) -> list[RankedContext]:
        """Order candidates by cosine distance to the query vector.

        Ties keep candidate order. Every candidate appears exactly once.

        Raises:
            EmbeddingDimensionError: If a candidate's vector length differs
                from the query's
        """
        ranked: list[RankedContext] = []
        for candidate in candidates:
            if len(candidate.embedding) != len(query_vector):
                raise EmbeddingDimensionError(
                    len(query_vector), len(candidate.embedding), candidate.table_name
                )
            ranked.append(
                RankedContext(
                    context=candidate,
                    distance=cosine_distance(query_vector, candidate.embedding),
                )
            )
        # sorted() is stable
        return sorted(ranked, key=lambda r: r.distance)
