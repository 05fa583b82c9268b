"""Local embeddings through fastembed (ONNX, no API key)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tablesmith.embeddings.provider import EmbeddingProvider

if TYPE_CHECKING:
    from fastembed import TextEmbedding


class FastEmbedProvider(EmbeddingProvider):
    """Default provider: runs a small sentence model in-process.

    The model is downloaded on first use and cached by fastembed.

    Example:
        >>> provider = FastEmbedProvider()
        >>> len(provider.embed("Passenger manifest for summer charters"))
        384
    """

    DEFAULT_MODEL = "BAAI/bge-small-en-v1.5"

    MODEL_DIMENSIONS = {
        "BAAI/bge-small-en-v1.5": 384,
        "BAAI/bge-base-en-v1.5": 768,
        "sentence-transformers/all-MiniLM-L6-v2": 384,
    }

    def __init__(self, model: str | None = None) -> None:
        """Load the model.

        Args:
            model: fastembed model name. Defaults to BAAI/bge-small-en-v1.5.
        """
        try:
            from fastembed import TextEmbedding
        except ImportError as e:
            raise ImportError(
                "fastembed is required for local embeddings. "
                "Install it with: pip install tablesmith[embeddings]"
            ) from e

        self._model_name = model or self.DEFAULT_MODEL
        self._model: TextEmbedding = TextEmbedding(model_name=self._model_name)
        self._dimensions = self.MODEL_DIMENSIONS.get(self._model_name, 384)

    def embed(self, text: str) -> list[float]:
        # fastembed yields numpy arrays lazily
        vectors = list(self._model.embed([text]))
        return [float(x) for x in vectors[0]]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model_name
