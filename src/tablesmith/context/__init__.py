"""Table contexts: descriptions, embeddings, retrieval and chat grounding."""

from tablesmith.context.assistant import ChatAssistant, build_prompt, split_answer
from tablesmith.context.indexer import EmbeddingIndexer, cosine_distance, cosine_similarity
from tablesmith.context.store import ContextStore

__all__ = [
    "ChatAssistant",
    "ContextStore",
    "EmbeddingIndexer",
    "build_prompt",
    "cosine_distance",
    "cosine_similarity",
    "split_answer",
]
