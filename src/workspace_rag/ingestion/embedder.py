"""Embedding client — one batched provider call per invocation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from workspace_rag.config import Settings, settings
from workspace_rag.errors import EmbeddingError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def get_embedding_function(model_name: str = settings.embedding_model) -> Embeddings:
    """Return the configured sentence-transformer embedding function."""
    from langchain_huggingface import HuggingFaceEmbeddings

    return HuggingFaceEmbeddings(model_name=model_name)


class EmbeddingClient:
    """Convert ordered texts into index-aligned vectors.

    Parameters
    ----------
    provider:
        Any LangChain ``Embeddings`` implementation.
    dimension:
        Declared output size of the provider.  When given, every returned
        vector must have exactly this many components.
    """

    def __init__(self, provider: Embeddings, *, dimension: int | None = None) -> None:
        self._provider = provider
        self.dimension = dimension

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> EmbeddingClient:
        return cls(get_embedding_function(cfg.embedding_model), dimension=cfg.embedding_dimension)

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts*; output ``i`` is the vector for input ``i``.

        Raises
        ------
        EmbeddingError
            When the provider fails or returns a result that does not line
            up with the input.  No retry happens here.
        """
        texts = list(texts)
        if not texts:
            return []

        try:
            vectors = self._provider.embed_documents(texts)
        except Exception as exc:
            logger.error("Embedding provider failed for %d texts: %s", len(texts), exc)
            raise EmbeddingError(f"Embedding provider failed: {exc}") from exc

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} vectors for {len(texts)} texts",
                {"expected": len(texts), "received": len(vectors)},
            )
        if self.dimension is not None:
            for i, vector in enumerate(vectors):
                if len(vector) != self.dimension:
                    raise EmbeddingError(
                        f"Vector {i} has dimension {len(vector)}, expected {self.dimension}",
                        {"index": i},
                    )

        logger.debug("Embedded %d texts", len(texts))
        return [list(v) for v in vectors]

    def embed_query(self, text: str) -> list[float]:
        """Embed a single text through the same batched path."""
        return self.embed([text])[0]
