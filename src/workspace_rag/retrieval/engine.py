"""Retrieval engine — relevance-filtered context under a character budget.

Usage::

    engine = RetrievalEngine(embedder, writer)
    context = await engine.assemble_context_text("How do refunds work?", namespace_id)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from workspace_rag.config import settings
from workspace_rag.errors import RetrievalError
from workspace_rag.index.writer import IndexWriter
from workspace_rag.ingestion.embedder import EmbeddingClient
from workspace_rag.models import Match

logger = logging.getLogger(__name__)


def latest_user_message(messages: Sequence[Mapping[str, Any] | str]) -> str:
    """Return the text of the last message in a chat transcript."""
    if not messages:
        return ""
    last = messages[-1]
    if isinstance(last, str):
        return last
    return str(last.get("content", ""))


def render_context(matches: Sequence[Match], max_characters: int) -> str:
    """Join rendered matches with single spaces and cut at *max_characters*."""
    joined = " ".join(m.render() for m in matches)
    return joined[:max_characters] if len(joined) > max_characters else joined


class RetrievalEngine:
    """Embed a message, query its namespace and keep the relevant matches.

    Parameters
    ----------
    embedder:
        Embedding client; the message is embedded as a single-element batch.
    index_writer:
        Index writer used for the top-K similarity query.
    """

    def __init__(self, embedder: EmbeddingClient, index_writer: IndexWriter) -> None:
        self._embedder = embedder
        self._index_writer = index_writer

    async def raw_matches(
        self,
        message: str,
        namespace_id: str,
        *,
        min_score: float = settings.context_min_score,
        top_k: int = settings.context_top_k,
    ) -> list[Match]:
        """Return matches scoring strictly above *min_score*, in rank order.

        Raises
        ------
        RetrievalError
            When embedding or querying fails.
        """
        try:
            embedding = (await asyncio.to_thread(self._embedder.embed, [message]))[0]
            matches = await asyncio.to_thread(
                self._index_writer.query, embedding, namespace_id, top_k
            )
        except Exception as exc:
            logger.error("Failed to get context for namespace %s: %s", namespace_id, exc)
            raise RetrievalError(
                "Failed to fetch context", {"namespace_id": namespace_id}
            ) from exc

        qualifying = [m for m in matches if m.score is not None and m.score > min_score]
        logger.debug(
            "Namespace %s: %d of %d matches above %.2f",
            namespace_id,
            len(qualifying),
            len(matches),
            min_score,
        )
        return qualifying

    async def assemble_context_text(
        self,
        message: str,
        namespace_id: str,
        *,
        max_characters: int = settings.context_max_characters,
        min_score: float = settings.context_min_score,
        top_k: int = settings.context_top_k,
    ) -> str:
        """Return the qualifying matches as one context string.

        Each match is rendered as ``REFERENCE URL: <url> CONTENT: <text>``;
        the result is hard-truncated to *max_characters*.  No matches yields
        an empty string.
        """
        matches = await self.raw_matches(message, namespace_id, min_score=min_score, top_k=top_k)
        return render_context(matches, max_characters)
