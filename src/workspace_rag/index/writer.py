"""Index writer — namespace-scoped document operations on a vector index."""

from __future__ import annotations

import logging

from workspace_rag.errors import (
    IndexQueryError,
    IndexWriteError,
    RateLimitedError,
    ValidationError,
)
from workspace_rag.index.base import VectorIndexBase
from workspace_rag.models import ChunkPage, Document, Match, VectorRecord

logger = logging.getLogger(__name__)

RATE_LIMIT_SIGNATURE = "rate limit exceeded"


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return ``True`` when *exc* looks like a provider rate-limit rejection."""
    if getattr(exc, "status_code", None) == 429:
        return True
    return RATE_LIMIT_SIGNATURE in str(exc).lower()


def document_to_records(document: Document) -> list[VectorRecord]:
    """Map each chunk to ``{id, embedding, metadata: {text, referenceURL}}``."""
    return [
        VectorRecord(
            id=chunk.id,
            embedding=chunk.embedding,
            metadata={"text": chunk.text, "referenceURL": document.document_url},
        )
        for chunk in document.chunks
    ]


class IndexWriter:
    """Translate domain documents to vector records and back.

    Backend exceptions are wrapped in the package error taxonomy: writes
    raise :class:`IndexWriteError` (or :class:`RateLimitedError`), queries
    raise :class:`IndexQueryError`.

    Parameters
    ----------
    index:
        A concrete vector-index backend.
    """

    def __init__(self, index: VectorIndexBase) -> None:
        self._index = index

    @property
    def index(self) -> VectorIndexBase:
        return self._index

    def upsert(self, document: Document, namespace_id: str) -> None:
        """Write all chunks of *document* in one batch; re-upserts overwrite by id."""
        records = document_to_records(document)
        try:
            self._index.upsert(records, namespace=namespace_id)
        except Exception as exc:
            if is_rate_limit_error(exc):
                raise RateLimitedError(
                    f"Rate limit exceeded upserting document {document.document_id}",
                    {"document_id": document.document_id, "namespace_id": namespace_id},
                ) from exc
            raise IndexWriteError(
                f"Failed to upsert document {document.document_id}: {exc}",
                {"document_id": document.document_id, "namespace_id": namespace_id},
            ) from exc
        logger.info(
            "Upserted document %s (%d chunks) into namespace %s",
            document.document_id,
            len(records),
            namespace_id,
        )

    def query(self, embedding: list[float], namespace_id: str, top_k: int) -> list[Match]:
        """Return the *top_k* nearest chunks in *namespace_id*, best first."""
        try:
            hits = self._index.query(embedding, top_k=top_k, namespace=namespace_id)
        except Exception as exc:
            raise IndexQueryError(
                f"Error querying embeddings: {exc}", {"namespace_id": namespace_id}
            ) from exc
        return [Match.model_validate(hit) for hit in hits]

    def list_chunks(
        self,
        document_id: str,
        namespace_id: str,
        limit: int,
        pagination_token: str | None = None,
    ) -> ChunkPage:
        """List chunk ids of *document_id*, one page at a time."""
        if limit < 1:
            raise ValidationError("limit must be a positive integer", field="limit")
        try:
            ids, next_token = self._index.list_paginated(
                prefix=f"{document_id}:",
                limit=limit,
                namespace=namespace_id,
                pagination_token=pagination_token,
            )
        except Exception as exc:
            logger.error("Failed to list document chunks for document %s: %s", document_id, exc)
            raise IndexQueryError(
                f"Failed to list chunks for document {document_id}: {exc}",
                {"document_id": document_id, "namespace_id": namespace_id},
            ) from exc
        return ChunkPage(chunk_ids=ids, pagination_token=next_token)

    def delete_chunks(self, chunk_ids: list[str], namespace_id: str) -> None:
        logger.info("Deleting %d chunks from namespace %s", len(chunk_ids), namespace_id)
        try:
            self._index.delete_many(chunk_ids, namespace=namespace_id)
        except Exception as exc:
            raise IndexWriteError(
                f"Failed to delete chunks: {exc}", {"namespace_id": namespace_id}
            ) from exc

    def delete_namespace(self, namespace_id: str) -> None:
        """Remove every chunk in *namespace_id*."""
        logger.info("Deleting namespace %s", namespace_id)
        try:
            self._index.delete_all(namespace=namespace_id)
        except Exception as exc:
            raise IndexWriteError(
                f"Failed to delete namespace {namespace_id}: {exc}",
                {"namespace_id": namespace_id},
            ) from exc
