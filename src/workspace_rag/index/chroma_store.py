"""Chroma implementation of the vector-index abstraction.

Chroma has no namespaces, so each namespace maps to its own collection
named ``"{prefix}-{namespace}"``.  Collections use cosine distance and
scores are reported as cosine similarity (``1 - distance``).
"""

from __future__ import annotations

import logging
from typing import Any

from workspace_rag.config import settings
from workspace_rag.index.base import VectorIndexBase
from workspace_rag.models import VectorRecord

logger = logging.getLogger(__name__)

DISTANCE_METRIC = "cosine"


class ChromaVectorIndex(VectorIndexBase):
    """Chroma-backed vector index.

    Parameters
    ----------
    client:
        A ``chromadb`` client.  When *None*, an ``HttpClient`` is created
        for *host* / *port*.
    collection_prefix:
        Prefix joined to every namespace to form the collection name.
    """

    def __init__(
        self,
        client: Any = None,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        collection_prefix: str = settings.chroma_collection_prefix,
    ) -> None:
        if client is None:
            import chromadb

            client = chromadb.HttpClient(host=host, port=port)
        self._client = client
        self.collection_prefix = collection_prefix

    def collection_name(self, namespace: str) -> str:
        return f"{self.collection_prefix}-{namespace}"

    def _collection(self, namespace: str) -> Any:
        return self._client.get_or_create_collection(
            name=self.collection_name(namespace),
            metadata={"hnsw:space": DISTANCE_METRIC},
        )

    # -- VectorIndexBase overrides --------------------------------------------

    def upsert(self, records: list[VectorRecord], namespace: str) -> None:
        if not records:
            return
        self._collection(namespace).upsert(
            ids=[r.id for r in records],
            embeddings=[r.embedding for r in records],
            metadatas=[r.metadata for r in records],
        )
        logger.debug("Upserted %d vectors into %s", len(records), self.collection_name(namespace))

    def query(self, embedding: list[float], *, top_k: int, namespace: str) -> list[dict[str, Any]]:
        collection = self._collection(namespace)
        if collection.count() == 0:
            return []

        results = collection.query(
            query_embeddings=[embedding],
            n_results=top_k,
            include=["metadatas", "distances"],
        )

        ids = results.get("ids", [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        return [
            {"id": hit_id, "score": 1.0 - dist, "metadata": meta or {}}
            for hit_id, meta, dist in zip(ids, metas, distances)
        ]

    def list_paginated(
        self,
        *,
        prefix: str,
        limit: int,
        namespace: str,
        pagination_token: str | None = None,
    ) -> tuple[list[str], str | None]:
        # Chroma cannot filter ids by prefix, so match client-side and page by offset.
        listing = self._collection(namespace).get(include=[])
        matching = sorted(i for i in listing.get("ids", []) if i.startswith(prefix))

        offset = int(pagination_token) if pagination_token else 0
        page = matching[offset : offset + limit]
        next_offset = offset + len(page)
        next_token = str(next_offset) if next_offset < len(matching) else None
        return page, next_token

    def delete_many(self, ids: list[str], namespace: str) -> None:
        if not ids:
            return
        self._collection(namespace).delete(ids=ids)

    def delete_all(self, namespace: str) -> None:
        name = self.collection_name(namespace)
        # get_or_create first so deleting an unknown namespace is a no-op.
        self._collection(namespace)
        self._client.delete_collection(name=name)
        logger.info("Deleted collection %s", name)

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
