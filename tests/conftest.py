"""Shared pytest configuration, in-memory fakes and fixtures."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from workspace_rag.index.base import VectorIndexBase
from workspace_rag.index.writer import IndexWriter
from workspace_rag.ingestion.embedder import EmbeddingClient
from workspace_rag.models import VectorRecord
from workspace_rag.storage.local import LocalBlobStorage

EMBEDDING_DIM = 16


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────


class InMemoryVectorIndex(VectorIndexBase):
    """Dict-backed index with cosine-similarity queries.

    ``upsert_errors`` is a queue of exceptions raised by successive upsert
    calls before they start succeeding.
    """

    def __init__(self) -> None:
        self.namespaces: dict[str, dict[str, VectorRecord]] = {}
        self.upsert_errors: list[Exception] = []
        self.upsert_calls = 0

    def upsert(self, records: list[VectorRecord], namespace: str) -> None:
        self.upsert_calls += 1
        if self.upsert_errors:
            raise self.upsert_errors.pop(0)
        store = self.namespaces.setdefault(namespace, {})
        for record in records:
            store[record.id] = record

    def query(self, embedding: list[float], *, top_k: int, namespace: str) -> list[dict[str, Any]]:
        def cosine(a: list[float], b: list[float]) -> float:
            dot = sum(x * y for x, y in zip(a, b))
            norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
            return dot / norm if norm else 0.0

        hits = [
            {"id": r.id, "score": cosine(embedding, r.embedding), "metadata": r.metadata}
            for r in self.namespaces.get(namespace, {}).values()
        ]
        hits.sort(key=lambda h: h["score"], reverse=True)
        return hits[:top_k]

    def list_paginated(
        self,
        *,
        prefix: str,
        limit: int,
        namespace: str,
        pagination_token: str | None = None,
    ) -> tuple[list[str], str | None]:
        ids = sorted(i for i in self.namespaces.get(namespace, {}) if i.startswith(prefix))
        offset = int(pagination_token) if pagination_token else 0
        page = ids[offset : offset + limit]
        end = offset + len(page)
        return page, (str(end) if end < len(ids) else None)

    def delete_many(self, ids: list[str], namespace: str) -> None:
        store = self.namespaces.get(namespace, {})
        for i in ids:
            store.pop(i, None)

    def delete_all(self, namespace: str) -> None:
        self.namespaces.pop(namespace, None)


class CannedVectorIndex(InMemoryVectorIndex):
    """Returns a fixed hit list from :meth:`query`, ignoring the embedding."""

    def __init__(self, hits: list[dict[str, Any]] | None = None) -> None:
        super().__init__()
        self.hits = hits or []
        self.last_top_k: int | None = None
        self.last_namespace: str | None = None

    def query(self, embedding: list[float], *, top_k: int, namespace: str) -> list[dict[str, Any]]:
        self.last_top_k = top_k
        self.last_namespace = namespace
        return self.hits[:top_k]


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def embedder() -> EmbeddingClient:
    return EmbeddingClient(DeterministicFakeEmbedding(size=EMBEDDING_DIM), dimension=EMBEDDING_DIM)


@pytest.fixture()
def vector_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex()


@pytest.fixture()
def index_writer(vector_index: InMemoryVectorIndex) -> IndexWriter:
    return IndexWriter(vector_index)


@pytest.fixture()
def storage(tmp_path: Path) -> LocalBlobStorage:
    return LocalBlobStorage(tmp_path / "uploads", "http://files.test")


@pytest.fixture()
def long_text() -> str:
    """Roughly 4 800 characters in 15 paragraphs of ~317 characters."""
    paragraph = ("The quick brown fox jumps over the lazy dog. " * 7).strip()
    return "\n\n".join(f"{i}: {paragraph}" for i in range(15))


@pytest.fixture()
def canned_index_factory() -> type[CannedVectorIndex]:
    return CannedVectorIndex
