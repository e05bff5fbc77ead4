"""Abstract base class for namespace-scoped vector-index backends.

Adding a new backend (Pinecone, Qdrant …) only requires subclassing
:class:`VectorIndexBase` and implementing the abstract methods.  The
:class:`~workspace_rag.index.writer.IndexWriter` on top of it is
backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from workspace_rag.models import VectorRecord


class VectorIndexBase(ABC):
    """Backend-agnostic vector-index interface.

    Every operation is scoped to a namespace.  A namespace comes into
    existence with its first upsert.
    """

    @abstractmethod
    def upsert(self, records: list[VectorRecord], namespace: str) -> None:
        """Insert or overwrite *records* by id in one batch."""
        ...

    @abstractmethod
    def query(self, embedding: list[float], *, top_k: int, namespace: str) -> list[dict[str, Any]]:
        """Return the *top_k* nearest records, best first.

        Each result dict **must** contain:

        * ``"id"`` – record identifier
        * ``"score"`` – similarity score (higher = more similar)
        * ``"metadata"`` – the metadata dict stored with the record
        """
        ...

    @abstractmethod
    def list_paginated(
        self,
        *,
        prefix: str,
        limit: int,
        namespace: str,
        pagination_token: str | None = None,
    ) -> tuple[list[str], str | None]:
        """Return ids starting with *prefix* and the token for the next page.

        The token is ``None`` when no further ids remain.
        """
        ...

    @abstractmethod
    def delete_many(self, ids: list[str], namespace: str) -> None:
        """Delete records by id."""
        ...

    @abstractmethod
    def delete_all(self, namespace: str) -> None:
        """Delete every record in *namespace*."""
        ...

    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        return True
