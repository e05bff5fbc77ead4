"""
Index — namespace-scoped vector-index access.

Public surface
--------------
- :class:`IndexWriter` — document-level upsert / query / list / delete.
- :class:`VectorIndexBase` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorIndex` — default Chroma backend.
"""

from workspace_rag.index.base import VectorIndexBase
from workspace_rag.index.writer import IndexWriter, document_to_records, is_rate_limit_error

__all__ = [
    "ChromaVectorIndex",
    "IndexWriter",
    "VectorIndexBase",
    "document_to_records",
    "is_rate_limit_error",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorIndex to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorIndex":
        from workspace_rag.index.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
