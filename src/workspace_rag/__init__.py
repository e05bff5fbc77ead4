"""
workspace_rag — per-workspace document ingestion and context retrieval.

Uploaded files are parsed, chunked, embedded and upserted into a
namespace-scoped vector index; at query time the latest chat message is
embedded and the closest chunks are assembled into a bounded context string.
"""

__version__ = "0.1.0"
