"""
Ingestion — parsing, chunking, embedding and batch upload orchestration.

This module converts raw uploaded files (PDF, plain text, Markdown, …)
into embedded chunks stored in a namespace of the vector index.
"""

from workspace_rag.ingestion.chunker import (
    ParagraphTextSplitter,
    chunk_text_by_paragraphs,
)
from workspace_rag.ingestion.embedder import EmbeddingClient
from workspace_rag.ingestion.orchestrator import IngestionOrchestrator
from workspace_rag.ingestion.parser import parse_file

__all__ = [
    "EmbeddingClient",
    "IngestionOrchestrator",
    "ParagraphTextSplitter",
    "chunk_text_by_paragraphs",
    "parse_file",
]
