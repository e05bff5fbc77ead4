"""Per-file work unit: parse and chunk one uploaded file.

:func:`prepare_file` is what the orchestrator submits to its process pool.
It takes a picklable :class:`FileJob`, touches no shared state and returns
exactly one value, a :class:`PreparedFile`, or raises.  Embedding happens
back on the orchestrator side, so the provider never crosses a process
boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from workspace_rag.ingestion.chunker import (
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MIN_CHUNK_SIZE,
    ParagraphTextSplitter,
)
from workspace_rag.ingestion.parser import parse_file
from workspace_rag.models import Chunk, Document


@dataclass(frozen=True)
class FileJob:
    """Everything a worker needs to turn one file into chunk texts."""

    document_id: str
    document_url: str
    filename: str
    content_type: str
    data: bytes
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE


@dataclass(frozen=True)
class PreparedFile:
    """Ordered chunk texts of one file, ready for embedding."""

    chunks: list[str]
    word_count: int


def prepare_file(job: FileJob) -> PreparedFile:
    """Parse and chunk ``job``."""
    parsed = parse_file(job.data, job.content_type, job.filename)
    splitter = ParagraphTextSplitter(
        max_chunk_size=job.max_chunk_size, min_chunk_size=job.min_chunk_size
    )
    return PreparedFile(
        chunks=splitter.split_text(parsed.document_content),
        word_count=parsed.word_count,
    )


def build_document(
    document_id: str,
    document_url: str,
    chunks: list[str],
    embeddings: list[list[float]],
) -> Document:
    """Pair chunk texts with their vectors by position."""
    return Document(
        document_id=document_id,
        document_url=document_url,
        chunks=[
            Chunk(id=Chunk.make_id(document_id, i), embedding=vector, text=text)
            for i, (text, vector) in enumerate(zip(chunks, embeddings, strict=True))
        ],
    )
