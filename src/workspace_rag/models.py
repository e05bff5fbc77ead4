"""Domain models shared by the ingestion and retrieval layers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """A bounded slice of document text paired with its embedding.

    Attributes
    ----------
    id:
        ``"{document_id}:{index}"`` — unique within the parent document and
        ordered by the embedded index.
    embedding:
        Fixed-dimension vector produced by the embedding provider.
    text:
        The chunk text.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    embedding: list[float]
    text: str

    @staticmethod
    def make_id(document_id: str, index: int) -> str:
        return f"{document_id}:{index}"

    @property
    def index(self) -> int:
        """Ordinal position of the chunk within its document."""
        return int(self.id.rsplit(":", 1)[1])


class Document(BaseModel):
    """An uploaded file after parsing, chunking and embedding."""

    document_id: str
    document_url: str
    chunks: list[Chunk] = Field(default_factory=list)


class MatchMetadata(BaseModel):
    """Metadata stored alongside every chunk vector."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    reference_url: str = Field(default="", alias="referenceURL")


class Match(BaseModel):
    """A query-time hit returned by the vector index."""

    id: str
    score: float | None = None
    metadata: MatchMetadata = Field(default_factory=MatchMetadata)

    def render(self) -> str:
        """Return the ``REFERENCE URL: … CONTENT: …`` form used in context strings."""
        return f"REFERENCE URL: {self.metadata.reference_url} CONTENT: {self.metadata.text}"


class VectorRecord(BaseModel):
    """Record shape exchanged with a vector-index backend."""

    id: str
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChunkPage(BaseModel):
    """One page of chunk ids from :meth:`IndexWriter.list_chunks`.

    ``pagination_token`` is ``None`` once the listing is exhausted.
    """

    chunk_ids: list[str] = Field(default_factory=list)
    pagination_token: str | None = None


class ParsedFile(BaseModel):
    """Text extracted from an uploaded file."""

    document_content: str
    word_count: int


class UploadedFile(BaseModel):
    """Raw file bytes as received from the upload boundary."""

    filename: str
    content_type: str = "application/octet-stream"
    data: bytes


class FileDetail(BaseModel):
    """A stored file as listed by the blob-storage backend."""

    document_id: str
    name: str
    url: str


class DocumentResponse(BaseModel):
    """Summary of one successfully ingested document."""

    document_id: str
    document_url: str
    filename: str
    chunk_count: int


class FileError(BaseModel):
    """Failure recorded against a single file in an upload batch."""

    filename: str
    message: str


class IngestionResult(BaseModel):
    """Outcome of one upload batch.

    Successful documents and per-file errors are reported side by side; a
    failing file never hides its siblings.
    """

    namespace_id: str
    document_responses: list[DocumentResponse] = Field(default_factory=list)
    errors: list[FileError] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors
