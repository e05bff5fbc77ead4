"""Request / response schemas for the HTTP layer (camelCase on the wire)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from workspace_rag.models import DocumentResponse, FileError


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DocumentResponseOut(_CamelModel):
    document_id: str = Field(alias="documentId")
    document_url: str = Field(alias="documentUrl")
    filename: str
    chunk_count: int = Field(alias="chunkCount")

    @classmethod
    def from_domain(cls, doc: DocumentResponse) -> DocumentResponseOut:
        return cls(**doc.model_dump())


class FileErrorOut(_CamelModel):
    filename: str
    message: str

    @classmethod
    def from_domain(cls, err: FileError) -> FileErrorOut:
        return cls(**err.model_dump())


class UploadResponse(_CamelModel):
    """Body of ``POST /documents``; ``errors`` is present only on partial failure."""

    message: str
    namespace_id: str = Field(alias="namespaceId")
    document_responses: list[DocumentResponseOut] = Field(alias="documentResponses")
    errors: list[FileErrorOut] | None = None


class FileDetailOut(_CamelModel):
    document_id: str = Field(alias="documentId")
    name: str
    url: str


class ContextRequest(_CamelModel):
    """Incoming chat transcript for context retrieval."""

    namespace_id: str | None = Field(default=None, alias="namespaceId")
    messages: list[dict[str, Any] | str] | None = None


class ContextResponse(BaseModel):
    """Latest message and the context assembled for it."""

    query: Any
    context: str


class MessageResponse(BaseModel):
    message: str
