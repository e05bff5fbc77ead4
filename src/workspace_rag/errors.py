"""Exception hierarchy for the ingestion and retrieval pipeline.

Every error raised by this package derives from :class:`WorkspaceRagError`
and carries a human-readable ``message`` plus an optional ``details`` dict
with context for logs and API responses.
"""

from __future__ import annotations

from typing import Any


class WorkspaceRagError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(WorkspaceRagError):
    """A request is missing required fields; raised before any processing."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ParseError(WorkspaceRagError):
    """File content could not be extracted."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"Failed to parse {filename}: {reason}", {"filename": filename})
        self.filename = filename
        self.reason = reason

    def __reduce__(self) -> tuple[type[ParseError], tuple[str, str]]:
        # Raised inside worker processes; rebuilt from the constructor arguments.
        return (type(self), (self.filename, self.reason))


class EmbeddingError(WorkspaceRagError):
    """The embedding provider failed or returned misaligned vectors."""


class IndexWriteError(WorkspaceRagError):
    """A write against the vector index failed."""


class RateLimitedError(IndexWriteError):
    """The vector index rejected a write because of rate limiting."""


class IndexQueryError(WorkspaceRagError):
    """A similarity query against the vector index failed."""


class RetrievalError(WorkspaceRagError):
    """Context retrieval failed; no partial context is returned."""


class StorageError(WorkspaceRagError):
    """The blob-storage backend failed to save, list or delete files."""
