"""Abstract blob-storage interface for uploaded source files.

Keys follow ``"{namespace_id}/{document_id}/{filename}"``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from workspace_rag.models import FileDetail, UploadedFile


def build_file_key(namespace_id: str, document_id: str, filename: str) -> str:
    """Return the storage key for *filename*, dropping any directory part."""
    return f"{namespace_id}/{document_id}/{Path(filename).name}"


class BlobStorage(ABC):
    """Where raw uploads live and how they are addressed publicly."""

    @abstractmethod
    def save_file(self, file: UploadedFile, key: str) -> None: ...

    @abstractmethod
    def construct_file_url(self, key: str) -> str: ...

    @abstractmethod
    def get_file_path(self, namespace_id: str, document_id: str) -> Path:
        """Local path of the stored file for *document_id*."""
        ...

    @abstractmethod
    def list_files_in_namespace(self, namespace_id: str) -> list[FileDetail]: ...

    @abstractmethod
    def delete_workspace_files(self, namespace_id: str) -> None: ...
