"""Local-disk blob storage."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from workspace_rag.config import settings
from workspace_rag.errors import StorageError
from workspace_rag.models import FileDetail, UploadedFile
from workspace_rag.storage.base import BlobStorage

logger = logging.getLogger(__name__)


class LocalBlobStorage(BlobStorage):
    """Store uploads under ``root/{namespace}/{document}/{filename}``.

    Public URLs point at the HTTP route that serves a document:
    ``{public_base_url}/documents/{namespace}/{document}``.
    """

    def __init__(
        self,
        root: str | Path = settings.upload_dir,
        public_base_url: str = settings.public_base_url,
    ) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, *parts: str) -> Path:
        root = self.root.resolve()
        path = root.joinpath(*parts).resolve()
        if path != root and root not in path.parents:
            raise StorageError(f"Path escapes storage root: {'/'.join(parts)}")
        return path

    def save_file(self, file: UploadedFile, key: str) -> None:
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(file.data)
        except OSError as exc:
            raise StorageError(f"Failed to save {key}: {exc}", {"key": key}) from exc
        logger.debug("Saved %s (%d bytes)", key, len(file.data))

    def construct_file_url(self, key: str) -> str:
        namespace_id, document_id = key.split("/")[:2]
        return f"{self.public_base_url}/documents/{namespace_id}/{document_id}"

    def get_file_path(self, namespace_id: str, document_id: str) -> Path:
        directory = self._resolve(namespace_id, document_id)
        files = sorted(p for p in directory.iterdir() if p.is_file()) if directory.is_dir() else []
        if not files:
            raise StorageError(
                f"No file stored for document {document_id}",
                {"namespace_id": namespace_id, "document_id": document_id},
            )
        return files[0]

    def list_files_in_namespace(self, namespace_id: str) -> list[FileDetail]:
        directory = self._resolve(namespace_id)
        if not directory.is_dir():
            return []
        details: list[FileDetail] = []
        for doc_dir in sorted(p for p in directory.iterdir() if p.is_dir()):
            for path in sorted(p for p in doc_dir.iterdir() if p.is_file()):
                key = f"{namespace_id}/{doc_dir.name}/{path.name}"
                details.append(
                    FileDetail(
                        document_id=doc_dir.name,
                        name=path.name,
                        url=self.construct_file_url(key),
                    )
                )
        return details

    def delete_workspace_files(self, namespace_id: str) -> None:
        directory = self._resolve(namespace_id)
        if directory == self.root.resolve():
            raise StorageError("Refusing to delete the storage root")
        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            logger.info("No stored files for namespace %s", namespace_id)
        except OSError as exc:
            raise StorageError(
                f"Failed to delete files for namespace {namespace_id}: {exc}",
                {"namespace_id": namespace_id},
            ) from exc
