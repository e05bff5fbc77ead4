"""Ingestion orchestrator — fan out an upload batch across files.

Each file runs its own pipeline::

    save raw bytes → worker (parse → chunk) → embed → upsert (with retry)

Pipelines run concurrently on the event loop.  The CPU-heavy worker step is
submitted to a bounded process pool and its future is the only channel back;
embedding and index calls run in threads off the loop.
A failure anywhere in one file's pipeline is recorded against that file and
never cancels its siblings.

Usage::

    orchestrator = IngestionOrchestrator(storage, embedder, writer)
    result = await orchestrator.ingest(files, new_workspace=True)
    if not result.succeeded:
        for err in result.errors:
            print(err.filename, err.message)
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from concurrent.futures import Executor, ProcessPoolExecutor

from workspace_rag.config import settings
from workspace_rag.errors import RateLimitedError, ValidationError, WorkspaceRagError
from workspace_rag.index.writer import IndexWriter
from workspace_rag.ingestion.embedder import EmbeddingClient
from workspace_rag.ingestion.worker import FileJob, build_document, prepare_file
from workspace_rag.models import (
    Document,
    DocumentResponse,
    FileDetail,
    FileError,
    IngestionResult,
    UploadedFile,
)
from workspace_rag.storage.base import BlobStorage, build_file_key

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_LIST_PAGE_SIZE = 100


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed *attempt* (1-based): 1, 2, 4, 8, …"""
    return float(2 ** (attempt - 1))


class IngestionOrchestrator:
    """Drive upload batches through storage, workers and the index writer.

    Parameters
    ----------
    storage:
        Blob storage for the raw uploads.
    embedder:
        Embedding client for the chunk texts each worker returns.
    index_writer:
        Destination for finished documents.
    executor:
        Executor running the per-file workers.  When *None*, a
        ``ProcessPoolExecutor`` with *max_workers* processes is created and
        owned by this orchestrator (see :meth:`close`).
    upsert_max_attempts:
        Total upsert attempts for a rate-limited document.
    sleep:
        Coroutine used between retries; replaced in tests.
    """

    def __init__(
        self,
        storage: BlobStorage,
        embedder: EmbeddingClient,
        index_writer: IndexWriter,
        *,
        executor: Executor | None = None,
        max_workers: int = settings.ingest_max_workers,
        upsert_max_attempts: int = settings.upsert_max_attempts,
        max_chunk_size: int = settings.max_chunk_size,
        min_chunk_size: int = settings.min_chunk_size,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._storage = storage
        self._embedder = embedder
        self._index_writer = index_writer
        self._owns_executor = executor is None
        self._executor = executor or ProcessPoolExecutor(max_workers=max_workers)
        self.upsert_max_attempts = upsert_max_attempts
        self.max_chunk_size = max_chunk_size
        self.min_chunk_size = min_chunk_size
        self._sleep = sleep

    def close(self) -> None:
        """Shut down the worker pool if this orchestrator created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # -- ingestion ------------------------------------------------------------

    async def ingest(
        self,
        files: Sequence[UploadedFile],
        namespace_id: str | None = None,
        *,
        new_workspace: bool = False,
    ) -> IngestionResult:
        """Ingest *files* into *namespace_id* (or a fresh one).

        Raises
        ------
        ValidationError
            Before any processing, when no files are given or no namespace
            is given for an existing workspace.
        """
        if new_workspace:
            namespace_id = str(uuid.uuid4())
        elif not namespace_id:
            raise ValidationError("Missing required field: namespaceId", field="namespaceId")
        if not files:
            raise ValidationError("No files uploaded", field="files")

        logger.info("Ingesting %d files into namespace %s", len(files), namespace_id)
        outcomes = await asyncio.gather(
            *(self._ingest_file(f, namespace_id) for f in files),
            return_exceptions=True,
        )

        result = IngestionResult(namespace_id=namespace_id)
        for file, outcome in zip(files, outcomes):
            if isinstance(outcome, DocumentResponse):
                result.document_responses.append(outcome)
            elif isinstance(outcome, Exception):
                message = outcome.message if isinstance(outcome, WorkspaceRagError) else str(outcome)
                result.errors.append(FileError(filename=file.filename, message=message))
            else:
                # CancelledError and other BaseExceptions are not per-file failures.
                raise outcome

        logger.info(
            "Namespace %s: %d documents ingested, %d failed",
            namespace_id,
            len(result.document_responses),
            len(result.errors),
        )
        return result

    async def _ingest_file(self, file: UploadedFile, namespace_id: str) -> DocumentResponse:
        document_id = str(uuid.uuid4())
        key = build_file_key(namespace_id, document_id, file.filename)
        document_url = self._storage.construct_file_url(key)

        try:
            await asyncio.to_thread(self._storage.save_file, file, key)

            job = FileJob(
                document_id=document_id,
                document_url=document_url,
                filename=file.filename,
                content_type=file.content_type,
                data=file.data,
                max_chunk_size=self.max_chunk_size,
                min_chunk_size=self.min_chunk_size,
            )
            loop = asyncio.get_running_loop()
            prepared = await loop.run_in_executor(self._executor, prepare_file, job)
            embeddings = await asyncio.to_thread(self._embedder.embed, prepared.chunks)
            document = build_document(document_id, document_url, prepared.chunks, embeddings)
            logger.info(
                "Processed %s → %d chunks (%d words)",
                file.filename,
                len(document.chunks),
                prepared.word_count,
            )

            await self.safe_upsert(document, namespace_id)
        except Exception:
            logger.error("Failed to ingest %s", file.filename, exc_info=True)
            raise

        return DocumentResponse(
            document_id=document.document_id,
            document_url=document.document_url,
            filename=file.filename,
            chunk_count=len(document.chunks),
        )

    async def safe_upsert(self, document: Document, namespace_id: str) -> None:
        """Upsert *document*, backing off while the index is rate limiting.

        Waits 1, 2, 4, 8 … seconds between attempts, for at most
        ``upsert_max_attempts`` attempts.  The last rate-limit error is
        re-raised once attempts run out; any other error is raised at once.
        """
        attempt = 1
        while True:
            try:
                await asyncio.to_thread(self._index_writer.upsert, document, namespace_id)
                return
            except RateLimitedError:
                if attempt >= self.upsert_max_attempts:
                    logger.error(
                        "Giving up on document %s after %d rate-limited attempts",
                        document.document_id,
                        attempt,
                    )
                    raise
                wait = backoff_delay(attempt)
                logger.warning(
                    "Rate limited upserting %s (attempt %d/%d); waiting %.0f seconds before retrying",
                    document.document_id,
                    attempt,
                    self.upsert_max_attempts,
                    wait,
                )
                await self._sleep(wait)
                attempt += 1

    # -- workspace management -------------------------------------------------

    async def list_files(self, namespace_id: str) -> list[FileDetail]:
        return await asyncio.to_thread(self._storage.list_files_in_namespace, namespace_id)

    async def delete_document(
        self,
        document_id: str,
        namespace_id: str,
        *,
        page_size: int = DEFAULT_LIST_PAGE_SIZE,
    ) -> int:
        """Delete every chunk of *document_id*; returns the number removed."""
        # Listing pages by offset; gather every id before deleting any.
        chunk_ids: list[str] = []
        token: str | None = None
        while True:
            page = await asyncio.to_thread(
                self._index_writer.list_chunks, document_id, namespace_id, page_size, token
            )
            chunk_ids.extend(page.chunk_ids)
            token = page.pagination_token
            if token is None:
                break

        for start in range(0, len(chunk_ids), page_size):
            await asyncio.to_thread(
                self._index_writer.delete_chunks, chunk_ids[start : start + page_size], namespace_id
            )
        logger.info("Deleted %d chunks of document %s", len(chunk_ids), document_id)
        return len(chunk_ids)

    async def delete_workspace(self, namespace_id: str) -> None:
        """Delete a workspace: index first, then stored files.

        Index deletion errors propagate.  File cleanup runs afterwards and
        its failure is only logged; the index deletion stands either way.
        """
        await asyncio.to_thread(self._index_writer.delete_namespace, namespace_id)
        try:
            await asyncio.to_thread(self._storage.delete_workspace_files, namespace_id)
        except Exception:
            logger.error("Failed to delete stored files for namespace %s", namespace_id, exc_info=True)
        logger.info("Workspace %s deleted", namespace_id)
