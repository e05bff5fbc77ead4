"""Composition root — build the collaborators from settings and wire them."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from workspace_rag.config import Settings, settings
from workspace_rag.index.writer import IndexWriter
from workspace_rag.ingestion.embedder import EmbeddingClient
from workspace_rag.ingestion.orchestrator import IngestionOrchestrator
from workspace_rag.retrieval.engine import RetrievalEngine
from workspace_rag.storage.base import BlobStorage

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Explicitly constructed dependencies shared by the HTTP layer."""

    storage: BlobStorage
    index_writer: IndexWriter
    orchestrator: IngestionOrchestrator
    retrieval: RetrievalEngine

    def close(self) -> None:
        self.orchestrator.close()


def build_services(cfg: Settings = settings) -> Services:
    """Create the default Chroma / HuggingFace / local-disk stack."""
    from workspace_rag.index.chroma_store import ChromaVectorIndex
    from workspace_rag.storage.local import LocalBlobStorage

    logger.info(
        "Building services: chroma=%s:%d embedding_model=%s",
        cfg.chroma_host,
        cfg.chroma_port,
        cfg.embedding_model,
    )
    storage = LocalBlobStorage(cfg.upload_dir, cfg.public_base_url)
    embedder = EmbeddingClient.from_settings(cfg)
    index_writer = IndexWriter(
        ChromaVectorIndex(
            host=cfg.chroma_host,
            port=cfg.chroma_port,
            collection_prefix=cfg.chroma_collection_prefix,
        )
    )
    orchestrator = IngestionOrchestrator(
        storage,
        embedder,
        index_writer,
        max_workers=cfg.ingest_max_workers,
        upsert_max_attempts=cfg.upsert_max_attempts,
        max_chunk_size=cfg.max_chunk_size,
        min_chunk_size=cfg.min_chunk_size,
    )
    return Services(
        storage=storage,
        index_writer=index_writer,
        orchestrator=orchestrator,
        retrieval=RetrievalEngine(embedder, index_writer),
    )
