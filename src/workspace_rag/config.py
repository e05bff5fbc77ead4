"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_dimension: int | None = Field(
        default=None,
        description=(
            "Declared output size of the embedding model. When set, every "
            "vector returned by the provider is checked against it."
        ),
    )

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection_prefix: str = "workspace"

    # Blob storage
    upload_dir: str = "uploads"
    public_base_url: str = "http://localhost:8080"

    # Ingestion
    ingest_max_workers: int = Field(default=4, ge=1)
    upsert_max_attempts: int = Field(default=5, ge=1)
    max_chunk_size: int = 1500
    min_chunk_size: int = 500

    # Retrieval
    context_max_characters: int = 5000
    context_min_score: float = 0.15
    context_top_k: int = 15

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
