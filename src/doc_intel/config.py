"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Root directory for persisted state")
    db_filename: str = Field(default="rag-db.json", description="Name of the JSON snapshot file")
    upload_dirname: str = Field(
        default="uploads",
        description="Sub-directory of data_dir that receives the raw uploaded bytes",
    )

    # Chunking
    chunk_size: int = 800
    chunk_overlap: int = 120

    # Retrieval
    search_limit: int = Field(default=8, description="Chunk matches fetched per query")
    max_ranked_documents: int = Field(default=5, description="Documents kept after aggregation")
    highlight_chars: int = 280

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    @property
    def upload_dir(self) -> Path:
        return self.data_dir / self.upload_dirname


# Singleton: import `settings` wherever needed.
settings = Settings()
