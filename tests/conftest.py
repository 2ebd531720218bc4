"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from doc_intel.ingestion.embedder import embed_text
from doc_intel.retrieval.base import DocumentStoreBase
from doc_intel.retrieval.json_store import JsonDocumentStore
from doc_intel.retrieval.models import Chunk, Document, Match


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "threaded: marks tests that drive the store from several threads")


def make_document(filename: str = "report.txt", *, days_ago: float = 0, **overrides) -> Document:
    """Build a :class:`Document` uploaded *days_ago* days before now."""
    fields = {
        "filename": filename,
        "file_type": "text/plain",
        "file_size": 100,
        "uploader_name": "alice",
        "summary": f"Summary of {filename}.",
        "uploaded_at": datetime.now(timezone.utc) - timedelta(days=days_ago),
        "storage_path": f"x-{filename}",
    }
    fields.update(overrides)
    return Document(**fields)


def make_chunks(document: Document, *contents: str) -> list[Chunk]:
    """Build embedded chunks for *document*, one per content string."""
    return [
        Chunk(document_id=document.id, chunk_index=i, content=text, embedding=embed_text(text))
        for i, text in enumerate(contents)
    ]


class FakeDocumentStore(DocumentStoreBase):
    """In-memory fake that returns canned matches."""

    def __init__(self, matches: list[Match] | None = None) -> None:
        self._matches: list[Match] = matches or []
        self.last_limit: int | None = None
        self.last_recency_days: int | None = None

    def append(self, document: Document, chunks: Sequence[Chunk]) -> None:
        raise NotImplementedError

    def list_recent(self, days: int | None = None) -> list[Document]:
        return []

    def search(
        self,
        query_embedding: Sequence[float],
        *,
        limit: int = 8,
        recency_days: int | None = None,
    ) -> list[Match]:
        self.last_limit = limit
        self.last_recency_days = recency_days
        return self._matches[:limit]

    def health_check(self) -> bool:
        return True


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "rag-db.json"


@pytest.fixture()
def store(store_path: Path) -> JsonDocumentStore:
    return JsonDocumentStore(store_path)
