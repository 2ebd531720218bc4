"""JSON-file implementation of the document-store abstraction.

The whole store is kept in memory and persisted as a single snapshot::

    {
      "documents": [{id, filename, file_type, file_size, uploader_name,
                     summary, uploaded_at, storage_path}, ...],
      "chunks":    [{id, document_id, chunk_index, content,
                     embedding: [384 floats]}, ...]
    }

Every mutation rewrites the full snapshot through a temporary file that
atomically replaces the previous one, so a crash never leaves a document
persisted without its chunks.  Search is an exhaustive cosine scan.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from doc_intel.config import settings
from doc_intel.exceptions import PersistenceError
from doc_intel.retrieval.base import DocumentStoreBase, cosine_similarity, recency_cutoff
from doc_intel.retrieval.models import Chunk, Document, Match

logger = logging.getLogger(__name__)


class JsonDocumentStore(DocumentStoreBase):
    """Document store persisted as one JSON snapshot on local disk.

    Parameters
    ----------
    path:
        Location of the snapshot file.  Parent directories are created on
        demand.  When the file does not exist an empty snapshot is written
        immediately.

    All public operations run under one re-entrant lock, so a single
    instance can be shared by the threads of a web server.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else settings.db_path
        self._lock = threading.RLock()
        self._documents: list[Document] = []
        self._chunks: list[Chunk] = []
        self._open()

    # -- lifecycle ------------------------------------------------------------

    def _open(self) -> None:
        with self._lock:
            if not self.path.exists():
                logger.info("Initialising empty document store at %s", self.path)
                self._write_snapshot()
                return

            try:
                raw = self.path.read_text(encoding="utf-8")
                state = json.loads(raw) if raw.strip() else {}
                if not isinstance(state, dict):
                    raise ValueError(f"expected a JSON object, got {type(state).__name__}")
                self._documents = [Document.model_validate(d) for d in state.get("documents", [])]
                self._chunks = [Chunk.model_validate(c) for c in state.get("chunks", [])]
            except (OSError, ValueError) as exc:
                raise PersistenceError(f"Could not load document store from {self.path}") from exc

            logger.info(
                "Loaded %d document(s) and %d chunk(s) from %s",
                len(self._documents),
                len(self._chunks),
                self.path,
            )

    def close(self) -> None:
        """Flush the current state to disk."""
        with self._lock:
            self._write_snapshot()

    def __enter__(self) -> JsonDocumentStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- DocumentStoreBase overrides ------------------------------------------

    def append(self, document: Document, chunks: Sequence[Chunk]) -> None:
        chunks = list(chunks)
        with self._lock:
            doc_count = len(self._documents)
            chunk_count = len(self._chunks)
            self._documents.append(document)
            self._chunks.extend(chunks)
            try:
                self._write_snapshot()
            except PersistenceError:
                del self._documents[doc_count:]
                del self._chunks[chunk_count:]
                raise
        logger.info("Stored document %s (%s) with %d chunk(s)", document.id, document.filename, len(chunks))

    def list_recent(self, days: int | None = None) -> list[Document]:
        cutoff = recency_cutoff(days)
        with self._lock:
            documents = [d for d in self._documents if cutoff is None or d.uploaded_at >= cutoff]
        # sorted() is stable, so equal timestamps keep insertion order.
        return sorted(documents, key=lambda d: d.uploaded_at, reverse=True)

    def search(
        self,
        query_embedding: Sequence[float],
        *,
        limit: int = 8,
        recency_days: int | None = None,
    ) -> list[Match]:
        cutoff = recency_cutoff(recency_days)
        with self._lock:
            documents_by_id = {d.id: d for d in self._documents}
            scored: list[Match] = []
            for chunk in self._chunks:
                document = documents_by_id.get(chunk.document_id)
                if document is None:
                    continue
                if cutoff is not None and document.uploaded_at < cutoff:
                    continue
                score = cosine_similarity(query_embedding, chunk.embedding)
                scored.append(Match(chunk=chunk, document=document, score=score))

        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[: max(limit, 0)]

    def health_check(self) -> bool:
        directory = self.path.parent
        return directory.is_dir() and os.access(directory, os.W_OK)

    # -- helpers --------------------------------------------------------------

    @property
    def document_count(self) -> int:
        with self._lock:
            return len(self._documents)

    @property
    def chunk_count(self) -> int:
        with self._lock:
            return len(self._chunks)

    def get_document(self, document_id: str) -> Document | None:
        with self._lock:
            for document in self._documents:
                if document.id == document_id:
                    return document
        return None

    def chunks_for(self, document_id: str) -> list[Chunk]:
        """Return the chunks of *document_id* ordered by ``chunk_index``."""
        with self._lock:
            chunks = [c for c in self._chunks if c.document_id == document_id]
        return sorted(chunks, key=lambda c: c.chunk_index)

    # -- internals ------------------------------------------------------------

    def _snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "documents": [d.model_dump(mode="json") for d in self._documents],
            "chunks": [c.model_dump(mode="json") for c in self._chunks],
        }

    def _write_snapshot(self) -> None:
        """Atomically replace the snapshot file with the in-memory state."""
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                json.dump(self._snapshot(), fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to persist document store to %s: %s", self.path, exc)
            raise PersistenceError(f"Could not write document store to {self.path}") from exc
