"""Ingestion pipeline: uploaded files to stored documents and chunks.

For every uploaded file::

    raw bytes ─► extract_text ─┬─► summarize_text ─────────────► Document
                               └─► chunk_text ─► embed_text ───► Chunk × n
                                                                   │
                                              DocumentStoreBase.append

Files are processed independently.  A file whose records cannot be built
is logged and reported in :attr:`IngestionReport.failed`; the rest of the
batch continues.  Store write failures are not isolated: they propagate as
:class:`~doc_intel.exceptions.PersistenceError`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from doc_intel.config import settings
from doc_intel.exceptions import InvalidRequestError, PersistenceError
from doc_intel.ingestion.chunker import chunk_text
from doc_intel.ingestion.embedder import HashEmbeddings
from doc_intel.ingestion.loader import extract_text
from doc_intel.ingestion.summarizer import summarize_text
from doc_intel.retrieval.base import DocumentStoreBase
from doc_intel.retrieval.models import (
    Chunk,
    Document,
    FileFailure,
    IngestedDocument,
    IngestionReport,
    UploadedFile,
    new_id,
    utcnow,
)

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Turn uploaded files into embedded, stored records.

    Parameters
    ----------
    store:
        Destination store.  When ``None`` records are built and returned
        but not persisted.
    upload_dir:
        Directory receiving a copy of each file's raw bytes.  Nothing is
        written when ``None``.
    embeddings:
        Chunk embedder; must match the one used for queries.
    chunk_size, chunk_overlap:
        Sliding-window parameters forwarded to :func:`chunk_text`.
    """

    def __init__(
        self,
        store: DocumentStoreBase | None = None,
        *,
        upload_dir: str | Path | None = None,
        embeddings: HashEmbeddings | None = None,
        chunk_size: int = settings.chunk_size,
        chunk_overlap: int = settings.chunk_overlap,
    ) -> None:
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
            )
        self._store = store
        self._upload_dir = Path(upload_dir) if upload_dir is not None else None
        self._embeddings = embeddings or HashEmbeddings()
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    # -- public API -----------------------------------------------------------

    def ingest(self, uploader_name: str, files: Sequence[UploadedFile]) -> IngestionReport:
        """Build and store records for every file in *files*.

        Returns
        -------
        IngestionReport
            ``processed`` in input order, plus one ``failed`` entry per file
            whose records could not be built.

        Raises
        ------
        InvalidRequestError
            If *uploader_name* is blank or *files* is empty.
        PersistenceError
            If the store cannot persist a document.  The raw copy of that
            file is removed; files appended before the failure stay stored.
        """
        if not uploader_name or not uploader_name.strip():
            raise InvalidRequestError("Missing uploader name")
        if not files:
            raise InvalidRequestError("No files to ingest")

        report = IngestionReport()
        for file in files:
            try:
                ingested = self.build_records(uploader_name, file)
            except Exception as exc:
                logger.exception("Failed to ingest %s", file.name)
                report.failed.append(FileFailure(filename=file.name, error=str(exc)))
                continue

            if self._store is not None:
                try:
                    self._store.append(ingested.document, ingested.chunks)
                except PersistenceError:
                    if self._upload_dir is not None:
                        (self._upload_dir / ingested.document.storage_path).unlink(missing_ok=True)
                    raise
            report.processed.append(ingested)

        logger.info(
            "Ingested %d file(s) for %s, %d failed",
            len(report.processed),
            uploader_name,
            len(report.failed),
        )
        return report

    def build_records(self, uploader_name: str, file: UploadedFile) -> IngestedDocument:
        """Build the :class:`Document` and its chunks for one upload."""
        document_id = new_id()
        # Only the base name is kept so uploads cannot escape upload_dir.
        storage_path = f"{document_id}-{Path(file.name).name}"

        text = extract_text(file.content, file.type)
        windows = chunk_text(text, chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap)
        embeddings = self._embeddings.embed_documents(windows)

        document = Document(
            id=document_id,
            filename=file.name,
            file_type=file.type or "unknown",
            file_size=file.size,
            uploader_name=uploader_name,
            summary=summarize_text(text),
            uploaded_at=utcnow(),
            storage_path=storage_path,
        )
        chunks = [
            Chunk(document_id=document_id, chunk_index=i, content=window, embedding=vector)
            for i, (window, vector) in enumerate(zip(windows, embeddings))
        ]
        if self._upload_dir is not None:
            self._save_raw(self._upload_dir, storage_path, file.content)
        logger.debug("Built %d chunk(s) for %s", len(chunks), file.name)
        return IngestedDocument(document=document, chunks=chunks)

    # -- internals ------------------------------------------------------------

    @staticmethod
    def _save_raw(upload_dir: Path, storage_path: str, content: bytes) -> None:
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / storage_path).write_bytes(content)
