"""Unit tests for text extraction and the ingestion pipeline."""

from __future__ import annotations

import math
from pathlib import Path
from unittest.mock import patch

import pytest

from doc_intel.exceptions import InvalidRequestError, PersistenceError
from doc_intel.ingestion.embedder import VECTOR_SIZE
from doc_intel.ingestion.loader import extract_text, is_plain_text
from doc_intel.ingestion.pipeline import IngestionPipeline
from doc_intel.retrieval.json_store import JsonDocumentStore
from doc_intel.retrieval.models import UploadedFile


def _upload(name: str, text: str, file_type: str = "text/plain") -> UploadedFile:
    content = text.encode("utf-8")
    return UploadedFile(name=name, type=file_type, size=len(content), content=content)


# ──────────────────────────────────────────────────────────────────────
# extract_text
# ──────────────────────────────────────────────────────────────────────


class TestExtractText:
    def test_plain_text_is_decoded_verbatim(self) -> None:
        assert extract_text("héllo\x01 world".encode(), "text/plain") == "héllo\x01 world"

    def test_csv_is_plain_text(self) -> None:
        assert is_plain_text("application/csv")
        assert extract_text(b"a,b\n1,2", "application/csv") == "a,b\n1,2"

    def test_binary_is_stripped_to_printable_ascii(self) -> None:
        raw = b"%PDF-1.4\x00\x01\x02Quarterly\xff\xferevenue\n"
        assert extract_text(raw, "application/pdf") == "%PDF-1.4 Quarterly revenue\n"

    def test_missing_type_uses_permissive_decode(self) -> None:
        assert extract_text("naïve".encode(), None) == "na ve"

    def test_arbitrary_bytes_never_raise(self) -> None:
        raw = bytes(range(256)) * 4
        text = extract_text(raw, "application/octet-stream")
        assert all(ch in "\t\n\r" or 0x20 <= ord(ch) <= 0x7E for ch in text)


# ──────────────────────────────────────────────────────────────────────
# IngestionPipeline
# ──────────────────────────────────────────────────────────────────────


class TestIngestionPipeline:
    def test_build_records(self) -> None:
        text = "Revenue grew. Costs fell. Margins improved. Outlook is stable. " * 40
        ingested = IngestionPipeline().build_records("alice", _upload("q3.txt", text))

        doc = ingested.document
        assert doc.filename == "q3.txt"
        assert doc.uploader_name == "alice"
        assert doc.file_type == "text/plain"
        assert doc.summary == "Revenue grew.  Costs fell.  Margins improved."
        assert doc.storage_path == f"{doc.id}-q3.txt"
        assert doc.uploaded_at.tzinfo is not None

        assert len(ingested.chunks) > 1
        assert [c.chunk_index for c in ingested.chunks] == list(range(len(ingested.chunks)))
        for chunk in ingested.chunks:
            assert chunk.document_id == doc.id
            assert len(chunk.embedding) == VECTOR_SIZE
            assert math.sqrt(sum(v * v for v in chunk.embedding)) == pytest.approx(1.0)

    def test_unique_ids(self) -> None:
        pipeline = IngestionPipeline()
        a = pipeline.build_records("alice", _upload("a.txt", "Same text."))
        b = pipeline.build_records("alice", _upload("a.txt", "Same text."))
        assert a.document.id != b.document.id
        assert a.chunks[0].id != b.chunks[0].id

    def test_missing_type_defaults_to_unknown(self) -> None:
        ingested = IngestionPipeline().build_records("alice", _upload("blob", "data", file_type=""))
        assert ingested.document.file_type == "unknown"

    def test_empty_file_has_no_chunks(self) -> None:
        ingested = IngestionPipeline().build_records("alice", _upload("empty.txt", ""))
        assert ingested.chunks == []
        assert ingested.document.summary == ""

    def test_ingest_appends_to_store(self, store: JsonDocumentStore) -> None:
        pipeline = IngestionPipeline(store)
        report = pipeline.ingest("bob", [_upload("a.txt", "Alpha text."), _upload("b.txt", "Beta text.")])

        assert [p.document.filename for p in report.processed] == ["a.txt", "b.txt"]
        assert report.failed == []
        assert store.document_count == 2
        assert store.chunk_count == 2

    def test_ingest_writes_raw_bytes(self, tmp_path: Path) -> None:
        upload_dir = tmp_path / "uploads"
        pipeline = IngestionPipeline(upload_dir=upload_dir)
        report = pipeline.ingest("bob", [_upload("../notes.txt", "hello")])

        doc = report.processed[0].document
        assert doc.storage_path == f"{doc.id}-notes.txt"
        assert (upload_dir / doc.storage_path).read_bytes() == b"hello"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_ingest_requires_uploader(self, name: str) -> None:
        with pytest.raises(InvalidRequestError):
            IngestionPipeline().ingest(name, [_upload("a.txt", "x")])

    def test_ingest_requires_files(self) -> None:
        with pytest.raises(InvalidRequestError):
            IngestionPipeline().ingest("alice", [])

    def test_failing_file_does_not_abort_batch(self, store: JsonDocumentStore) -> None:
        pipeline = IngestionPipeline(store)
        real_extract = extract_text

        def flaky_extract(raw: bytes, file_type: str | None = None) -> str:
            if raw == b"boom":
                raise RuntimeError("cannot read")
            return real_extract(raw, file_type)

        with patch("doc_intel.ingestion.pipeline.extract_text", side_effect=flaky_extract):
            report = pipeline.ingest(
                "alice",
                [_upload("ok1.txt", "fine"), _upload("bad.bin", "boom"), _upload("ok2.txt", "also fine")],
            )

        assert [p.document.filename for p in report.processed] == ["ok1.txt", "ok2.txt"]
        assert len(report.failed) == 1
        assert report.failed[0].filename == "bad.bin"
        assert "cannot read" in report.failed[0].error
        assert store.document_count == 2

    def test_persistence_failure_propagates(self, store: JsonDocumentStore) -> None:
        pipeline = IngestionPipeline(store)
        with patch.object(store, "_write_snapshot", side_effect=PersistenceError("disk full")):
            with pytest.raises(PersistenceError):
                pipeline.ingest("alice", [_upload("a.txt", "text")])
        assert store.document_count == 0

    def test_persistence_failure_removes_raw_copy(self, store: JsonDocumentStore, tmp_path: Path) -> None:
        upload_dir = tmp_path / "uploads"
        pipeline = IngestionPipeline(store, upload_dir=upload_dir)
        with patch.object(store, "_write_snapshot", side_effect=PersistenceError("disk full")):
            with pytest.raises(PersistenceError):
                pipeline.ingest("alice", [_upload("a.txt", "text")])
        assert list(upload_dir.iterdir()) == []

    def test_failed_file_writes_no_raw_copy(self, tmp_path: Path) -> None:
        upload_dir = tmp_path / "uploads"
        pipeline = IngestionPipeline(upload_dir=upload_dir)
        with patch("doc_intel.ingestion.pipeline.extract_text", side_effect=RuntimeError("cannot read")):
            report = pipeline.ingest("alice", [_upload("bad.bin", "boom")])
        assert len(report.failed) == 1
        assert not upload_dir.exists()

    def test_rejects_non_advancing_chunk_window(self) -> None:
        with pytest.raises(ValueError):
            IngestionPipeline(chunk_size=100, chunk_overlap=100)
