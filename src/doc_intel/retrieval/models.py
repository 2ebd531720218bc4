"""Domain models for stored documents, chunks and search results."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """One uploaded file as recorded by the document store.

    Attributes
    ----------
    id:
        Opaque unique identifier.
    filename:
        Name of the file as uploaded.
    file_type:
        MIME type reported by the uploader, ``"unknown"`` when absent.
    file_size:
        Size of the upload in bytes.
    uploader_name:
        Free-form name of the person who uploaded the file.
    summary:
        Lead summary of the extracted text.
    uploaded_at:
        UTC ingestion time.
    storage_path:
        Location of the raw bytes, relative to the upload directory.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    filename: str
    file_type: str = "unknown"
    file_size: int = 0
    uploader_name: str
    summary: str = ""
    uploaded_at: datetime = Field(default_factory=utcnow)
    storage_path: str = ""

    @field_validator("uploaded_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps in hand-edited snapshots are read as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Chunk(BaseModel):
    """A contiguous window of a document's text together with its embedding."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    document_id: str
    chunk_index: int = Field(ge=0)
    content: str
    embedding: list[float]


class Match(BaseModel):
    """A scored chunk returned by a similarity search."""

    chunk: Chunk
    document: Document
    score: float


class RankedDocument(BaseModel):
    """A document ranked by its best matching chunk.

    ``relevance`` is the maximum score of the contributing chunks and
    ``highlights`` holds one excerpt per contributing chunk, in the order
    the chunks were encountered.
    """

    id: str
    filename: str
    file_type: str
    file_size: int
    uploader_name: str
    summary: str
    uploaded_at: datetime
    storage_path: str
    relevance: float
    highlights: list[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: Document, relevance: float) -> RankedDocument:
        return cls(**document.model_dump(), relevance=relevance)


class AgentAnswer(BaseModel):
    """Synthesised answer returned to presentation layers."""

    response: str
    documents: list[RankedDocument] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)


class UploadedFile(BaseModel):
    """An already-decoded upload handed to the ingestion pipeline."""

    name: str
    type: str = ""
    size: int = 0
    content: bytes = b""


class IngestedDocument(BaseModel):
    """A document and its chunks, built from one uploaded file."""

    document: Document
    chunks: list[Chunk] = Field(default_factory=list)


class FileFailure(BaseModel):
    """An upload that could not be turned into records."""

    filename: str
    error: str


class IngestionReport(BaseModel):
    """Outcome of one ingestion batch."""

    processed: list[IngestedDocument] = Field(default_factory=list)
    failed: list[FileFailure] = Field(default_factory=list)
