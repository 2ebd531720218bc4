"""FastAPI application exposing ingestion, search and answers over HTTP."""

from __future__ import annotations

import base64
import binascii
import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from doc_intel.agent.graph import answer_query
from doc_intel.config import settings
from doc_intel.exceptions import InvalidRequestError, PersistenceError
from doc_intel.ingestion.pipeline import IngestionPipeline
from doc_intel.retrieval.base import DocumentStoreBase
from doc_intel.retrieval.json_store import JsonDocumentStore
from doc_intel.retrieval.models import AgentAnswer, Document, FileFailure, RankedDocument, UploadedFile
from doc_intel.retrieval.retriever import DocumentRetriever

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the document store once and share it across requests."""
    logging.basicConfig(level=settings.log_level)
    if getattr(app.state, "store", None) is None:
        app.state.store = JsonDocumentStore(settings.db_path)
    try:
        yield
    finally:
        app.state.store.close()


app = FastAPI(
    title="Document Intelligence API",
    version="0.1.0",
    description="Upload documents, search them and get cited answers.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def get_store(request: Request) -> DocumentStoreBase:
    return request.app.state.store


def _parse_days(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        days = float(raw)
    except ValueError:
        return None
    return days if math.isfinite(days) else None


# ── Request / Response schemas ────────────────────────────────────────
class UploadPayload(BaseModel):
    """One base64-encoded file from the upload form."""

    name: str
    type: str = ""
    size: int = 0
    content: str = ""


class UploadRequest(BaseModel):
    """Batch of files uploaded by one person."""

    model_config = ConfigDict(populate_by_name=True)

    uploader_name: str = Field(default="", alias="uploaderName")
    files: list[UploadPayload] = []


class UploadResponse(BaseModel):
    uploaded: int
    failed: list[FileFailure] = []


class QueryRequest(BaseModel):
    """Incoming question from the user."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    recency_days: int | None = Field(default=None, alias="recencyDays")


class DocumentsResponse(BaseModel):
    documents: list[Document]


class SearchResponse(BaseModel):
    documents: list[RankedDocument]


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/api/health")
def health(store: DocumentStoreBase = Depends(get_store)) -> dict[str, str]:
    """Liveness probe."""
    if not store.health_check():
        raise HTTPException(status_code=503, detail="Document store unavailable")
    return {"status": "ok"}


@app.get("/api/documents", response_model=DocumentsResponse)
def list_documents(
    days: str | None = Query(default=None),
    store: DocumentStoreBase = Depends(get_store),
) -> DocumentsResponse:
    """List documents uploaded in the last *days* days, newest first.

    A *days* value that is not a finite number disables the filter.
    """
    return DocumentsResponse(documents=store.list_recent(_parse_days(days)))


@app.post("/api/documents", response_model=UploadResponse)
def upload_documents(
    request: UploadRequest,
    store: DocumentStoreBase = Depends(get_store),
) -> UploadResponse:
    """Decode, ingest and store a batch of uploaded files."""
    if not request.uploader_name or not request.files:
        raise HTTPException(status_code=400, detail="Missing uploader name or files")

    try:
        files = [
            UploadedFile(
                name=f.name,
                type=f.type,
                size=f.size,
                content=base64.b64decode(f.content, validate=True),
            )
            for f in request.files
        ]
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="File content must be base64 encoded") from exc

    pipeline = IngestionPipeline(store, upload_dir=settings.upload_dir)
    try:
        report = pipeline.ingest(request.uploader_name, files)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.error("Upload failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to save documents") from exc

    return UploadResponse(uploaded=len(report.processed), failed=report.failed)


@app.post("/api/agent", response_model=AgentAnswer)
def agent(request: QueryRequest, store: DocumentStoreBase = Depends(get_store)) -> AgentAnswer:
    """Answer a question with citations from the stored documents."""
    try:
        return answer_query(request.query, store, recency_days=request.recency_days)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail="Query is required") from exc


@app.post("/api/search", response_model=SearchResponse)
def search(request: QueryRequest, store: DocumentStoreBase = Depends(get_store)) -> SearchResponse:
    """Return ranked documents without a synthesised answer."""
    retriever = DocumentRetriever(store)
    try:
        documents = retriever.search_documents(request.query, recency_days=request.recency_days)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SearchResponse(documents=documents)
