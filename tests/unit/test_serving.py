"""Unit tests for the serving layer."""

from __future__ import annotations

import base64
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from doc_intel.config import settings
from doc_intel.exceptions import PersistenceError
from doc_intel.retrieval.json_store import JsonDocumentStore
from doc_intel.serving.app import app


def _file(name: str, text: str, file_type: str = "text/plain") -> dict:
    raw = text.encode("utf-8")
    return {
        "name": name,
        "type": file_type,
        "size": len(raw),
        "content": base64.b64encode(raw).decode("ascii"),
    }


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")
    app.state.store = JsonDocumentStore(tmp_path / "data" / "rag-db.json")
    try:
        yield TestClient(app)
    finally:
        app.state.store = None


def test_health_endpoint(client: TestClient) -> None:
    """GET /api/health should return 200 with status ok."""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_then_list(client: TestClient, tmp_path: Path) -> None:
    response = client.post(
        "/api/documents",
        json={"uploaderName": "alice", "files": [_file("q3.txt", "Quarterly revenue grew substantially.")]},
    )
    assert response.status_code == 200
    assert response.json() == {"uploaded": 1, "failed": []}

    documents = client.get("/api/documents", params={"days": 7}).json()["documents"]
    assert len(documents) == 1
    assert documents[0]["filename"] == "q3.txt"
    assert documents[0]["uploader_name"] == "alice"
    assert (tmp_path / "data" / "uploads" / documents[0]["storage_path"]).exists()


@pytest.mark.parametrize(
    "payload",
    [
        {"uploaderName": "", "files": [_file("a.txt", "x")]},
        {"uploaderName": "alice", "files": []},
        {"files": [_file("a.txt", "x")]},
    ],
)
def test_upload_rejects_missing_fields(client: TestClient, payload: dict) -> None:
    response = client.post("/api/documents", json=payload)
    assert response.status_code == 400


def test_upload_rejects_bad_base64(client: TestClient) -> None:
    bad = {"name": "a.txt", "type": "text/plain", "size": 1, "content": "not base64!"}
    response = client.post("/api/documents", json={"uploaderName": "alice", "files": [bad]})
    assert response.status_code == 400


def test_upload_persistence_failure(client: TestClient) -> None:
    store = app.state.store
    with patch.object(store, "_write_snapshot", side_effect=PersistenceError("disk full")):
        response = client.post(
            "/api/documents",
            json={"uploaderName": "alice", "files": [_file("a.txt", "text")]},
        )
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to save documents"}


def test_agent_endpoint(client: TestClient) -> None:
    client.post(
        "/api/documents",
        json={"uploaderName": "alice", "files": [_file("q3.txt", "Quarterly revenue grew substantially.")]},
    )
    response = client.post("/api/agent", json={"query": "revenue growth", "recencyDays": 30})
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"response", "documents", "steps"}
    assert body["documents"][0]["filename"] == "q3.txt"
    assert body["documents"][0]["relevance"] > 0
    assert body["documents"][0]["highlights"]
    assert len(body["steps"]) == 5


def test_agent_empty_store(client: TestClient) -> None:
    body = client.post("/api/agent", json={"query": "revenue", "recencyDays": None}).json()
    assert body["documents"] == []
    assert '"revenue"' in body["response"]


def test_agent_requires_query(client: TestClient) -> None:
    assert client.post("/api/agent", json={"query": ""}).status_code == 400


def test_search_endpoint(client: TestClient) -> None:
    client.post(
        "/api/documents",
        json={"uploaderName": "alice", "files": [_file("q3.txt", "Quarterly revenue grew substantially.")]},
    )
    response = client.post("/api/search", json={"query": "revenue"})
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"documents"}
    assert body["documents"][0]["filename"] == "q3.txt"


def test_search_requires_query(client: TestClient) -> None:
    assert client.post("/api/search", json={}).status_code == 400


@pytest.mark.parametrize("days", ["abc", "", "inf", "nan"])
def test_list_ignores_non_numeric_days(client: TestClient, days: str) -> None:
    client.post(
        "/api/documents",
        json={"uploaderName": "alice", "files": [_file("q3.txt", "Quarterly revenue.")]},
    )
    response = client.get("/api/documents", params={"days": days})
    assert response.status_code == 200
    assert [d["filename"] for d in response.json()["documents"]] == ["q3.txt"]


def test_search_rejects_blank_query(client: TestClient) -> None:
    response = client.post("/api/search", json={"query": "   "})
    assert response.status_code == 400
    assert response.json() == {"detail": "Query is required"}
