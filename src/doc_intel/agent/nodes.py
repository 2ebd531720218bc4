"""Graph nodes: each method is one step in the answer workflow.

Node contract
-------------
* Accepts the full :class:`AgentState` dict.
* Returns a *partial* dict with **only the keys that changed**, plus one
  entry for ``steps``.
* Store and embedder are injected through :class:`AnswerNodes` so every
  node can be tested against a fake store.
"""

from __future__ import annotations

import logging
from typing import Any

from doc_intel.agent.prompts import (
    STEP_AGGREGATE,
    STEP_EMBED,
    STEP_INTENT,
    STEP_RETRIEVE,
    STEP_SYNTHESIZE,
    build_answer,
)
from doc_intel.agent.state import AgentState
from doc_intel.config import settings
from doc_intel.ingestion.embedder import HashEmbeddings
from doc_intel.retrieval.base import DocumentStoreBase
from doc_intel.retrieval.retriever import aggregate_matches

logger = logging.getLogger(__name__)


class AnswerNodes:
    """Bundle of graph nodes bound to one document store.

    Parameters
    ----------
    store:
        Store searched by :meth:`retrieve_chunks`.
    embeddings:
        Query embedder; defaults to :class:`HashEmbeddings`.
    search_limit:
        Number of chunk matches requested from the store.
    max_documents:
        Number of ranked documents kept after aggregation.
    """

    def __init__(
        self,
        store: DocumentStoreBase,
        *,
        embeddings: HashEmbeddings | None = None,
        search_limit: int = settings.search_limit,
        max_documents: int = settings.max_ranked_documents,
    ) -> None:
        self.store = store
        self.embeddings = embeddings or HashEmbeddings()
        self.search_limit = search_limit
        self.max_documents = max_documents

    # ── 1. CAPTURE INTENT ─────────────────────────────────────────────

    def capture_intent(self, state: AgentState) -> dict[str, Any]:
        query = state["query"].strip()
        return {"query": query, "steps": [STEP_INTENT.format(query=query)]}

    # ── 2. EMBED QUERY ────────────────────────────────────────────────

    def embed_query(self, state: AgentState) -> dict[str, Any]:
        embedding = self.embeddings.embed_query(state["query"])
        return {"query_embedding": embedding, "steps": [STEP_EMBED]}

    # ── 3. RETRIEVE CHUNKS ────────────────────────────────────────────

    def retrieve_chunks(self, state: AgentState) -> dict[str, Any]:
        """Run the similarity search against the injected store."""
        matches = self.store.search(
            state["query_embedding"],
            limit=self.search_limit,
            recency_days=state.get("recency_days"),
        )
        logger.info("Query %r matched %d chunk(s)", state["query"], len(matches))
        return {"matches": matches, "steps": [STEP_RETRIEVE.format(count=len(matches))]}

    # ── 4. AGGREGATE DOCUMENTS ────────────────────────────────────────

    def aggregate_documents(self, state: AgentState) -> dict[str, Any]:
        documents = aggregate_matches(
            state.get("matches", []),
            max_documents=self.max_documents,
            highlight_chars=settings.highlight_chars,
        )
        return {"documents": documents, "steps": [STEP_AGGREGATE]}

    # ── 5. SYNTHESIZE ─────────────────────────────────────────────────

    def synthesize(self, state: AgentState) -> dict[str, Any]:
        """Compose the cited answer from the ranked documents and raw matches."""
        response = build_answer(state["query"], state.get("documents", []), state.get("matches", []))
        return {"response": response, "steps": [STEP_SYNTHESIZE]}
