"""LangGraph graph definition: the retrieval/answer workflow.

This module wires the nodes of :class:`~doc_intel.agent.nodes.AnswerNodes`
into a compiled :class:`StateGraph`:

1. **Capture** the user's intent (trim the query).
2. **Embed** the query with the hash vectorizer.
3. **Retrieve** the top chunk matches from the document store.
4. **Aggregate** matches into ranked documents.
5. **Synthesise** a cited answer.

The graph has no external infrastructure; tests inject a fake store.
"""

from __future__ import annotations

from typing import Any

from langgraph.graph import END, StateGraph

from doc_intel.agent.nodes import AnswerNodes
from doc_intel.agent.state import AgentState
from doc_intel.exceptions import InvalidRequestError
from doc_intel.ingestion.embedder import HashEmbeddings
from doc_intel.retrieval.base import DocumentStoreBase
from doc_intel.retrieval.models import AgentAnswer


def build_graph(store: DocumentStoreBase, *, embeddings: HashEmbeddings | None = None) -> Any:
    """Construct and return the compiled answer graph for *store*.

    Graph topology::

        capture_intent → embed_query → retrieve_chunks
                       → aggregate_documents → synthesize → END

    Returns
    -------
    CompiledGraph
        A compiled LangGraph workflow ready for ``.invoke()``.
    """
    nodes = AnswerNodes(store, embeddings=embeddings)
    workflow = StateGraph(AgentState)

    # -- Nodes ---------------------------------------------------------------
    workflow.add_node("capture_intent", nodes.capture_intent)
    workflow.add_node("embed_query", nodes.embed_query)
    workflow.add_node("retrieve_chunks", nodes.retrieve_chunks)
    workflow.add_node("aggregate_documents", nodes.aggregate_documents)
    workflow.add_node("synthesize", nodes.synthesize)

    # -- Edges ---------------------------------------------------------------
    workflow.set_entry_point("capture_intent")
    workflow.add_edge("capture_intent", "embed_query")
    workflow.add_edge("embed_query", "retrieve_chunks")
    workflow.add_edge("retrieve_chunks", "aggregate_documents")
    workflow.add_edge("aggregate_documents", "synthesize")
    workflow.add_edge("synthesize", END)

    return workflow.compile()


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def create_initial_state(query: str, *, recency_days: int | None = None) -> dict[str, Any]:
    """Build a minimal initial state dict for ``graph.invoke()``."""
    return {
        "query": query,
        "recency_days": recency_days,
        "query_embedding": [],
        "matches": [],
        "documents": [],
        "response": "",
        "steps": [],
    }


def answer_query(
    query: str,
    store: DocumentStoreBase,
    *,
    recency_days: int | None = None,
) -> AgentAnswer:
    """Answer *query* from the documents held by *store*.

    Usage::

        store = JsonDocumentStore("data/rag-db.json")
        result = answer_query("revenue growth", store, recency_days=30)
        print(result.response)

    Raises
    ------
    InvalidRequestError
        If *query* is empty or only whitespace.
    """
    if not query or not query.strip():
        raise InvalidRequestError("Query is required")

    result = build_graph(store).invoke(create_initial_state(query, recency_days=recency_days))
    return AgentAnswer(
        response=result["response"],
        documents=result["documents"],
        steps=result["steps"],
    )
