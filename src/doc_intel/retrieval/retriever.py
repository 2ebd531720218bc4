"""Document retriever: chunk search aggregated into ranked documents.

This module is the **primary public interface** for search without answer
synthesis.  The agent layer reuses :func:`aggregate_matches` so both paths
rank documents identically.

Usage::

    from doc_intel.retrieval.json_store import JsonDocumentStore
    from doc_intel.retrieval.retriever import DocumentRetriever

    retriever = DocumentRetriever(JsonDocumentStore("data/rag-db.json"))
    for doc in retriever.search_documents("quarterly revenue", recency_days=30):
        print(f"{doc.relevance:.2f}", doc.filename)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from doc_intel.config import settings
from doc_intel.exceptions import InvalidRequestError
from doc_intel.ingestion.embedder import HashEmbeddings
from doc_intel.retrieval.base import DocumentStoreBase
from doc_intel.retrieval.models import Match, RankedDocument

logger = logging.getLogger(__name__)


def aggregate_matches(
    matches: Sequence[Match],
    *,
    max_documents: int = 5,
    highlight_chars: int = 280,
) -> list[RankedDocument]:
    """Collapse chunk matches into one entry per document.

    Parameters
    ----------
    matches:
        Chunk matches, normally ordered by score descending.
    max_documents:
        Number of documents kept after ranking.
    highlight_chars:
        Length of the excerpt taken from each contributing chunk.

    Returns
    -------
    list[RankedDocument]
        Documents sorted by ``relevance`` (their best chunk score)
        descending.  ``highlights`` follow the order of *matches*.
    """
    by_id: dict[str, RankedDocument] = {}
    for match in matches:
        entry = by_id.get(match.document.id)
        if entry is None:
            entry = RankedDocument.from_document(match.document, relevance=match.score)
            by_id[match.document.id] = entry
        entry.relevance = max(entry.relevance, match.score)
        entry.highlights.append(match.chunk.content[:highlight_chars])

    ranked = sorted(by_id.values(), key=lambda d: d.relevance, reverse=True)
    return ranked[:max_documents]


class DocumentRetriever:
    """High-level retriever that wraps any :class:`DocumentStoreBase`.

    Parameters
    ----------
    store:
        A concrete document-store backend.
    embeddings:
        Query embedder; defaults to :class:`HashEmbeddings`, which must match
        the embedder used at ingestion time.
    search_limit:
        Number of chunk matches fetched before aggregation.
    max_documents:
        Number of ranked documents returned.
    """

    def __init__(
        self,
        store: DocumentStoreBase,
        *,
        embeddings: HashEmbeddings | None = None,
        search_limit: int = settings.search_limit,
        max_documents: int = settings.max_ranked_documents,
    ) -> None:
        self._store = store
        self._embeddings = embeddings or HashEmbeddings()
        self.search_limit = search_limit
        self.max_documents = max_documents

    # -- public API -----------------------------------------------------------

    def search_matches(self, query: str, *, recency_days: int | None = None) -> list[Match]:
        """Embed *query* and return the raw chunk matches.

        Raises
        ------
        InvalidRequestError
            If *query* is empty or only whitespace.
        """
        if not query or not query.strip():
            raise InvalidRequestError("Query is required")
        embedding = self._embeddings.embed_query(query.strip())
        matches = self._store.search(embedding, limit=self.search_limit, recency_days=recency_days)
        logger.debug("Query %r matched %d chunk(s)", query, len(matches))
        return matches

    def search_documents(self, query: str, *, recency_days: int | None = None) -> list[RankedDocument]:
        """Run a search and return ranked documents with highlights."""
        matches = self.search_matches(query, recency_days=recency_days)
        return aggregate_matches(
            matches,
            max_documents=self.max_documents,
            highlight_chars=settings.highlight_chars,
        )

    # -- LangChain compat -----------------------------------------------------

    def as_langchain_retriever(self, *, recency_days: int | None = None) -> Any:
        """Return a thin LangChain-compatible retriever wrapper.

        LangChain's retriever classes are imported only here; the rest of
        the retrieval package depends on ``langchain_core`` solely for the
        ``Embeddings`` interface.
        """
        from langchain_core.documents import Document as LCDocument
        from langchain_core.retrievers import BaseRetriever

        outer = self

        class _LCRetriever(BaseRetriever):
            """Adapter that satisfies LangChain's retriever protocol."""

            def _get_relevant_documents(self_inner, query: str, **kwargs: Any) -> list[LCDocument]:  # type: ignore[override]  # noqa: N805
                ranked = outer.search_documents(query, recency_days=recency_days)
                return [
                    LCDocument(
                        page_content=doc.highlights[0] if doc.highlights else doc.summary,
                        metadata=doc.model_dump(mode="json", exclude={"highlights"}),
                    )
                    for doc in ranked
                ]

        return _LCRetriever()
