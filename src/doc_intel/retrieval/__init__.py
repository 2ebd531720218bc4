"""
Retrieval: document storage, similarity search and ranking.

This module wraps the document store behind a clean interface so that
the agent layer never needs to know how documents are persisted.

Public surface
--------------
- :class:`DocumentRetriever` - search returning ranked documents.
- :class:`DocumentStoreBase` - abstract backend.
- :class:`JsonDocumentStore` - default JSON-snapshot backend.
- :class:`Document`, :class:`Chunk`, :class:`Match`, :class:`RankedDocument` - data models.
- :func:`aggregate_matches`, :func:`cosine_similarity` - ranking helpers.
"""

from doc_intel.retrieval.base import DocumentStoreBase, cosine_similarity
from doc_intel.retrieval.json_store import JsonDocumentStore
from doc_intel.retrieval.models import Chunk, Document, Match, RankedDocument
from doc_intel.retrieval.retriever import DocumentRetriever, aggregate_matches

__all__ = [
    "Chunk",
    "Document",
    "DocumentRetriever",
    "DocumentStoreBase",
    "JsonDocumentStore",
    "Match",
    "RankedDocument",
    "aggregate_matches",
    "cosine_similarity",
]
