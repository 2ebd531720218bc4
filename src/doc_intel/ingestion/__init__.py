"""
Ingestion: text extraction, chunking, summarising and embedding.

This module converts uploaded file bytes into :class:`Document` and
:class:`Chunk` records and hands them to a document store.
"""
