"""Exception types raised by the retrieval engine."""

from __future__ import annotations


class DocIntelError(Exception):
    """Base class for every error raised by :mod:`doc_intel`."""


class InvalidRequestError(DocIntelError, ValueError):
    """Rejected input (missing query, missing uploader name, no files).

    Raised before any ingestion or retrieval work begins.
    """


class PersistenceError(DocIntelError, RuntimeError):
    """The document store could not read or write its durable snapshot."""
