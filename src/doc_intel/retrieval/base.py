"""Abstract base class for document-store backends.

Adding a new backend only requires subclassing :class:`DocumentStoreBase`
and implementing the abstract methods.  The retrieval and agent layers are
backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

import numpy as np

from doc_intel.retrieval.models import Chunk, Document, Match


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``.

    Empty vectors, vectors of different length and zero-norm vectors all
    score ``0.0``.
    """
    if not a or not b or len(a) != len(b):
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb)) / denom


def recency_cutoff(days: float | None, *, now: datetime | None = None) -> datetime | None:
    """Return the earliest ``uploaded_at`` admitted by a *days* window.

    ``None`` and ``0`` both mean "no filter".
    """
    if not days:
        return None
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)


class DocumentStoreBase(ABC):
    """Backend-agnostic document store interface.

    A store exclusively owns the canonical collections of
    :class:`~doc_intel.retrieval.models.Document` and
    :class:`~doc_intel.retrieval.models.Chunk` records and is their only
    writer.
    """

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def append(self, document: Document, chunks: Sequence[Chunk]) -> None:
        """Durably record *document* together with all of its *chunks*.

        Either both are recorded or neither is.
        """
        ...

    @abstractmethod
    def list_recent(self, days: int | None = None) -> list[Document]:
        """Return documents uploaded in the last *days* days, newest first."""
        ...

    @abstractmethod
    def search(
        self,
        query_embedding: Sequence[float],
        *,
        limit: int = 8,
        recency_days: int | None = None,
    ) -> list[Match]:
        """Return at most *limit* chunk matches ordered by score descending.

        Parameters
        ----------
        query_embedding:
            Vector produced by the same embedder as the stored chunks.
        limit:
            Maximum number of matches.
        recency_days:
            Only consider chunks of documents uploaded within this many days.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is ready to accept writes."""
        ...

    # -- optional overrides ---------------------------------------------------

    def close(self) -> None:
        """Release resources held by the store.  No-op by default."""
