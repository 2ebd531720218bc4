"""Hash-bucket text embeddings.

Text is tokenised into lower-case ASCII alphanumeric runs, each token is
hashed into one of :data:`VECTOR_SIZE` buckets and the resulting
term-frequency histogram is L2-normalised.  Distinct tokens that land in
the same bucket are merged; that loss of precision is accepted in exchange
for a model-free, deterministic vectorizer.
"""

from __future__ import annotations

import re

import numpy as np
from langchain_core.embeddings import Embeddings

VECTOR_SIZE = 384

_TOKEN_RE = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Return the lower-cased alphanumeric tokens of *text* in order."""
    return _TOKEN_RE.findall(text.lower())


def hash_token(token: str, size: int = VECTOR_SIZE) -> int:
    """Map *token* to a bucket in ``[0, size)``.

    Uses the 32-bit signed polynomial rolling hash (multiplier 31), so the
    bucket of a given token is stable across processes and machines.
    """
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h) % size


def embed_text(text: str) -> list[float]:
    """Embed *text* as a :data:`VECTOR_SIZE`-dimensional vector.

    Returns the all-zero vector when *text* has no tokens, otherwise a
    unit-length vector.
    """
    vector = np.zeros(VECTOR_SIZE, dtype=np.float64)
    for token in tokenize(text or ""):
        vector[hash_token(token)] += 1.0

    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        return vector.tolist()
    return (vector / norm).tolist()


class HashEmbeddings(Embeddings):
    """LangChain ``Embeddings`` implementation backed by :func:`embed_text`."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [embed_text(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return embed_text(text)
