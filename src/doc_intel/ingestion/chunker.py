"""Fixed-size sliding-window text chunking."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to a single space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def chunk_text(
    text: str,
    chunk_size: int = 800,
    chunk_overlap: int = 120,
) -> list[str]:
    """Split *text* into overlapping character windows.

    Parameters
    ----------
    text:
        Raw extracted text; whitespace is normalised before splitting.
    chunk_size:
        Length of every window except possibly the last.
    chunk_overlap:
        Number of characters shared by consecutive windows.

    Returns
    -------
    list[str]
        Windows in left-to-right order; empty when *text* has no content.

    Raises
    ------
    ValueError
        If the window would not advance (``chunk_overlap >= chunk_size``)
        or either parameter is out of range.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ValueError(f"chunk_overlap must be non-negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
        )

    clean = normalize_whitespace(text)
    chunks: list[str] = []
    if not clean:
        return chunks

    start = 0
    while start < len(clean):
        end = min(start + chunk_size, len(clean))
        chunks.append(clean[start:end])
        if end == len(clean):
            break
        start = max(end - chunk_overlap, 0)
    return chunks
