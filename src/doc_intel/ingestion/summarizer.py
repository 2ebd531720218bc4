"""Lead-sentence summaries."""

from __future__ import annotations

import re

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]")

MAX_SENTENCES = 3
FALLBACK_WORDS = 40


def summarize_text(text: str) -> str:
    """Return the first three sentences of *text*.

    Sentences end at ``.``, ``!`` or ``?`` (kept with the sentence).  Text
    without terminal punctuation falls back to its first 40 space-separated
    words.
    """
    sentences = _SENTENCE_RE.findall(text)
    if not sentences:
        return " ".join(text.split(" ")[:FALLBACK_WORDS])
    return " ".join(sentences[:MAX_SENTENCES]).strip()
