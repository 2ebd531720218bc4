"""Answer templates for the synthesis step.

Every piece of user-facing text produced by the agent lives here so the
wording can be audited in one place.
"""

from __future__ import annotations

from collections.abc import Sequence

from doc_intel.retrieval.models import Match, RankedDocument

# ── Trace steps ───────────────────────────────────────────────────────

STEP_INTENT = 'Interpreted user intent for: "{query}"'
STEP_EMBED = "Converted the question into a semantic vector representation."
STEP_RETRIEVE = "Retrieved {count} relevant knowledge chunks from the local store."
STEP_AGGREGATE = "Assembled supporting document context."
STEP_SYNTHESIZE = "Synthesized an answer with citations."

# ── Answer text ───────────────────────────────────────────────────────

NO_RESULTS = (
    "I reviewed your local knowledge base but could not find information "
    'related to "{query}" in the selected time window.'
)
ANSWER_HEADER = 'Here is what I found for "{query}":'
SUMMARY_PLACEHOLDER = "Summary not available."
HIGHLIGHT_PLACEHOLDER = "No readable excerpt available yet."
SOURCES_HEADER = "\nRelevant sources:"


def format_document_entry(index: int, document: RankedDocument) -> str:
    """Render one numbered entry of the answer body."""
    highlight = document.highlights[0] if document.highlights else HIGHLIGHT_PLACEHOLDER
    summary = document.summary or SUMMARY_PLACEHOLDER
    return f"\n{index}. **{document.filename}** — {summary}\n   ↳ {highlight.strip()}..."


def format_source(match: Match) -> str:
    """Render one cited source line."""
    return f"• {match.document.filename} (score {match.score:.2f})"


def build_answer(query: str, documents: Sequence[RankedDocument], matches: Sequence[Match]) -> str:
    """Compose the cited answer for *query*.

    Every raw match is cited, not only the ranked documents, in the order
    the store returned them.
    """
    if not documents:
        return NO_RESULTS.format(query=query)

    lines = [ANSWER_HEADER.format(query=query)]
    lines.extend(format_document_entry(i, doc) for i, doc in enumerate(documents, 1))
    lines.append(SOURCES_HEADER)
    lines.append("\n".join(format_source(m) for m in matches))
    return "\n".join(lines)
