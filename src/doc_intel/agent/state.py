"""Agent state definition: shared across all graph nodes.

The state is the *single source of truth* that flows through every node
of the answer graph.  Nodes return partial updates; ``steps`` is the only
field that accumulates instead of being replaced.
"""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from doc_intel.retrieval.models import Match, RankedDocument


def _append_list(existing: list[Any], new: list[Any]) -> list[Any]:
    """Reducer that appends *new* items to the *existing* list."""
    return existing + new


class AgentState(TypedDict):
    """Typed state that flows through the answer graph.

    Attributes
    ----------
    query:
        The user's question, trimmed by the ``capture_intent`` node.
    recency_days:
        Optional recency window forwarded to the store; ``None`` or ``0``
        disables it.
    query_embedding:
        Vector representation of ``query``.
    matches:
        Raw chunk matches, score descending.
    documents:
        Matches aggregated into ranked documents.
    response:
        The synthesised answer text.
    steps:
        Human-readable trace of what each node did, in execution order.
    """

    query: str
    recency_days: int | None
    query_embedding: list[float]
    matches: list[Match]
    documents: list[RankedDocument]
    response: str
    steps: Annotated[list[str], _append_list]
