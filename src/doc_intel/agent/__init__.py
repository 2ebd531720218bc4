"""
Agent: the answer workflow built with LangGraph.

This module wires the retrieval stack into a LangGraph state-machine that
turns a question into a cited answer.  It has no infrastructure
dependencies beyond a document store.

Public API
----------
- :func:`answer_query` - run the workflow and return an :class:`AgentAnswer`.
- :func:`build_graph` - compile the workflow for a given store.
- :func:`create_initial_state` - bootstrap the state dict for ``graph.invoke()``.
- :class:`AgentState` - the TypedDict flowing through every node.
"""

from doc_intel.agent.graph import answer_query, build_graph, create_initial_state
from doc_intel.agent.state import AgentState

__all__ = [
    "AgentState",
    "answer_query",
    "build_graph",
    "create_initial_state",
]
