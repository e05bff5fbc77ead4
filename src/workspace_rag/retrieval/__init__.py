"""
Retrieval — query-time context assembly.

Public surface
--------------
- :class:`RetrievalEngine` — ``raw_matches`` and ``assemble_context_text``.
- :func:`latest_user_message` — pull the query out of a chat transcript.
"""

from workspace_rag.retrieval.engine import RetrievalEngine, latest_user_message, render_context

__all__ = ["RetrievalEngine", "latest_user_message", "render_context"]
