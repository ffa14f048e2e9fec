"""WebProd Issue Agent.

Turns selections from a web production intake template into a Backlog issue:
the operator picks items, an LLM drafts the summary and description, the
operator edits the draft, and the issue is filed.
"""

__version__ = "0.3.0"
