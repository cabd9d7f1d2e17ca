"""
Query answering prompts grounded in the user's receipt history.
"""

from raseed.agents.query.prompts import (
    NO_HISTORY_CONTEXT,
    QUERY_SYSTEM_PROMPT,
    build_query_prompt,
    build_receipt_context,
)

__all__ = [
    "NO_HISTORY_CONTEXT",
    "QUERY_SYSTEM_PROMPT",
    "build_query_prompt",
    "build_receipt_context",
]
