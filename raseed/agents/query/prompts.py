"""
Query Answer Prompt Templates

Builds the context block summarizing the user's recent receipts and the
prompt asking Gemini for a JSON answer with a classified intent.

Architecture:
- Pattern: Single-shot text generation grounded in receipt history
- Model: Gemini
- Output: JSON matching raseed.schemas.queries.QueryAnswer
"""

from typing import List

from raseed.schemas.common import QueryIntent
from raseed.schemas.receipts import Receipt

NO_HISTORY_CONTEXT = "No receipt history available."

QUERY_SYSTEM_PROMPT = """You are Raseed, an AI-powered personal assistant for financial management and receipt analysis.

<capabilities>
- Analyze spending patterns from the user's receipts
- Suggest recipes from recently purchased groceries
- Build shopping lists
- Give short, actionable financial insights
</capabilities>"""


def build_receipt_context(receipts: List[Receipt]) -> str:
    """
    Summarize receipts for the prompt.

    Receipts are expected newest first and already capped by the caller.

    Returns:
        One line per receipt ("- Store: $12.50 on 2025-07-01") followed by
        its items ("  * Milk (dairy)"), or NO_HISTORY_CONTEXT.
    """
    if not receipts:
        return NO_HISTORY_CONTEXT

    lines = ["Recent Receipts:"]
    for receipt in receipts:
        store_name = receipt.store_name or "Unknown store"
        date = receipt.date or "unknown date"
        lines.append(f"- {store_name}: ${receipt.total_amount:.2f} on {date}")
        for item in receipt.items:
            lines.append(f"  * {item.name} ({item.category})")

    return "\n".join(lines)


def build_query_prompt(query: str, language: str, receipt_context: str) -> str:
    """
    Build the user prompt for a question about the user's finances.

    Args:
        query: Raw question text
        language: Language tag the answer should be written in
        receipt_context: Output of build_receipt_context

    Returns:
        str: Prompt with context, question and the JSON output contract
    """
    intents = "|".join(intent.value for intent in QueryIntent)

    return f"""<receipt_history>
{receipt_context}
</receipt_history>

<user_query language="{language}">
{query}
</user_query>

<instructions>
Analyze the query and provide a helpful response in the user's language.
Consider the user's spending patterns, recent purchases and financial context.
Classify the intent as exactly one of: {intents}.
</instructions>

<output_schema>
Return ONLY valid JSON with this exact structure. No markdown, no prose.

{{
  "response": "Your helpful response to the user",
  "intent": "{intents}",
  "confidence": 0.95,
  "suggestions": ["suggestion1", "suggestion2"],
  "data": {{
    "relevant_items": ["item1", "item2"],
    "total_spent": 0.00,
    "category_breakdown": {{"category": "amount"}}
  }}
}}
</output_schema>"""
