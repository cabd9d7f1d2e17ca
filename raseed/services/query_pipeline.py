"""
Query pipeline.

Consumes `query-processing` events:

1. Read the user's 10 most recent receipts and summarize them
2. Ask Gemini for a JSON answer with a classified intent
3. Store the answer on the query record
4. For cooking, shopping-list and insight intents, derive the
   `query_<id>` wallet pass

If step 4 fails after step 3 committed, the stored response stays; the
failure is logged and the event redelivered (the pass id is deterministic).
"""

import logging
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from raseed.agents.query.prompts import (
    QUERY_SYSTEM_PROMPT,
    build_query_prompt,
    build_receipt_context,
)
from raseed.errors import NotFound, ValidationError
from raseed.schemas.common import QueryIntent, WalletPassKind
from raseed.schemas.events import QuerySubmittedEvent
from raseed.schemas.queries import QueryAnswer
from raseed.schemas.receipts import Receipt
from raseed.schemas.wallet_passes import WalletPass
from raseed.services.dependencies import PipelineDependencies
from raseed.services.wallet_pass_service import upsert_wallet_pass, wallet_pass_id
from raseed.utils.constants import COLLECTIONS, PASS_DESCRIPTION_LIMIT, QUERY_CONTEXT_RECEIPT_LIMIT

logger = logging.getLogger(__name__)

RECEIPTS = COLLECTIONS['RECEIPTS']
QUERIES = COLLECTIONS['QUERIES']

# Every intent is listed; None means "no wallet pass"
INTENT_PASS_KINDS: Dict[QueryIntent, Optional[WalletPassKind]] = {
    QueryIntent.COOKING_SUGGESTION: WalletPassKind.COOKING,
    QueryIntent.SHOPPING_LIST: WalletPassKind.SHOPPING,
    QueryIntent.FINANCIAL_INSIGHT: WalletPassKind.INSIGHT,
    QueryIntent.SPENDING_ANALYSIS: None,
    QueryIntent.GENERAL_HELP: None,
}

PASS_TITLES: Dict[WalletPassKind, str] = {
    WalletPassKind.COOKING: "Cooking Suggestions",
    WalletPassKind.SHOPPING: "Shopping List",
    WalletPassKind.INSIGHT: "Financial Insight",
}


def truncate_description(text: str, limit: int = PASS_DESCRIPTION_LIMIT) -> str:
    """First `limit` characters of the response followed by an ellipsis."""
    return f"{text[:limit]}..."


def build_query_pass(query_id: str, user_id: str, answer: QueryAnswer) -> Optional[WalletPass]:
    """Wallet pass for an answer, or None when its intent yields no pass."""
    kind = INTENT_PASS_KINDS[answer.intent]
    if kind is None:
        return None

    return WalletPass(
        id=wallet_pass_id(kind, query_id),
        user_id=user_id,
        type=kind,
        title=PASS_TITLES[kind],
        description=truncate_description(answer.response),
        data={
            "query_id": query_id,
            "intent": answer.intent.value,
            "suggestions": answer.suggestions,
            "data": answer.data,
        },
    )


async def get_recent_receipts(
    deps: PipelineDependencies,
    user_id: str,
    limit: int = QUERY_CONTEXT_RECEIPT_LIMIT,
) -> List[Receipt]:
    """
    Fetch the user's most recent receipts, newest first.

    Rows that do not parse as a Receipt are skipped with a warning so a
    single bad record cannot block every query of that user.
    """
    rows = await deps.store.filter_by(
        RECEIPTS,
        "user_id",
        user_id,
        order_by="created_at",
        descending=True,
        limit=limit,
    )

    receipts = []
    for row in rows:
        try:
            receipts.append(Receipt.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(f"Skipping unreadable receipt {row.get('id')}: {e.error_count()} error(s)")

    logger.debug(f"Loaded {len(receipts)} receipts as context for user {user_id}")
    return receipts[:limit]


async def process_query(
    deps: PipelineDependencies,
    event: QuerySubmittedEvent,
) -> Optional[WalletPass]:
    """
    Answer a submitted query and derive its wallet pass when the intent calls for one.

    Returns:
        The wallet pass, or None for general_help / spending_analysis.

    Raises:
        NotFound: The query record does not exist.
        ValidationError: The query belongs to another user.
        MalformedModelOutput: Gemini's reply was not a QueryAnswer.
        TransientIO: Store or model unavailable.
    """
    logger.info(f"Processing query {event.query_id} for user {event.user_id}")

    query = await deps.store.get(QUERIES, event.query_id)
    if query is None:
        raise NotFound(QUERIES, event.query_id)
    if query.get("user_id") != event.user_id:
        raise ValidationError(
            f"Query {event.query_id} does not belong to user {event.user_id}"
        )

    receipts = await get_recent_receipts(deps, event.user_id)
    prompt = build_query_prompt(
        query=event.query,
        language=event.language,
        receipt_context=build_receipt_context(receipts),
    )

    answer = await deps.extractor.extract(
        prompt,
        QueryAnswer,
        system_instruction=QUERY_SYSTEM_PROMPT,
    )
    logger.info(
        f"Query {event.query_id} answered: intent={answer.intent.value}, "
        f"confidence={answer.confidence:.2f}"
    )

    now = deps.clock()
    await deps.store.update(
        QUERIES,
        event.query_id,
        {"response": answer.response, "updated_at": now.isoformat()},
    )

    wallet_pass = build_query_pass(event.query_id, event.user_id, answer)
    if wallet_pass is None:
        logger.info(f"Successfully processed query {event.query_id} (no wallet pass)")
        return None

    try:
        stored = await upsert_wallet_pass(deps.store, wallet_pass, now)
    except Exception:
        logger.error(
            f"Query {event.query_id} response saved but wallet pass {wallet_pass.id} failed"
        )
        raise

    logger.info(f"Successfully processed query {event.query_id}")
    return stored
