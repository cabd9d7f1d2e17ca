"""
Topic routing and error classification for consumed events.

run_pipeline is the single place where the error taxonomy becomes a
transport decision:

- TransientIO          -> re-raised; the actor's retry policy redelivers it
- any other PipelineError -> logged, message acknowledged (no retry)
- anything else        -> re-raised; not retried, so the message fails
                          visibly instead of looping
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from raseed.errors import MalformedModelOutput, PipelineError, TransientIO, ValidationError
from raseed.schemas.events import (
    QuerySubmittedEvent,
    ReceiptUploadedEvent,
    StockMutatedEvent,
    ThirdPartyIntegrationEvent,
)
from raseed.services.dependencies import PipelineDependencies
from raseed.services.query_pipeline import process_query
from raseed.services.receipt_pipeline import process_receipt_upload
from raseed.services.stock_pipeline import process_stock_mutation
from raseed.services.third_party_pipeline import process_third_party_event
from raseed.utils.constants import TOPICS
from raseed.utils.logging import truncate_for_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    event_model: Type[BaseModel]
    handler: Callable[[PipelineDependencies, Any], Awaitable[Any]]


ROUTES: Dict[str, Route] = {
    TOPICS['RECEIPT_PROCESSING']: Route(ReceiptUploadedEvent, process_receipt_upload),
    TOPICS['QUERY_PROCESSING']: Route(QuerySubmittedEvent, process_query),
    TOPICS['STOCK_MANAGEMENT']: Route(StockMutatedEvent, process_stock_mutation),
    TOPICS['THIRD_PARTY_INTEGRATION']: Route(ThirdPartyIntegrationEvent, process_third_party_event),
}


def decode_event(event_model: Type[BaseModel], payload: Any) -> BaseModel:
    """
    Validate a raw message payload (dict or JSON text) against its event model.

    Raises:
        ValidationError: The payload is not JSON or does not fit the model.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Event payload is not valid JSON: {e}") from e

    try:
        return event_model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {event_model.__name__} payload: {e.error_count()} error(s): "
            + "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        ) from e


def run_pipeline(deps: PipelineDependencies, topic: str, payload: Any) -> Any:
    """
    Decode `payload` for `topic`, run its pipeline, and classify failures.

    Returns:
        The pipeline result, or None when the message was dropped.

    Raises:
        TransientIO: For redelivery by the transport.
        KeyError: If no pipeline consumes `topic`.
    """
    route = ROUTES[topic]

    try:
        event = decode_event(route.event_model, payload)
        return asyncio.run(route.handler(deps, event))
    except TransientIO as e:
        logger.warning(f"Transient failure on {topic}, will retry: {e.message}")
        raise
    except MalformedModelOutput as e:
        logger.error(
            f"Dropping {topic} message: {e.code}: {e.message}. "
            f"Raw output: {truncate_for_log(e.raw_text)}"
        )
    except PipelineError as e:
        logger.error(f"Dropping {topic} message: {e.code}: {e.message}")

    return None
