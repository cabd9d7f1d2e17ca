"""
Third-party ingestion pipeline.

Consumes `third-party-integration` events:

- fetch_bills: pull bills from the service's source, persist each as a
  ThirdPartyBill and derive its `bill_<id>` wallet pass. A failing bill is
  logged and skipped; the rest of the batch continues.
- create_pass: wrap the caller's service data in a
  `third_party_integration` wallet pass. These ids are timestamped, so a
  redelivered event creates a second pass.

Unsupported services/actions are rejected before anything is written.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from raseed.errors import PipelineError, TransientIO, ValidationError
from raseed.schemas.common import ThirdPartyAction, ThirdPartyService, WalletPassKind
from raseed.schemas.events import ThirdPartyIntegrationEvent
from raseed.schemas.third_party import ThirdPartyBill
from raseed.schemas.wallet_passes import WalletPass
from raseed.services.dependencies import PipelineDependencies
from raseed.services.third_party_sources import BILL_SOURCES, BillSource
from raseed.services.wallet_pass_service import (
    create_wallet_pass,
    integration_pass_id,
    upsert_wallet_pass,
    wallet_pass_id,
)
from raseed.utils.constants import COLLECTIONS

logger = logging.getLogger(__name__)

THIRD_PARTY_BILLS = COLLECTIONS['THIRD_PARTY_BILLS']


def build_bill_pass(bill: ThirdPartyBill) -> WalletPass:
    return WalletPass(
        id=wallet_pass_id(WalletPassKind.THIRD_PARTY_BILL, bill.id),
        user_id=bill.user_id,
        type=WalletPassKind.THIRD_PARTY_BILL,
        title=f"{bill.service.value} - {bill.restaurant}",
        description=f"Order: {bill.order_id}, Total: ${bill.total_amount:.2f}",
        data={
            "bill_id": bill.id,
            "service": bill.service.value,
            "order_id": bill.order_id,
            "restaurant": bill.restaurant,
            "total_amount": bill.total_amount,
            "items_count": len(bill.items),
            "order_date": bill.order_date.strftime("%Y-%m-%d"),
            "status": bill.status,
        },
    )


def parse_service_data(service_data: Optional[str | Dict[str, Any]]) -> Dict[str, Any]:
    """
    Decode the opaque service payload of a create_pass request.

    Raises:
        ValidationError: Missing, not JSON, or not a JSON object.
    """
    if service_data is None or service_data == "":
        raise ValidationError("service_data is required for create_pass")

    if isinstance(service_data, dict):
        return service_data

    try:
        parsed = json.loads(service_data)
    except json.JSONDecodeError as e:
        raise ValidationError(f"service_data is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ValidationError("service_data must be a JSON object")
    return parsed


async def fetch_bills(
    deps: PipelineDependencies,
    event: ThirdPartyIntegrationEvent,
    sources: Mapping[ThirdPartyService, BillSource] = BILL_SOURCES,
) -> List[WalletPass]:
    """
    Ingest every bill the service reports for the user.

    Returns:
        Wallet passes written for the bills that succeeded.

    Raises:
        ValidationError: No source is registered for the service.
        TransientIO: Every bill failed on store unavailability (the batch
            is safe to redeliver because bill and pass ids are deterministic).
    """
    source = sources.get(event.service)
    if source is None:
        raise ValidationError(f"unsupported service: {event.service.value}")

    now = deps.clock()
    raw_bills = source.fetch_raw(event.user_id, now)

    passes: List[WalletPass] = []
    transient_failures = 0
    for raw in raw_bills:
        try:
            bill = source.normalize(event.user_id, raw, now)
        except (KeyError, TypeError, PydanticValidationError) as e:
            logger.error(f"Skipping malformed {event.service.value} bill: {type(e).__name__}: {e}")
            continue

        try:
            await deps.store.set(THIRD_PARTY_BILLS, bill.id, bill.model_dump(mode="json"))
        except PipelineError as e:
            if isinstance(e, TransientIO):
                transient_failures += 1
            logger.error(f"Failed to save bill {bill.id}: {e}")
            continue

        try:
            passes.append(await upsert_wallet_pass(deps.store, build_bill_pass(bill), now))
        except PipelineError as e:
            if isinstance(e, TransientIO):
                transient_failures += 1
            logger.error(f"Failed to create wallet pass for bill {bill.id}: {e}")

    if raw_bills and transient_failures == len(raw_bills):
        raise TransientIO(f"All {len(raw_bills)} {event.service.value} bills failed to persist")

    logger.info(
        f"Successfully fetched {len(raw_bills)} bills from {event.service.value} "
        f"({len(passes)} wallet passes)"
    )
    return passes


async def create_integration_pass(
    deps: PipelineDependencies,
    event: ThirdPartyIntegrationEvent,
) -> WalletPass:
    """
    Create a wallet pass carrying the caller's service data.

    Raises:
        ValidationError: service_data is missing or not a JSON object.
    """
    service_data = parse_service_data(event.service_data)
    now = deps.clock()

    wallet_pass = WalletPass(
        id=integration_pass_id(event.service.value, event.user_id, now),
        user_id=event.user_id,
        type=WalletPassKind.THIRD_PARTY_INTEGRATION,
        title=f"{event.service.value} Integration",
        description=f"Action: {event.action.value}",
        data={
            "service": event.service.value,
            "action": event.action.value,
            "service_data": service_data,
            "requested_at": event.requested_at,
        },
    )
    return await create_wallet_pass(deps.store, wallet_pass, now)


async def process_third_party_event(
    deps: PipelineDependencies,
    event: ThirdPartyIntegrationEvent,
    sources: Mapping[ThirdPartyService, BillSource] = BILL_SOURCES,
) -> List[WalletPass]:
    """Dispatch a third-party integration event to its action."""
    logger.info(
        f"Processing third-party integration for user {event.user_id}, "
        f"service {event.service.value}, action {event.action.value}"
    )

    if event.action == ThirdPartyAction.FETCH_BILLS:
        return await fetch_bills(deps, event, sources)
    if event.action == ThirdPartyAction.CREATE_PASS:
        return [await create_integration_pass(deps, event)]

    raise ValidationError(f"unknown action: {event.action.value}")
