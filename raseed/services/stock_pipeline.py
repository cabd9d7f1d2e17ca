"""
Stock pipeline.

Consumes `stock-management` events for inventory items:

- created/updated: keep the `stock_<id>` wallet pass in sync for perishable
  items and publish an expiry notification for expiring_soon/expired items
- deleted: remove the wallet pass if there is one

The pipeline trusts the status stamped by the request layer; it never
rewrites it. Events may arrive in any order, so an `updated` event creates
the pass if the `created` event has not been processed yet.
"""

import logging
from typing import Optional

from raseed.errors import NotFound
from raseed.schemas.common import FreshnessStatus, NotificationKind, StockAction, WalletPassKind
from raseed.schemas.events import NotificationEvent, StockMutatedEvent
from raseed.schemas.stock import StockItem
from raseed.schemas.wallet_passes import WalletPass
from raseed.services.dependencies import PipelineDependencies
from raseed.services.freshness import compute_freshness_status
from raseed.services.wallet_pass_service import (
    delete_wallet_pass,
    upsert_wallet_pass,
    wallet_pass_id,
)
from raseed.utils.constants import COLLECTIONS, PERISHABLE_CATEGORIES, TOPICS

logger = logging.getLogger(__name__)

STOCK_ITEMS = COLLECTIONS['STOCK_ITEMS']

ALERT_STATUSES = frozenset({FreshnessStatus.EXPIRING_SOON, FreshnessStatus.EXPIRED})


def is_perishable(category: str) -> bool:
    return category.strip().lower() in PERISHABLE_CATEGORIES


def build_stock_pass(item: StockItem, status: FreshnessStatus) -> WalletPass:
    """Wallet pass tracking quantity and expiry of a perishable item."""
    expiry_day = item.expiry_date.strftime("%Y-%m-%d")
    return WalletPass(
        id=wallet_pass_id(WalletPassKind.STOCK_ITEM, item.id),
        user_id=item.user_id,
        type=WalletPassKind.STOCK_ITEM,
        title=f"Stock - {item.name}",
        description=f"Quantity: {item.quantity} {item.unit}, Expires: {expiry_day}",
        data={
            "item_id": item.id,
            "name": item.name,
            "category": item.category,
            "quantity": item.quantity,
            "unit": item.unit,
            "expiry_date": item.expiry_date.isoformat(),
            "status": status.value,
        },
    )


def build_expiry_notification(item: StockItem, status: FreshnessStatus) -> NotificationEvent:
    return NotificationEvent(
        user_id=item.user_id,
        type=NotificationKind.STOCK_EXPIRY,
        title="Item Expiry Alert",
        message=f"{item.name} is {status.value}",
        data={
            "item_id": item.id,
            "item_name": item.name,
            "status": status.value,
            "expiry_date": item.expiry_date.isoformat(),
        },
    )


async def send_expiry_notification(
    deps: PipelineDependencies,
    item: StockItem,
    status: FreshnessStatus,
) -> str:
    """Publish a stock_expiry notification on `notification-events`."""
    notification = build_expiry_notification(item, status)
    message_id = await deps.bus.publish(
        TOPICS['NOTIFICATION_EVENTS'],
        notification.model_dump(mode="json"),
    )
    logger.info(f"Expiry notification sent for item {item.id} ({status.value})")
    return message_id


async def process_stock_mutation(
    deps: PipelineDependencies,
    event: StockMutatedEvent,
) -> Optional[WalletPass]:
    """
    React to a created/updated/deleted inventory item.

    Returns:
        The wallet pass written for a perishable item, otherwise None.

    Raises:
        NotFound: A created/updated item no longer exists.
        TransientIO: Store or bus unavailable.
    """
    logger.info(
        f"Processing stock management event for item {event.item_id}, "
        f"user {event.user_id}, action: {event.action.value}"
    )

    if event.action == StockAction.DELETED:
        await delete_wallet_pass(deps.store, wallet_pass_id(WalletPassKind.STOCK_ITEM, event.item_id))
        logger.info(f"Successfully processed item deletion for {event.item_id}")
        return None

    row = await deps.store.get(STOCK_ITEMS, event.item_id)
    if row is None:
        raise NotFound(STOCK_ITEMS, event.item_id)
    item = StockItem.model_validate(row)

    now = deps.clock()
    expected = compute_freshness_status(item.expiry_date, now)
    if expected != item.status:
        logger.warning(
            f"Stock item {item.id} has status {item.status.value} "
            f"but its expiry date implies {expected.value}"
        )

    status = item.status
    if event.action == StockAction.UPDATED and event.status is not None:
        status = event.status

    wallet_pass = None
    if is_perishable(item.category):
        wallet_pass = await upsert_wallet_pass(deps.store, build_stock_pass(item, status), now)

    if status in ALERT_STATUSES:
        await send_expiry_notification(deps, item, status)

    logger.info(f"Successfully processed item {event.action.value} for {event.item_id}")
    return wallet_pass
