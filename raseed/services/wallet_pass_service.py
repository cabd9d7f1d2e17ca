"""
Wallet pass persistence service.

RULES:
1. Pass ids are derived from the source record with wallet_pass_id(); the
   same source always maps to the same pass, which is what makes
   re-processing an event idempotent.
2. third_party_integration passes are the only exception: each request gets
   a fresh id (integration_pass_id) and repeated requests create new passes.
3. A pass is written only after its source record was committed.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict

from raseed.db.record_store import RecordStore
from raseed.errors import NotFound
from raseed.schemas.common import WalletPassKind
from raseed.schemas.wallet_passes import WalletPass
from raseed.utils.constants import COLLECTIONS

logger = logging.getLogger(__name__)

WALLET_PASSES = COLLECTIONS['WALLET_PASSES']

# Id prefix per kind. Query-derived kinds share the "query" prefix because a
# query yields at most one pass.
PASS_ID_PREFIXES: Dict[WalletPassKind, str] = {
    WalletPassKind.RECEIPT: "receipt",
    WalletPassKind.COOKING: "query",
    WalletPassKind.SHOPPING: "query",
    WalletPassKind.INSIGHT: "query",
    WalletPassKind.STOCK_ITEM: "stock",
    WalletPassKind.THIRD_PARTY_BILL: "bill",
}


def wallet_pass_id(kind: WalletPassKind, source_id: str) -> str:
    """
    Derive the deterministic pass id for a source record.

    >>> wallet_pass_id(WalletPassKind.RECEIPT, "r1")
    'receipt_r1'

    Raises:
        ValueError: For kinds without a deterministic id
            (third_party_integration).
    """
    prefix = PASS_ID_PREFIXES.get(kind)
    if prefix is None:
        raise ValueError(f"Wallet pass kind {kind.value} has no deterministic id")
    return f"{prefix}_{source_id}"


def integration_pass_id(service: str, user_id: str, now: datetime) -> str:
    """
    Fresh id for a third-party integration pass (not idempotent).

    Format: integration_<service>_<unix seconds>_<user_id>_<8 hex chars>.
    The random suffix keeps requests from the same user in the same second
    apart.
    """
    return f"integration_{service}_{int(now.timestamp())}_{user_id}_{uuid.uuid4().hex[:8]}"


async def upsert_wallet_pass(
    store: RecordStore,
    wallet_pass: WalletPass,
    now: datetime,
) -> WalletPass:
    """
    Create a wallet pass, or update it in place if it already exists.

    The created_at of an existing pass is kept; updated_at is always `now`.

    Returns:
        The pass as written.
    """
    existing = await store.get(WALLET_PASSES, wallet_pass.id)
    created_at = now
    if existing is not None:
        created_at = WalletPass.model_validate(existing).created_at or now

    stored = wallet_pass.model_copy(update={"created_at": created_at, "updated_at": now})
    await store.set(WALLET_PASSES, stored.id, stored.model_dump(mode="json"))

    logger.info(
        f"Wallet pass {'updated' if existing else 'created'}: "
        f"id={stored.id}, type={stored.type.value}, user_id={stored.user_id}"
    )
    return stored


async def create_wallet_pass(store: RecordStore, wallet_pass: WalletPass, now: datetime) -> WalletPass:
    """Write a new pass without looking for an existing one."""
    stored = wallet_pass.model_copy(update={"created_at": now, "updated_at": now})
    await store.set(WALLET_PASSES, stored.id, stored.model_dump(mode="json"))
    logger.info(f"Wallet pass created: id={stored.id}, type={stored.type.value}")
    return stored


async def delete_wallet_pass(store: RecordStore, pass_id: str) -> bool:
    """
    Best-effort delete of a pass that may not exist.

    Returns:
        True if a pass was deleted, False if there was none.

    Raises:
        TransientIO: If the store is unavailable (absence is not an error,
            unavailability is).
    """
    try:
        await store.delete(WALLET_PASSES, pass_id)
    except NotFound:
        logger.info(f"Wallet pass {pass_id} did not exist; nothing to delete")
        return False

    logger.info(f"Wallet pass {pass_id} deleted")
    return True
