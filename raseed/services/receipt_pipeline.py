"""
Receipt pipeline.

Consumes `receipt-processing` events. Per receipt the state moves
uploaded -> extracted -> finalized:

1. Download the image and extract store, totals and items with Gemini
2. Write the extracted fields to the receipt (status: extracted)
3. Create or update the `receipt_<id>` wallet pass
4. Mark the receipt finalized

Any failure before step 2 leaves the receipt untouched in `uploaded`; the
wallet pass is never written before the receipt update succeeded.
"""

import logging

from raseed.agents.receipt.prompts import RECEIPT_SYSTEM_PROMPT, build_receipt_extraction_prompt
from raseed.errors import NotFound, ValidationError
from raseed.schemas.common import ReceiptStatus, WalletPassKind
from raseed.schemas.events import ReceiptUploadedEvent
from raseed.schemas.receipts import ReceiptExtraction
from raseed.schemas.wallet_passes import WalletPass
from raseed.services.dependencies import PipelineDependencies
from raseed.services.wallet_pass_service import upsert_wallet_pass, wallet_pass_id
from raseed.utils.constants import COLLECTIONS

logger = logging.getLogger(__name__)

RECEIPTS = COLLECTIONS['RECEIPTS']


def build_receipt_pass(receipt_id: str, user_id: str, extraction: ReceiptExtraction) -> WalletPass:
    """Wallet pass summarizing an extracted receipt."""
    items_count = len(extraction.items)
    return WalletPass(
        id=wallet_pass_id(WalletPassKind.RECEIPT, receipt_id),
        user_id=user_id,
        type=WalletPassKind.RECEIPT,
        title=f"Receipt - {extraction.store_name}",
        description=f"Total: ${extraction.total_amount:.2f}, Items: {items_count}",
        data={
            "receipt_id": receipt_id,
            "store_name": extraction.store_name,
            "total_amount": extraction.total_amount,
            "items_count": items_count,
            "date": extraction.date,
        },
    )


async def process_receipt_upload(
    deps: PipelineDependencies,
    event: ReceiptUploadedEvent,
) -> WalletPass:
    """
    Extract a freshly uploaded receipt and derive its wallet pass.

    Args:
        deps: Store, extractor and image loader
        event: The `receipt-processing` payload

    Returns:
        The wallet pass as written.

    Raises:
        NotFound: The receipt record (or its image) does not exist.
        ValidationError: The receipt belongs to a different user.
        MalformedModelOutput: Gemini's reply was not a receipt extraction.
        TransientIO: Store, image host or model unavailable.
    """
    logger.info(f"Processing receipt {event.receipt_id} for user {event.user_id}")

    receipt = await deps.store.get(RECEIPTS, event.receipt_id)
    if receipt is None:
        raise NotFound(RECEIPTS, event.receipt_id)
    if receipt.get("user_id") != event.user_id:
        raise ValidationError(
            f"Receipt {event.receipt_id} does not belong to user {event.user_id}"
        )

    image = await deps.image_loader.load(event.image_url)
    extraction = await deps.extractor.extract(
        build_receipt_extraction_prompt(),
        ReceiptExtraction,
        image=image,
        system_instruction=RECEIPT_SYSTEM_PROMPT,
    )
    logger.debug(
        f"Receipt {event.receipt_id} extracted: store={extraction.store_name}, "
        f"total={extraction.total_amount}, items={len(extraction.items)}"
    )

    now = deps.clock()

    # id, user_id and image_url are never written by the pipeline
    await deps.store.update(
        RECEIPTS,
        event.receipt_id,
        {
            "store_name": extraction.store_name,
            "total_amount": extraction.total_amount,
            "tax_amount": extraction.tax_amount,
            "items": [item.model_dump() for item in extraction.items],
            "date": extraction.date,
            "processing_status": ReceiptStatus.EXTRACTED.value,
            "updated_at": now.isoformat(),
        },
    )

    wallet_pass = await upsert_wallet_pass(
        deps.store,
        build_receipt_pass(event.receipt_id, event.user_id, extraction),
        now,
    )

    await deps.store.update(
        RECEIPTS,
        event.receipt_id,
        {"processing_status": ReceiptStatus.FINALIZED.value, "updated_at": now.isoformat()},
    )

    logger.info(f"Successfully processed receipt {event.receipt_id}")
    return wallet_pass
