"""
Pydantic schemas for receipts and the receipt extraction result.

A Receipt row is created by the request layer with only its image and owner;
the receipt pipeline fills in the extracted fields.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from raseed.schemas.common import ReceiptStatus


class Item(BaseModel):
    """A single line item from a receipt."""
    name: str = Field(..., description="Item name as printed on the receipt")
    price: float = Field(0.0, description="Unit price")
    quantity: int = Field(1, ge=0, description="Units purchased")
    category: str = Field("", description="Free-form tag, later used for perishability")


class Location(BaseModel):
    """Where the purchase happened, when the client supplied it."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None


class Receipt(BaseModel):
    """
    Persisted receipt record.

    INVARIANT: total_amount and items stay zero/empty until the receipt
    pipeline completes extraction. image_url is set at creation and never
    written by the pipeline.
    """
    id: str
    user_id: str
    store_name: Optional[str] = None
    total_amount: float = 0.0
    tax_amount: float = 0.0
    items: List[Item] = Field(default_factory=list)
    date: Optional[str] = Field(None, description="Transaction date, YYYY-MM-DD")
    image_url: str = ""
    location: Optional[Location] = None
    processing_status: ReceiptStatus = ReceiptStatus.UPLOADED
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReceiptExtraction(BaseModel):
    """
    JSON contract the model must return for a receipt image.

    store_name and total_amount are required: a response without them is
    malformed rather than partially applied.
    """
    store_name: str
    total_amount: float
    tax_amount: float = 0.0
    items: List[Item] = Field(default_factory=list)
    date: Optional[str] = None
