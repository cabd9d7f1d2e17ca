"""
Pydantic schemas for bills ingested from third-party services.

Vendor payloads differ per service; every source normalizes into ThirdPartyBill.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from raseed.schemas.common import ThirdPartyService


class BillItem(BaseModel):
    """A single line of a third-party bill."""
    name: str
    price: float
    quantity: int = Field(1, ge=0)
    category: str = ""


class ThirdPartyBill(BaseModel):
    """Common bill record, independent of the vendor it came from."""
    id: str
    user_id: str
    service: ThirdPartyService
    order_id: str
    restaurant: str = Field(..., description="Vendor (restaurant or store) name")
    total_amount: float
    items: List[BillItem] = Field(default_factory=list)
    order_date: datetime
    status: str = Field("delivered", description="Delivery status reported by the vendor")
    created_at: Optional[datetime] = None
