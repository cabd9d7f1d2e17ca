"""
Pydantic schema for inventory (stock) items.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from raseed.schemas.common import FreshnessStatus


class StockItem(BaseModel):
    """
    Persisted inventory item.

    INVARIANT: status is recomputed from expiry_date by the request layer on
    every create/update (see raseed.services.freshness).
    """
    id: str
    user_id: str
    name: str
    category: str = ""
    quantity: int = Field(0, ge=0)
    unit: str = ""
    purchase_date: Optional[datetime] = None
    expiry_date: datetime
    status: FreshnessStatus = FreshnessStatus.FRESH
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
