"""
Event payloads carried on the bus, one model per topic.

Payloads are validated here, at the boundary: a message that does not fit
its model never reaches a pipeline.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from raseed.schemas.common import (
    FreshnessStatus,
    NotificationKind,
    StockAction,
    ThirdPartyAction,
    ThirdPartyService,
)


class ReceiptUploadedEvent(BaseModel):
    """Topic `receipt-processing`."""
    receipt_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)


class QuerySubmittedEvent(BaseModel):
    """Topic `query-processing`."""
    query_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    query: str
    language: str = "en"


class StockMutatedEvent(BaseModel):
    """Topic `stock-management`."""
    item_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    action: StockAction
    status: Optional[FreshnessStatus] = None


class ThirdPartyIntegrationEvent(BaseModel):
    """Topic `third-party-integration`."""
    user_id: str = Field(..., min_length=1)
    service: ThirdPartyService
    action: ThirdPartyAction
    service_data: Optional[Union[str, Dict[str, Any]]] = None
    requested_at: Optional[str] = None


class NotificationEvent(BaseModel):
    """Topic `notification-events`, produced by the stock pipeline."""
    user_id: str
    type: NotificationKind
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
