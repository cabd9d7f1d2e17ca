"""
Pydantic schemas for user queries and the conversational answer contract.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from raseed.schemas.common import QueryIntent


class Query(BaseModel):
    """
    Persisted query record.

    Only `response` (and `updated_at`) change after creation.
    """
    id: str
    user_id: str
    query: str
    language: str = "en"
    response: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QueryAnswer(BaseModel):
    """
    JSON contract the model must return for a query.

    `intent` is a closed enumeration; any other value makes the whole answer
    malformed.
    """
    response: str
    intent: QueryIntent
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    suggestions: List[str] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)
