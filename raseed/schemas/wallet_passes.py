"""
Pydantic schema for wallet pass artifacts.

Passes are derived by the pipelines only; end users never create them.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from raseed.schemas.common import WalletPassKind


class WalletPass(BaseModel):
    """
    Display-ready summary record surfaced to the wallet system.

    For every kind except third_party_integration the id is derived from the
    source record, so re-processing updates the same pass.
    """
    id: str
    user_id: str
    type: WalletPassKind
    title: str
    description: str = ""
    data: Dict[str, Any] = Field(default_factory=dict, description="Opaque JSON payload")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
