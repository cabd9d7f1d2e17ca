"""
Enumerations shared by records and events.

All enums are str-valued so they serialize to the exact strings stored in
the record store and carried on the bus. Pydantic rejects any other value.
"""

from datetime import datetime, timezone
from enum import Enum


class ReceiptStatus(str, Enum):
    UPLOADED = "uploaded"
    EXTRACTED = "extracted"
    FINALIZED = "finalized"


class FreshnessStatus(str, Enum):
    FRESH = "fresh"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class StockAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class QueryIntent(str, Enum):
    COOKING_SUGGESTION = "cooking_suggestion"
    SPENDING_ANALYSIS = "spending_analysis"
    SHOPPING_LIST = "shopping_list"
    FINANCIAL_INSIGHT = "financial_insight"
    GENERAL_HELP = "general_help"


class WalletPassKind(str, Enum):
    RECEIPT = "receipt"
    COOKING = "cooking"
    SHOPPING = "shopping"
    INSIGHT = "insight"
    STOCK_ITEM = "stock_item"
    THIRD_PARTY_BILL = "third_party_bill"
    THIRD_PARTY_INTEGRATION = "third_party_integration"


class NotificationKind(str, Enum):
    STOCK_EXPIRY = "stock_expiry"


class ThirdPartyService(str, Enum):
    ZOMATO = "zomato"
    BLINKIT = "blinkit"


class ThirdPartyAction(str, Enum):
    FETCH_BILLS = "fetch_bills"
    CREATE_PASS = "create_pass"


def utc_now() -> datetime:
    """Timezone-aware current time; the default clock for every pipeline."""
    return datetime.now(timezone.utc)
