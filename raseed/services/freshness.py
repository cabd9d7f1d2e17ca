"""
Freshness classification for stock items.

The status of a stock item is a pure function of its expiry date and the
current time. The request layer stamps it on every create/update; the stock
pipeline only uses this to notice stale statuses.
"""

from datetime import datetime, timedelta, timezone

from raseed.schemas.common import FreshnessStatus
from raseed.utils.constants import EXPIRING_SOON_DAYS


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def compute_freshness_status(expiry_date: datetime, now: datetime) -> FreshnessStatus:
    """
    Classify an item by how close it is to expiry.

    - expired:       expiry_date < now
    - expiring_soon: now <= expiry_date < now + 7 days
    - fresh:         otherwise
    """
    expiry = _as_utc(expiry_date)
    current = _as_utc(now)

    if expiry < current:
        return FreshnessStatus.EXPIRED
    if expiry < current + timedelta(days=EXPIRING_SOON_DAYS):
        return FreshnessStatus.EXPIRING_SOON
    return FreshnessStatus.FRESH
