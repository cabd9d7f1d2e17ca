"""
Tests for stock item freshness classification.
"""

from datetime import datetime, timedelta, timezone

import pytest

from raseed.schemas.common import FreshnessStatus
from raseed.services.freshness import compute_freshness_status

NOW = datetime(2025, 7, 20, 12, 0, 0, tzinfo=timezone.utc)


class TestComputeFreshnessStatus:

    @pytest.mark.parametrize(
        "offset, expected",
        [
            (timedelta(days=-1), FreshnessStatus.EXPIRED),
            (timedelta(seconds=-1), FreshnessStatus.EXPIRED),
            (timedelta(0), FreshnessStatus.EXPIRING_SOON),
            (timedelta(days=3), FreshnessStatus.EXPIRING_SOON),
            (timedelta(days=7) - timedelta(seconds=1), FreshnessStatus.EXPIRING_SOON),
            (timedelta(days=7), FreshnessStatus.FRESH),
            (timedelta(days=30), FreshnessStatus.FRESH),
        ],
    )
    def test_boundaries(self, offset, expected):
        assert compute_freshness_status(NOW + offset, NOW) == expected

    def test_naive_expiry_is_treated_as_utc(self):
        expiry = datetime(2025, 7, 19, 12, 0, 0)

        assert compute_freshness_status(expiry, NOW) == FreshnessStatus.EXPIRED

    def test_other_timezones_are_compared_in_utc(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        # 2025-07-27 17:00 IST is 2025-07-27 11:30 UTC, just under 7 days away
        expiry = datetime(2025, 7, 27, 17, 0, 0, tzinfo=ist)

        assert compute_freshness_status(expiry, NOW) == FreshnessStatus.EXPIRING_SOON
