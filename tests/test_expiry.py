"""Tests for expiry classification."""

import pytest
from datetime import date, datetime, timedelta, timezone

from market_takip.services.expiry import ExpiryStatus, classify, days_remaining, status_for


class TestDaysRemaining:
    """Tests for days_remaining."""

    def test_same_day_at_midnight(self):
        assert days_remaining(date(2024, 6, 10), date(2024, 6, 10)) == 0

    def test_future_date(self):
        assert days_remaining(date(2024, 6, 13), date(2024, 6, 10)) == 3

    def test_past_date(self):
        assert days_remaining(date(2024, 6, 9), date(2024, 6, 10)) == -1

    def test_rounds_up_partial_days(self):
        """Test that part of a day counts as a whole remaining day."""
        now = datetime(2024, 6, 10, 18, 0)

        assert days_remaining(date(2024, 6, 12), now) == 2
        assert days_remaining(date(2024, 6, 11), now) == 1

    def test_expiry_day_in_progress(self):
        """Test that the expiry day itself counts as zero until it ends."""
        now = datetime(2024, 6, 10, 23, 59)

        assert days_remaining(date(2024, 6, 10), now) == 0
        assert days_remaining(date(2024, 6, 9), now) == -1

    def test_aware_datetime_uses_utc(self):
        """Test that aware timestamps are compared in UTC."""
        istanbul = timezone(timedelta(hours=3))
        now = datetime(2024, 6, 10, 2, 0, tzinfo=istanbul)  # 2024-06-09 23:00 UTC

        assert days_remaining(date(2024, 6, 10), now) == 1

    def test_deterministic(self):
        now = datetime(2024, 6, 10, 8, 15)
        results = {status_for(date(2024, 6, 14), now) for _ in range(10)}

        assert results == {ExpiryStatus.WARNING}


class TestClassify:
    """Tests for the status boundary table."""

    @pytest.mark.parametrize("days,expected", [
        (-30, ExpiryStatus.EXPIRED),
        (-1, ExpiryStatus.EXPIRED),
        (0, ExpiryStatus.CRITICAL),
        (3, ExpiryStatus.CRITICAL),
        (4, ExpiryStatus.WARNING),
        (7, ExpiryStatus.WARNING),
        (8, ExpiryStatus.OK),
        (365, ExpiryStatus.OK),
    ])
    def test_boundaries(self, days, expected):
        assert classify(days) is expected

    def test_status_for(self):
        today = date(2024, 6, 10)

        assert status_for(today + timedelta(days=3), today) is ExpiryStatus.CRITICAL
        assert status_for(today + timedelta(days=8), today) is ExpiryStatus.OK
