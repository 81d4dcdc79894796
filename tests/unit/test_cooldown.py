"""Unit tests for tool-switch cooldown arithmetic."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from lms.tools.cooldown import cooldown_elapsed, elapsed_days, remaining_days

SINCE = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestCooldown:
    def test_fractional_days(self):
        assert elapsed_days(SINCE, SINCE + timedelta(hours=36)) == 1.5

    def test_29_9_days_not_elapsed(self):
        now = SINCE + timedelta(days=29.9)
        assert cooldown_elapsed(SINCE, now, 30) is False
        assert remaining_days(SINCE, now, 30) == 1

    def test_exactly_30_days_elapsed(self):
        now = SINCE + timedelta(days=30)
        assert cooldown_elapsed(SINCE, now, 30) is True
        assert remaining_days(SINCE, now, 30) == 0

    def test_remaining_rounds_up(self):
        assert remaining_days(SINCE, SINCE + timedelta(days=10, hours=1), 30) == 20

    def test_naive_storage_value_treated_as_utc(self):
        naive = datetime(2026, 1, 1)
        assert elapsed_days(naive, SINCE + timedelta(days=2)) == 2.0
