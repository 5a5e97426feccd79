"""Tests for display formatting helpers."""

import pytest

from formatters import (
    country_flag,
    format_billions,
    format_currency,
    format_currency_rounded,
    format_event_date,
    format_local_time,
    format_percent,
    format_relative_time,
    format_revenue,
)

NOW = 1_700_000_000.0


class TestNumbers:
    @pytest.mark.parametrize("value,expected", [(2890, "$2.9T"), (1000, "$1.0T"), (580, "$580B")])
    def test_billions(self, value, expected):
        assert format_billions(value) == expected

    def test_percent_is_signed(self):
        assert format_percent(2.5) == "+2.50%"
        assert format_percent(-1.2) == "-1.20%"
        assert format_percent(0) == "+0.00%"

    def test_currency(self):
        assert format_currency(178.5) == "$178.50"
        assert format_currency_rounded(12345.6) == "$12,346"

    @pytest.mark.parametrize("value,expected", [
        (2.5e12, "$2.50T"),
        (94.9e9, "$94.9B"),
        (12.3e6, "$12.3M"),
        (5000, "$5,000"),
    ])
    def test_revenue(self, value, expected):
        assert format_revenue(value) == expected


class TestTimes:
    @pytest.mark.parametrize("age,expected", [
        (30, "Just now"),
        (5 * 60, "5m ago"),
        (3 * 3600, "3h ago"),
        (30 * 3600, "Yesterday"),
        (4 * 86400, "4d ago"),
    ])
    def test_relative_time(self, age, expected):
        assert format_relative_time(NOW - age, now=NOW) == expected

    def test_event_date(self, today):
        assert format_event_date(today, today=today) == "Today"
        assert format_event_date("2025-03-04", today=today) == "Tomorrow"
        assert format_event_date("2025-03-07T13:30:00Z", today=today) == "Fri, Mar 7"

    def test_local_time(self):
        assert format_local_time("2025-01-15T14:30:00Z", tz="America/New_York") == "9:30 AM EST"
        assert format_local_time("2025-01-15T00:05:00Z", tz="UTC") == "12:05 AM UTC"

    def test_country_flag(self):
        assert country_flag("US") == "🇺🇸"
        assert country_flag("XX") == "🌐"
