"""Tests for the mock news and event calendars."""

from datetime import date, timedelta

import pytest

from financial_data import (
    HOUR,
    earnings_surprise,
    filter_earnings,
    filter_macro_events,
    logo_url,
    mock_corporate_events,
    mock_earnings,
    mock_macro_events,
    mock_news,
    news_feed,
    sorted_corporate_events,
)

NOW = 1_700_000_000.0


class TestNews:
    def test_timestamps_relative_to_now(self):
        news = mock_news(NOW)
        assert len(news) == 8
        assert news[0]["timestamp"] == NOW - 2 * HOUR
        assert [n["id"] for n in news[:3]] == ["1", "2", "3"]

    def test_feed_newest_first(self):
        feed = news_feed(mock_news(NOW))
        stamps = [n["timestamp"] for n in feed]
        assert stamps == sorted(stamps, reverse=True)
        assert feed[0]["ticker"] == "AAPL"

    def test_feed_filtered_by_ticker(self):
        feed = news_feed(mock_news(NOW), tickers=["nvda", "tsla"])
        assert [n["ticker"] for n in feed] == ["NVDA", "TSLA"]

    def test_logo_url(self):
        assert logo_url("aapl") == "https://logo.clearbit.com/apple.com"
        assert "name=ZZZZ" in logo_url("ZZZZ")


class TestEarnings:
    def test_today(self, today):
        picked = filter_earnings(mock_earnings(today), "today", today)
        assert [e["ticker"] for e in picked] == ["AAPL", "MSFT"]

    def test_week_includes_both_ends(self, today):
        events = mock_earnings(today)
        events.append(dict(events[0], id="edge", report_date=today + timedelta(days=7)))
        picked = filter_earnings(events, "week", today)
        assert "NFLX" not in [e["ticker"] for e in picked]
        assert picked[-1]["id"] == "edge"
        assert len(picked) == 9

    def test_unknown_period(self, today):
        with pytest.raises(ValueError):
            filter_earnings(mock_earnings(today), "month", today)

    def test_surprise(self, today):
        events = {e["ticker"]: e for e in mock_earnings(today)}
        assert earnings_surprise(events["META"]) == pytest.approx((5.45 - 5.28) / 5.28 * 100)
        assert earnings_surprise(events["AAPL"]) is None


class TestMacro:
    def test_sorted_by_time(self, today):
        events = filter_macro_events(mock_macro_events(today), "all", today)
        assert events[0]["country_code"] == "CN"
        moments = [e["date_time"] for e in events]
        assert moments == sorted(moments)

    def test_times_are_utc(self, today):
        event = mock_macro_events(today)[0]
        assert event["date_time"].utcoffset() == timedelta(0)
        assert event["date_time"].date() == date(2025, 3, 4)

    def test_periods(self, today):
        events = mock_macro_events(today)
        assert filter_macro_events(events, "today", today) == []
        assert len(filter_macro_events(events, "week", today)) == 8
        assert len(filter_macro_events(events, "week", today + timedelta(days=3))) == 4

    def test_unknown_period(self, today):
        with pytest.raises(ValueError):
            filter_macro_events(mock_macro_events(today), "year", today)


def test_corporate_events_sorted(today):
    events = list(reversed(mock_corporate_events(today)))
    ordered = sorted_corporate_events(events)
    assert ordered[0]["event_name"] == "WWDC 2025"
    assert ordered[0]["date"] == today + timedelta(days=5)
    assert [e["date"] for e in ordered] == sorted(e["date"] for e in events)
