"""Tests for the mock market universe and generated fundamentals."""

import random
from datetime import date

import pandas as pd
import pytest

from stocks_data import (
    FEATURED_PROFILES,
    HISTORY_DAYS,
    SECTOR_COLORS,
    SECTORS,
    SP500_STOCKS,
    build_featured_stock,
    featured_stocks,
    financial_ratios,
    generate_quarterly_data,
    get_featured_stock,
    get_quote,
    search_stocks,
    simulate_changes,
)


class TestUniverse:
    def test_tickers_unique(self):
        tickers = [s["ticker"] for s in SP500_STOCKS]
        assert len(tickers) == len(set(tickers)) == 48

    def test_sectors_known_and_coloured(self):
        assert {s["sector"] for s in SP500_STOCKS} == set(SECTORS)
        assert set(SECTOR_COLORS) == set(SECTORS)

    def test_positive_market_caps(self):
        assert all(s["market_cap"] > 0 for s in SP500_STOCKS)


class TestFundamentals:
    def test_twenty_quarters_oldest_first(self):
        quarterly = generate_quarterly_data(100, 0.15, rng=random.Random(1))
        assert len(quarterly) == 20
        assert quarterly["quarter"].iloc[0] == "Q1 2021"
        assert quarterly["quarter"].iloc[-1] == "Q4 2025"
        assert list(quarterly.columns) == ["quarter", "revenue", "expenses", "ebitda", "net_income"]
        assert (quarterly["revenue"] > quarterly["expenses"]).all()

    def test_ratio_floors(self):
        income = {"net_income": 1e6, "revenue": 1e6}
        balance = {"total_equity": 1e6, "total_assets": 4e6, "total_liabilities": 1.5e6,
                   "current_assets": 2e6, "current_liabilities": 0.8e6, "inventory": 0.3e6}
        ratios = financial_ratios(1.0, income, balance)
        assert ratios["pe"] == 5
        assert ratios["ps"] == 2
        assert ratios["pb"] == 1.5
        assert ratios["pcf"] == 8
        assert ratios["debt_to_equity"] == pytest.approx(1.5)
        assert ratios["quick_ratio"] == pytest.approx(1.7 / 0.8)


class TestFeatured:
    def test_seed_reproduces_stock(self):
        end = date(2025, 3, 3)
        first = build_featured_stock(FEATURED_PROFILES[0], seed=7, end=end)
        second = build_featured_stock(FEATURED_PROFILES[0], seed=7, end=end)
        pd.testing.assert_frame_equal(first["quarterly"], second["quarterly"])
        pd.testing.assert_frame_equal(first["historical_ratios"], second["historical_ratios"])
        assert first["technical_indicators"] == second["technical_indicators"]

    def test_history_ends_on_requested_day(self):
        stock = build_featured_stock(FEATURED_PROFILES[1], seed=1, end=date(2025, 3, 3))
        history = stock["historical_technical"]
        assert len(history) == HISTORY_DAYS
        assert history.index[-1] == pd.Timestamp(2025, 3, 3)
        assert history.index.is_monotonic_increasing

    def test_profile_internals_dropped(self):
        stock = build_featured_stock(FEATURED_PROFILES[2], seed=1)
        assert "base_revenue" not in stock and "volatility" not in stock
        assert stock["ticker"] == "GOOGL"

    def test_featured_cache(self):
        assert featured_stocks(0) is featured_stocks(0)
        assert [s["ticker"] for s in featured_stocks(0)] == [p["ticker"] for p in FEATURED_PROFILES]

    def test_lookup(self):
        assert get_featured_stock("nvda")["price"] == 454.72
        assert get_featured_stock("XOM") is None


class TestQuotes:
    def test_featured_quote(self):
        assert get_quote("aapl") == {"ticker": "AAPL", "name": "Apple Inc.", "price": 178.52,
                                     "change": 2.34, "market_cap": 2890}

    def test_synthetic_price(self):
        quote = get_quote("BRK.B")
        assert quote["name"] == "Berkshire"
        assert quote["price"] == pytest.approx(117.75)

    def test_unknown(self):
        assert get_quote("ZZZZ") is None


class TestSearch:
    def test_ticker_and_name_match(self):
        assert search_stocks("app")[0]["ticker"] == "AAPL"
        assert any(s["ticker"] == "JPM" for s in search_stocks("morgan"))

    def test_blank_query(self):
        assert search_stocks("   ") == []

    def test_limit(self):
        assert len(search_stocks("a", limit=3)) == 3

    def test_featured_not_duplicated(self):
        assert [s["ticker"] for s in search_stocks("apple")].count("AAPL") == 1


def test_simulate_changes_bounded():
    tickers = tuple(s["ticker"] for s in SP500_STOCKS)
    changes = simulate_changes(tickers, rng=random.Random(0), spread=2.0)
    assert set(changes) == set(tickers)
    assert all(-2.0 <= c <= 2.0 for c in changes.values())
    assert changes == simulate_changes(tickers, rng=random.Random(0), spread=2.0)
