"""Tests for the dashboard page view models."""

import logging

import pytest

import dashboard_data
from portfolio_store import PortfolioStore


@pytest.fixture
def store(config_path, fixed_clock):
    return PortfolioStore(config_path, clock=fixed_clock)


class TestHoldings:
    def test_resolve_exact_symbol(self):
        assert dashboard_data.resolve_ticker(" amd ") == "AMD"

    @pytest.mark.parametrize("text", ["", "   ", "APP", "Apple"])
    def test_resolve_needs_exact_symbol(self, text):
        assert dashboard_data.resolve_ticker(text) is None

    def test_add_to_portfolio_defaults_to_one_share(self, store, caplog):
        with caplog.at_level(logging.INFO, logger="dashboard_data"):
            assert dashboard_data.add_holding(store, "portfolio", "amd") is True
        assert store.get_portfolio_item("AMD")["quantity"] == 1
        assert "Added AMD to portfolio" in caplog.text

    def test_add_with_quantity(self, store):
        dashboard_data.add_holding(store, "portfolio", "JPM", 12)
        assert store.get_portfolio_item("JPM")["quantity"] == 12

    def test_add_already_held_changes_nothing(self, store):
        before = store.get_portfolio_item("AAPL")["quantity"]
        assert dashboard_data.add_holding(store, "portfolio", "aapl", 5) is False
        assert store.get_portfolio_item("AAPL")["quantity"] == before

    def test_add_to_watchlist(self, store):
        assert dashboard_data.add_holding(store, "watchlist", "XOM") is True
        assert store.is_in_watchlist("XOM")
        assert not store.is_in_portfolio("XOM")
        assert dashboard_data.add_holding(store, "watchlist", "XOM") is False

    def test_remove_per_mode(self, store):
        dashboard_data.remove_holding(store, "watchlist", "META")
        dashboard_data.remove_holding(store, "portfolio", "MSFT")
        assert not store.is_in_watchlist("META")
        assert not store.is_in_portfolio("MSFT")
        assert store.is_in_portfolio("AAPL")

    @pytest.mark.parametrize("call", [
        lambda s: dashboard_data.add_holding(s, "market", "AMD"),
        lambda s: dashboard_data.remove_holding(s, "news", "AAPL"),
        lambda s: dashboard_data.is_held(s, "", "AAPL"),
    ])
    def test_unknown_mode_rejected(self, store, call):
        with pytest.raises(ValueError):
            call(store)

    def test_portfolio_rows_apply_changes(self, store):
        rows = {r["ticker"]: r for r in dashboard_data.holding_rows(store, "portfolio", {"AAPL": -1.5})}
        assert list(rows) == ["AAPL", "MSFT", "GOOGL", "NVDA"]
        assert rows["AAPL"]["change"] == "-1.50%"
        assert rows["AAPL"]["change_value"] == -1.5
        assert rows["AAPL"]["price"] == "$178.52"
        assert rows["AAPL"]["value"] == "$8,926"
        assert rows["MSFT"]["change"] == "+1.87%"

    def test_watchlist_rows_have_no_value(self, store):
        rows = dashboard_data.holding_rows(store, "watchlist")
        assert [r["ticker"] for r in rows] == ["AMZN", "META", "TSLA"]
        assert all(r["quantity"] is None and r["value"] == "" for r in rows)


class TestNewsAndCalendars:
    def test_news_filtered_by_tickers(self, fixed_clock):
        rows = dashboard_data.news_rows(["nvda", "AAPL"], now=fixed_clock())
        assert [r["ticker"] for r in rows] == ["AAPL", "NVDA"]
        assert rows[0]["age"] == "2h ago"
        assert rows[0]["logo_url"] == "https://logo.clearbit.com/apple.com"

    @pytest.mark.parametrize("tickers", [None, []])
    def test_no_tickers_means_all_news(self, fixed_clock, tickers):
        rows = dashboard_data.news_rows(tickers, now=fixed_clock())
        assert len(rows) == 8
        assert rows[-1]["age"] == "Yesterday"

    def test_earnings_today(self, today):
        rows = dashboard_data.earnings_rows("today", today)
        assert [r["ticker"] for r in rows] == ["AAPL", "MSFT"]
        assert rows[0]["date"] == "Today"
        assert rows[0]["time"] == "After Close"
        assert rows[0]["eps_estimate"] == "$2.35"
        assert rows[0]["revenue_estimate"] == "$94.5B"
        assert rows[0]["eps_actual"] == rows[0]["surprise"] == "-"

    def test_earnings_week_reports_surprise(self, today):
        rows = {r["ticker"]: r for r in dashboard_data.earnings_rows("week", today)}
        assert "NFLX" not in rows
        assert rows["JPM"]["time"] == "Before Open"
        assert rows["META"]["eps_actual"] == "$5.45"
        assert rows["META"]["surprise"] == "+3.22%"
        assert rows["META"]["date"] == "Wed, Mar 5"

    def test_macro_rows_in_time_order(self, today):
        rows = dashboard_data.macro_rows("all", today, tz="UTC")
        assert len(rows) == 8
        first = rows[0]
        assert (first["flag"], first["country"], first["event"]) == ("🇨🇳", "China", "Manufacturing PMI")
        assert first["date"] == "Tomorrow"
        assert first["time"] == "1:30 AM UTC"
        assert first["actual"] == "-"
        assert rows[1]["time"] == "1:30 PM UTC"

    def test_macro_today_is_empty(self, today):
        assert dashboard_data.macro_rows("today", today, tz="UTC") == []

    def test_corporate_rows_count_down(self, today):
        rows = dashboard_data.corporate_rows(today)
        assert [r["days_until"] for r in rows] == [5, 8, 10, 12, 15, 20, 25]
        assert rows[0]["event"] == "WWDC 2025"
        assert rows[0]["date"] == "Sat, Mar 8"


class TestAnalysis:
    def test_only_featured_stocks_have_overview(self):
        assert dashboard_data.stock_overview("XOM") is None

    def test_overview_contents(self):
        overview = dashboard_data.stock_overview("aapl", seed=0)
        assert overview["ticker"] == "AAPL"
        assert overview["price"] == "$178.52"
        assert overview["change"] == "+2.34%"
        assert overview["market_cap"] == "$2.9T"
        assert set(overview["signals"]) == {"rsi", "macd", "bollinger", "sma20", "sma50", "sma200"}
        assert len(overview["ratios"]) == 10
        assert all(r["health"] in ("good", "concern") for r in overview["ratios"])
        assert len(overview["pe_history"]) == 365
        assert 0 <= overview["rsi_30d"] <= 100

    def test_three_year_history(self):
        assert len(dashboard_data.stock_overview("MSFT", period="3year")["pe_history"]) == 1095

    def test_overview_is_seeded(self):
        assert dashboard_data.stock_overview("NVDA", seed=3)["ratios"] == \
            dashboard_data.stock_overview("NVDA", seed=3)["ratios"]

    def test_benchmark_ranks_lower_pe_first(self):
        rows = dashboard_data.benchmark_rows("pe", seed=0)
        assert [r["rank"] for r in rows] == list(range(1, 7))
        values = [float(r["value"]) for r in rows]
        assert values == sorted(values)

    def test_benchmark_ranks_higher_roe_first(self):
        values = [float(r["value"]) for r in dashboard_data.benchmark_rows("roe", seed=0)]
        assert values == sorted(values, reverse=True)
