"""
Qt-free view models for the dashboard pages around the heatmaps:
holdings editing, news, the three calendars and the stock analysis page.
"""
import time
import logging
from datetime import date

import analysis
import financial_data
from formatters import (country_flag, format_billions, format_currency, format_currency_rounded,
                        format_event_date, format_local_time, format_percent, format_relative_time,
                        format_revenue)
from heatmap_data import apply_changes, portfolio_items
from portfolio_store import VIEW_MODES
from stocks_data import featured_stocks, get_featured_stock, searchable_stocks

logger = logging.getLogger(__name__)

REPORT_TIMES = {"BMO": "Before Open", "AMC": "After Close"}


def _check_mode(mode):
    if mode not in VIEW_MODES:
        raise ValueError(f"unknown view mode {mode!r}")


# ---------------------------------------------------------------------------
# Holdings
# ---------------------------------------------------------------------------

def resolve_ticker(text):
    """Ticker for typed search text when it names a known symbol exactly, else None."""
    query = text.strip().upper()
    if not query:
        return None
    return next((s["ticker"] for s in searchable_stocks() if s["ticker"] == query), None)


def is_held(store, mode, ticker):
    _check_mode(mode)
    return store.is_in_portfolio(ticker) if mode == "portfolio" else store.is_in_watchlist(ticker)


def add_holding(store, mode, ticker, quantity=None):
    """
    Add to the portfolio (quantity defaults to 1) or the watchlist.
    Returns False, changing nothing, when the ticker is already there.
    """
    if is_held(store, mode, ticker):
        return False
    if mode == "portfolio":
        store.add_to_portfolio(ticker, quantity or 1)
    else:
        store.add_to_watchlist(ticker)
    logger.info("Added %s to %s", ticker.upper(), mode)
    return True


def remove_holding(store, mode, ticker):
    _check_mode(mode)
    if mode == "portfolio":
        store.remove_from_portfolio(ticker)
    else:
        store.remove_from_watchlist(ticker)
    logger.info("Removed %s from %s", ticker.upper(), mode)


def holding_rows(store, mode, changes=None):
    """Table rows for the stored entries, with the latest simulated changes applied."""
    items = portfolio_items(store.items(mode), mode)
    apply_changes(items, changes or {})
    return [{
        "ticker": item["ticker"],
        "name": item["name"],
        "price": format_currency(item["price"]),
        "change": format_percent(item["change"]),
        "change_value": item["change"],
        "quantity": item["quantity"],
        "value": format_currency_rounded(item["value"]) if item["quantity"] is not None else "",
    } for item in items]


# ---------------------------------------------------------------------------
# News & calendars
# ---------------------------------------------------------------------------

def news_rows(tickers=None, now=None):
    """Newest first; tickers narrows the feed, none or empty shows everything."""
    now = time.time() if now is None else now
    return [{
        "ticker": n["ticker"], "company": n["company"], "headline": n["headline"],
        "snippet": n["snippet"], "source": n["source"], "logo_url": n["logo_url"],
        "age": format_relative_time(n["timestamp"], now),
    } for n in financial_data.news_feed(financial_data.mock_news(now), tickers)]


def earnings_rows(period="week", today=None):
    today = today or date.today()
    rows = []
    for event in financial_data.filter_earnings(financial_data.mock_earnings(today), period, today):
        surprise = financial_data.earnings_surprise(event)
        rows.append({
            "ticker": event["ticker"],
            "company": event["company"],
            "date": format_event_date(event["report_date"], today),
            "time": REPORT_TIMES.get(event["report_time"], event["report_time"]),
            "eps_estimate": format_currency(event["estimated_eps"]),
            "revenue_estimate": format_revenue(event["estimated_revenue"]),
            "eps_actual": format_currency(event["actual_eps"]) if event["actual_eps"] is not None else "-",
            "surprise": format_percent(surprise) if surprise is not None else "-",
        })
    return rows


def macro_rows(period="all", today=None, tz=None):
    """Macro releases with the release time shown in `tz` (local zone when None)."""
    today = today or date.today()
    return [{
        "flag": country_flag(e["country_code"]),
        "country": e["country"],
        "event": e["event_name"],
        "description": e["description"],
        "date": format_event_date(e["date_time"].date(), today),
        "time": format_local_time(e["date_time"].isoformat(), tz),
        "consensus": e["consensus"],
        "previous": e["previous"],
        "actual": e["actual"] or "-",
        "importance": e["importance"],
    } for e in financial_data.filter_macro_events(financial_data.mock_macro_events(today), period, today)]


def corporate_rows(today=None):
    today = today or date.today()
    return [{
        "ticker": e["ticker"], "company": e["company"], "event": e["event_name"],
        "description": e["description"], "date": format_event_date(e["date"], today),
        "days_until": (e["date"] - today).days,
    } for e in financial_data.sorted_corporate_events(financial_data.mock_corporate_events(today))]


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

def stock_overview(ticker, seed=0, period="1year"):
    """
    Everything the analysis page shows for one featured stock, or None.
    Chart geometry is left to the widgets since it depends on their size.
    """
    stock = get_featured_stock(ticker, seed)
    if stock is None:
        return None
    price = stock["price"]
    ratios = stock["financial_ratios"]
    return {
        "ticker": stock["ticker"],
        "name": stock["name"],
        "sector": stock["sector"],
        "price": format_currency(price),
        "change": format_percent(stock["change"]),
        "change_value": stock["change"],
        "market_cap": format_billions(stock["market_cap"]),
        "signals": analysis.technical_summary(price, stock["technical_indicators"]),
        "rsi_30d": analysis.rolling_average(stock["historical_technical"]["rsi"], 30),
        "ratios": [{"name": name, "label": label, "value": f"{ratios[name]:.2f}",
                    "health": analysis.ratio_health(name, ratios[name])}
                   for name, (label, _, _) in analysis.RATIO_BENCHMARKS.items()],
        "quarterly": stock["quarterly"],
        "pe_history": analysis.period_slice(stock["historical_ratios"], period)["pe"],
    }


def benchmark_rows(metric, seed=0):
    """Featured stocks ranked on one ratio, best first."""
    frame = analysis.benchmark(featured_stocks(seed), metric)
    return [{"rank": rank, "ticker": row["ticker"], "name": row["name"],
             "value": f"{row[metric]:.2f}", "health": row["health"]}
            for rank, row in enumerate(frame.to_dict("records"), start=1)]
