"""
Mock market data: the S&P 500 heatmap universe and generated fundamentals
for a handful of featured companies.

All generators take a random.Random so a seed reproduces the same numbers.
"""
import math
import random
import logging
from datetime import date

import pandas as pd

logger = logging.getLogger(__name__)

SECTORS = ["Technology", "Healthcare", "Financial", "Consumer", "Energy", "Industrial", "Communication"]

SECTOR_COLORS = {
    "Technology": "#3B82F6",
    "Healthcare": "#10B981",
    "Financial": "#8B5CF6",
    "Consumer": "#F59E0B",
    "Energy": "#EF4444",
    "Industrial": "#6B7280",
    "Communication": "#EC4899",
}


def _stock(ticker, name, sector, market_cap, change):
    return {"ticker": ticker, "name": name, "sector": sector, "market_cap": market_cap, "change": change}


# market_cap in billions, change in %
SP500_STOCKS = [
    # Technology
    _stock("AAPL", "Apple", "Technology", 2890, 2.34),
    _stock("MSFT", "Microsoft", "Technology", 2780, 1.87),
    _stock("GOOGL", "Alphabet", "Technology", 1720, -0.54),
    _stock("NVDA", "NVIDIA", "Technology", 1120, 5.67),
    _stock("META", "Meta", "Technology", 980, 1.45),
    _stock("AVGO", "Broadcom", "Technology", 580, 3.21),
    _stock("ORCL", "Oracle", "Technology", 310, -1.23),
    _stock("CRM", "Salesforce", "Technology", 245, 0.89),
    _stock("AMD", "AMD", "Technology", 220, 4.56),
    _stock("ADBE", "Adobe", "Technology", 215, -2.34),
    _stock("INTC", "Intel", "Technology", 180, -4.21),
    _stock("CSCO", "Cisco", "Technology", 195, 0.45),
    # Healthcare
    _stock("UNH", "UnitedHealth", "Healthcare", 480, -1.56),
    _stock("JNJ", "Johnson & Johnson", "Healthcare", 380, 0.23),
    _stock("LLY", "Eli Lilly", "Healthcare", 565, 6.78),
    _stock("PFE", "Pfizer", "Healthcare", 155, -3.45),
    _stock("ABBV", "AbbVie", "Healthcare", 285, 1.12),
    _stock("MRK", "Merck", "Healthcare", 265, -0.89),
    _stock("TMO", "Thermo Fisher", "Healthcare", 195, 2.34),
    # Financial
    _stock("BRK.B", "Berkshire", "Financial", 785, 1.23),
    _stock("JPM", "JPMorgan", "Financial", 495, 2.67),
    _stock("V", "Visa", "Financial", 520, 0.98),
    _stock("MA", "Mastercard", "Financial", 395, 1.45),
    _stock("BAC", "Bank of America", "Financial", 255, -1.78),
    _stock("WFC", "Wells Fargo", "Financial", 175, -0.56),
    _stock("GS", "Goldman Sachs", "Financial", 125, 3.21),
    # Consumer
    _stock("AMZN", "Amazon", "Consumer", 1580, 3.21),
    _stock("TSLA", "Tesla", "Consumer", 560, -2.89),
    _stock("HD", "Home Depot", "Consumer", 335, 0.67),
    _stock("MCD", "McDonald's", "Consumer", 205, -0.34),
    _stock("NKE", "Nike", "Consumer", 145, -1.98),
    _stock("SBUX", "Starbucks", "Consumer", 105, 1.23),
    _stock("COST", "Costco", "Consumer", 295, 2.45),
    # Energy
    _stock("XOM", "Exxon Mobil", "Energy", 425, -0.78),
    _stock("CVX", "Chevron", "Energy", 275, -1.23),
    _stock("COP", "ConocoPhillips", "Energy", 125, 0.45),
    _stock("SLB", "Schlumberger", "Energy", 65, 2.34),
    # Industrial
    _stock("CAT", "Caterpillar", "Industrial", 165, 1.89),
    _stock("RTX", "RTX Corp", "Industrial", 145, 0.56),
    _stock("BA", "Boeing", "Industrial", 115, -5.67),
    _stock("HON", "Honeywell", "Industrial", 135, 0.78),
    _stock("UPS", "UPS", "Industrial", 95, -2.12),
    _stock("GE", "GE Aerospace", "Industrial", 185, 3.45),
    # Communication
    _stock("DIS", "Disney", "Communication", 165, -1.34),
    _stock("NFLX", "Netflix", "Communication", 245, 4.23),
    _stock("CMCSA", "Comcast", "Communication", 145, -0.67),
    _stock("T", "AT&T", "Communication", 125, 0.89),
    _stock("VZ", "Verizon", "Communication", 155, 0.34),
]

STOCKS = SP500_STOCKS

# base_revenue in billions per quarter
FEATURED_PROFILES = [
    {"ticker": "AAPL", "name": "Apple Inc.", "sector": "Technology", "market_cap": 2890,
     "price": 178.52, "change": 2.34, "base_revenue": 100, "volatility": 0.15},
    {"ticker": "MSFT", "name": "Microsoft Corp.", "sector": "Technology", "market_cap": 2780,
     "price": 374.58, "change": 1.87, "base_revenue": 60, "volatility": 0.12},
    {"ticker": "GOOGL", "name": "Alphabet Inc.", "sector": "Technology", "market_cap": 1720,
     "price": 139.25, "change": -0.54, "base_revenue": 80, "volatility": 0.14},
    {"ticker": "AMZN", "name": "Amazon.com Inc.", "sector": "Consumer Cyclical", "market_cap": 1580,
     "price": 151.94, "change": 3.21, "base_revenue": 140, "volatility": 0.18},
    {"ticker": "NVDA", "name": "NVIDIA Corp.", "sector": "Technology", "market_cap": 1120,
     "price": 454.72, "change": 5.67, "base_revenue": 35, "volatility": 0.22},
    {"ticker": "META", "name": "Meta Platforms", "sector": "Technology", "market_cap": 980,
     "price": 386.27, "change": 1.45, "base_revenue": 40, "volatility": 0.16},
]

BASE_YEAR = 2025
HISTORY_DAYS = 1095  # 3 years
SHARES_OUTSTANDING = 2.5  # billions, simplified


# ---------------------------------------------------------------------------
# Fundamentals
# ---------------------------------------------------------------------------

def generate_quarterly_data(base_revenue, volatility, base_year=BASE_YEAR, rng=None):
    """
    20 quarters (5 years) of revenue/expenses/ebitda/net income, oldest first.
    Q4 carries +15% seasonality, Q1 -5%, with 8% growth per year.
    """
    rng = rng or random.Random()
    rows = []
    for year in range(base_year - 4, base_year + 1):
        for q in range(1, 5):
            seasonality = 1 + (0.15 if q == 4 else -0.05 if q == 1 else 0)
            variance = 1 + (rng.random() - 0.5) * volatility
            revenue = base_revenue * seasonality * variance * (1 + (year - base_year) * 0.08)
            expenses = revenue * (0.55 + rng.random() * 0.1)
            ebitda = (revenue - expenses) * (1 + rng.random() * 0.2)
            net_income = ebitda * 0.65 * (1 + rng.random() * 0.15)
            rows.append({
                "quarter": f"Q{q} {year}",
                "revenue": round(revenue, 1),
                "expenses": round(expenses, 1),
                "ebitda": round(ebitda, 1),
                "net_income": round(net_income, 1),
            })
    return pd.DataFrame(rows)


def income_statement(quarterly):
    return pd.DataFrame({
        "quarter": quarterly["quarter"],
        "revenue": quarterly["revenue"],
        "cost_of_revenue": quarterly["revenue"] * 0.45,
        "gross_profit": quarterly["revenue"] * 0.55,
        "operating_expenses": quarterly["expenses"] * 0.7,
        "operating_income": quarterly["ebitda"] * 0.85,
        "interest_expense": quarterly["revenue"] * 0.02,
        "taxes_paid": quarterly["net_income"] * 0.21,
        "net_income": quarterly["net_income"],
    })


def balance_sheet(quarterly):
    # assets grow 2% per quarter on top of revenue scale
    growth = 1 + pd.Series(range(len(quarterly)), index=quarterly.index) * 0.02
    scaled = quarterly["revenue"] * growth
    return pd.DataFrame({
        "quarter": quarterly["quarter"],
        "total_assets": scaled * 4,
        "current_assets": scaled * 2,
        "total_liabilities": scaled * 1.5,
        "current_liabilities": scaled * 0.8,
        "total_equity": scaled * 2.5,
        "cash_and_equivalents": scaled * 0.5,
        "accounts_receivable": scaled * 0.35,
        "inventory": scaled * 0.3,
    })


def cash_flow(quarterly, rng=None):
    rng = rng or random.Random()
    noise = pd.Series([rng.random() * 5 for _ in range(len(quarterly))], index=quarterly.index)
    position = pd.Series(range(len(quarterly)), index=quarterly.index)
    return pd.DataFrame({
        "quarter": quarterly["quarter"],
        "operating_cash_flow": quarterly["net_income"] * 1.2 + noise,
        "capital_expenditures": quarterly["revenue"] * 0.08,
        "free_cash_flow": quarterly["net_income"] * 1.1,
        "financing_cash_flow": -(quarterly["revenue"] * 0.02),
        "investing_cash_flow": -(quarterly["revenue"] * 0.05),
        "ending_cash_balance": 50 + position * 0.5,
    })


def generate_technical_indicators(rng=None):
    rng = rng or random.Random()
    return {
        "rsi": 40 + rng.random() * 30,
        "macd": -2 + rng.random() * 4,
        "macd_signal": -1 + rng.random() * 2,
        "bollinger_upper": 200 + rng.random() * 50,
        "bollinger_middle": 170 + rng.random() * 50,
        "bollinger_lower": 150 + rng.random() * 40,
        "sma20": 165 + rng.random() * 50,
        "sma50": 160 + rng.random() * 50,
        "sma200": 155 + rng.random() * 50,
    }


def financial_ratios(price, latest_income, latest_balance):
    """Valuation, profitability and liquidity ratios from the latest quarter (floors keep mock values sane)."""
    eps = latest_income["net_income"] / SHARES_OUTSTANDING
    pe = price / eps
    ps = price / (latest_income["revenue"] / SHARES_OUTSTANDING)
    pb = price / (latest_balance["total_equity"] / SHARES_OUTSTANDING)
    pcf = price / (latest_balance["total_equity"] * 0.3)
    return {
        "pe": max(pe, 5),
        "peg": pe / 20,  # assumes 20% growth
        "ps": max(ps, 2),
        "pb": max(pb, 1.5),
        "pcf": max(pcf, 8),
        "roe": latest_income["net_income"] / latest_balance["total_equity"] * 100,
        "roa": latest_income["net_income"] / latest_balance["total_assets"] * 100,
        "debt_to_equity": latest_balance["total_liabilities"] / latest_balance["total_equity"],
        "current_ratio": latest_balance["current_assets"] / latest_balance["current_liabilities"],
        "quick_ratio": (latest_balance["current_assets"] - latest_balance["inventory"])
                       / latest_balance["current_liabilities"],
    }


# ---------------------------------------------------------------------------
# Daily history
# ---------------------------------------------------------------------------

def _history_index(days, end):
    end = end or date.today()
    return pd.date_range(end=pd.Timestamp(end), periods=days, freq="D", name="date")


def historical_technical(days=HISTORY_DAYS, end=None, rng=None):
    """Daily rsi/macd/bollinger_middle with an oscillating trend, oldest first."""
    rng = rng or random.Random()
    index = _history_index(days, end)
    rows = []
    for i in range(days - 1, -1, -1):
        trend = math.sin(i / days * math.pi * 4) * 20
        rows.append({
            "rsi": 50 + trend + (rng.random() - 0.5) * 15,
            "macd": trend / 10 + (rng.random() - 0.5) * 0.5,
            "bollinger_middle": 170 + trend + (rng.random() - 0.5) * 20,
        })
    return pd.DataFrame(rows, index=index)


def historical_ratios(days=HISTORY_DAYS, end=None, rng=None):
    rng = rng or random.Random()
    index = _history_index(days, end)
    rows = []
    for i in range(days - 1, -1, -1):
        trend = math.sin(i / days * math.pi * 2) * 3
        rows.append({
            "pe": 20 + trend + (rng.random() - 0.5) * 5,
            "ps": 4 + trend * 0.2 + (rng.random() - 0.5) * 1,
            "pb": 3 + trend * 0.15 + (rng.random() - 0.5) * 0.8,
            "roe": 15 + trend + (rng.random() - 0.5) * 5,
            "debt_to_equity": 0.5 + trend * 0.05 + (rng.random() - 0.5) * 0.2,
        })
    return pd.DataFrame(rows, index=index)


# ---------------------------------------------------------------------------
# Featured stocks & lookups
# ---------------------------------------------------------------------------

def build_featured_stock(profile, seed=None, end=None):
    rng = random.Random(seed)
    quarterly = generate_quarterly_data(profile["base_revenue"], profile["volatility"], BASE_YEAR, rng)
    income = income_statement(quarterly)
    balance = balance_sheet(quarterly)
    stock = {k: v for k, v in profile.items() if k not in ("base_revenue", "volatility")}
    stock.update({
        "quarterly": quarterly,
        "income_statement": income,
        "balance_sheet": balance,
        "cash_flow": cash_flow(quarterly, rng),
        "technical_indicators": generate_technical_indicators(rng),
        "financial_ratios": financial_ratios(profile["price"], income.iloc[-1], balance.iloc[-1]),
        "historical_technical": historical_technical(HISTORY_DAYS, end, rng),
        "historical_ratios": historical_ratios(HISTORY_DAYS, end, rng),
    })
    return stock


_featured_cache = {}


def featured_stocks(seed=0):
    """All featured stocks; generated once per seed."""
    if seed not in _featured_cache:
        logger.debug("Generating featured stocks (seed=%s)", seed)
        _featured_cache[seed] = [build_featured_stock(p, None if seed is None else f"{seed}:{p['ticker']}")
                                 for p in FEATURED_PROFILES]
    return _featured_cache[seed]


def get_featured_stock(ticker, seed=0):
    ticker = ticker.upper()
    return next((s for s in featured_stocks(seed) if s["ticker"] == ticker), None)


def get_quote(ticker):
    """
    name/price/change/market_cap for a ticker, or None if unknown.
    Featured profiles win; S&P 500 entries get a synthetic price.
    """
    ticker = ticker.upper()
    profile = next((p for p in FEATURED_PROFILES if p["ticker"] == ticker), None)
    if profile:
        return {"ticker": ticker, "name": profile["name"], "price": profile["price"],
                "change": profile["change"], "market_cap": profile["market_cap"]}
    stock = next((s for s in SP500_STOCKS if s["ticker"].upper() == ticker), None)
    if stock:
        return {"ticker": ticker, "name": stock["name"], "price": round(stock["market_cap"] * 0.15, 2),
                "change": stock["change"], "market_cap": stock["market_cap"]}
    return None


def searchable_stocks():
    featured = [{"ticker": p["ticker"], "name": p["name"]} for p in FEATURED_PROFILES]
    seen = {p["ticker"] for p in featured}
    return featured + [{"ticker": s["ticker"], "name": s["name"]} for s in SP500_STOCKS if s["ticker"] not in seen]


def search_stocks(query, limit=6):
    """Ticker or name substring match, case-insensitive."""
    query = query.strip().upper()
    if not query:
        return []
    hits = [s for s in searchable_stocks() if query in s["ticker"] or query in s["name"].upper()]
    return hits[:limit]


def simulate_changes(tickers, rng=None, spread=5.0):
    """Fresh random % changes for a refresh tick: {ticker: change}."""
    rng = rng or random.Random()
    return {ticker: round(rng.uniform(-spread, spread), 2) for ticker in tickers}
