"""
Mock news, earnings, macro and corporate-event calendars.

Records are rebuilt relative to the clock the caller passes in so the
calendars always look current.
"""
import time
from datetime import date, datetime, timedelta, timezone

HOUR = 3600
DAY = 86400

COMPANY_DOMAINS = {
    "AAPL": "apple.com", "MSFT": "microsoft.com", "GOOGL": "google.com", "AMZN": "amazon.com",
    "NVDA": "nvidia.com", "META": "meta.com", "TSLA": "tesla.com", "JPM": "jpmorganchase.com",
    "V": "visa.com", "JNJ": "jnj.com", "UNH": "unitedhealthgroup.com", "HD": "homedepot.com",
    "PG": "pg.com", "MA": "mastercard.com", "DIS": "disney.com", "NFLX": "netflix.com",
    "COST": "costco.com", "PFE": "pfizer.com", "ABBV": "abbvie.com", "MRK": "merck.com",
    "KO": "coca-cola.com", "PEP": "pepsico.com", "WMT": "walmart.com", "XOM": "exxonmobil.com",
    "CVX": "chevron.com", "BAC": "bankofamerica.com", "WFC": "wellsfargo.com", "INTC": "intel.com",
    "AMD": "amd.com", "CRM": "salesforce.com", "ORCL": "oracle.com", "ADBE": "adobe.com",
    "BA": "boeing.com", "CAT": "caterpillar.com", "GE": "ge.com",
}

# ticker, company, headline, snippet, source, age in seconds
_NEWS = [
    ("AAPL", "Apple Inc.", "Apple Unveils Revolutionary AI Features at WWDC 2025",
     "Apple announced a suite of AI-powered features coming to iOS 19, including an enhanced Siri...",
     "TechCrunch", HOUR * 2),
    ("NVDA", "NVIDIA Corp.", "NVIDIA Reports Record Q4 Revenue Driven by AI Chip Demand",
     "Data center revenue more than doubled year over year as hyperscalers expanded AI capacity...",
     "Bloomberg", HOUR * 5),
    ("MSFT", "Microsoft Corp.", "Microsoft Azure AI Services Expansion Targets Enterprise Market",
     "Microsoft is rolling out new Azure AI tooling aimed at large enterprise deployments...",
     "Reuters", HOUR * 8),
    ("GOOGL", "Alphabet Inc.", "Google Launches Gemini 2.0 with Multimodal Reasoning",
     "The new model family reasons across text, images and video in a single prompt...",
     "The Verge", HOUR * 12),
    ("AMZN", "Amazon.com Inc.", "Amazon AWS Launches Trainium3 Chips for AI Workloads",
     "AWS says the new training chips cut cost per model run substantially...",
     "CNBC", HOUR * 18),
    ("META", "Meta Platforms", "Meta's Reality Labs Achieves Breakthrough in AR Display Technology",
     "A new waveguide display brings full-colour AR glasses closer to consumer pricing...",
     "Wired", DAY),
    ("TSLA", "Tesla Inc.", "Tesla FSD v13 Achieves Level 4 Autonomy Certification in Nevada",
     "Regulators approved driverless operation on select Nevada highways...",
     "Electrek", DAY + HOUR * 4),
    ("JPM", "JPMorgan Chase", "JPMorgan Expands AI Trading Desk with $500M Investment",
     "The bank is hiring quants and building out machine-learning execution tools...",
     "Financial Times", DAY + HOUR * 8),
]

# ticker, company, days from today, BMO/AMC, est EPS, est revenue, actual EPS, actual revenue
_EARNINGS = [
    ("AAPL", "Apple Inc.", 0, "AMC", 2.35, 94.5e9, None, None),
    ("MSFT", "Microsoft Corp.", 0, "AMC", 3.12, 65.8e9, None, None),
    ("GOOGL", "Alphabet Inc.", 1, "AMC", 1.89, 86.2e9, None, None),
    ("AMZN", "Amazon.com Inc.", 1, "AMC", 1.45, 155.0e9, None, None),
    ("META", "Meta Platforms", 2, "AMC", 5.28, 40.5e9, 5.45, 41.2e9),
    ("NVDA", "NVIDIA Corp.", 3, "AMC", 6.78, 38.9e9, None, None),
    ("TSLA", "Tesla Inc.", 4, "AMC", 0.89, 25.8e9, None, None),
    ("JPM", "JPMorgan Chase", 5, "BMO", 4.65, 42.5e9, None, None),
    ("NFLX", "Netflix Inc.", 9, "AMC", 5.10, 10.2e9, None, None),
]

# country, code, event, description, days from today, (hour, minute) UTC, consensus, previous, importance
_MACRO = [
    ("United States", "US", "CPI (Consumer Price Index)", "Month-over-month change in consumer prices",
     1, (13, 30), "0.2%", "0.3%", "high"),
    ("United States", "US", "Non-Farm Payrolls", "Change in number of employed people (excluding farm workers)",
     2, (13, 30), "180K", "175K", "high"),
    ("United States", "US", "FOMC Rate Decision", "Federal Reserve interest rate announcement",
     3, (19, 0), "4.50%", "4.75%", "high"),
    ("European Union", "EU", "ECB Interest Rate Decision", "European Central Bank main refinancing rate",
     4, (12, 45), "3.75%", "4.00%", "high"),
    ("United States", "US", "PCE Price Index", "Personal Consumption Expenditures - Fed's preferred inflation measure",
     5, (13, 30), "2.5%", "2.6%", "high"),
    ("China", "CN", "Manufacturing PMI", "Purchasing Managers' Index for manufacturing sector",
     1, (1, 30), "50.5", "49.8", "medium"),
    ("Japan", "JP", "BOJ Interest Rate Decision", "Bank of Japan policy rate announcement",
     6, (3, 0), "0.25%", "0.25%", "high"),
    ("United Kingdom", "GB", "GDP Growth Rate", "Quarterly gross domestic product growth",
     2, (7, 0), "0.3%", "0.2%", "medium"),
]

_CORPORATE = [
    ("AAPL", "Apple Inc.", "WWDC 2025", "Apple's annual Worldwide Developers Conference", 5),
    ("NVDA", "NVIDIA Corp.", "GTC 2025", "GPU Technology Conference showcasing next-gen AI hardware", 8),
    ("GOOGL", "Alphabet Inc.", "Google I/O 2025", "Annual developer conference featuring Android and Gemini updates", 10),
    ("MSFT", "Microsoft Corp.", "Microsoft Build 2025", "Developer conference highlighting Azure AI and Copilot", 12),
    ("META", "Meta Platforms", "Meta Connect 2025", "VR/AR focused event with metaverse platform updates", 15),
    ("TSLA", "Tesla Inc.", "Tesla AI Day 2025", "FSD progress, Optimus robot updates and Dojo advances", 20),
    ("AMZN", "Amazon.com Inc.", "AWS re:Invent 2025", "Cloud computing conference with AI/ML announcements", 25),
]


def logo_url(ticker):
    domain = COMPANY_DOMAINS.get(ticker.upper())
    if domain:
        return f"https://logo.clearbit.com/{domain}"
    return f"https://ui-avatars.com/api/?name={ticker}&background=3B82F6&color=fff&size=64"


def mock_news(now=None):
    now = time.time() if now is None else now
    return [
        {"id": str(i), "ticker": t, "company": c, "headline": h, "snippet": s, "source": src,
         "timestamp": now - age, "logo_url": logo_url(t)}
        for i, (t, c, h, s, src, age) in enumerate(_NEWS, start=1)
    ]


def mock_earnings(today=None):
    today = today or date.today()
    return [
        {"id": f"e{i}", "ticker": t, "company": c, "report_date": today + timedelta(days=d),
         "report_time": when, "estimated_eps": eps, "estimated_revenue": rev,
         "actual_eps": a_eps, "actual_revenue": a_rev, "logo_url": logo_url(t)}
        for i, (t, c, d, when, eps, rev, a_eps, a_rev) in enumerate(_EARNINGS, start=1)
    ]


def mock_macro_events(today=None):
    today = today or date.today()
    events = []
    for i, (country, code, name, desc, d, (hh, mm), consensus, previous, importance) in enumerate(_MACRO, start=1):
        day = today + timedelta(days=d)
        events.append({
            "id": f"m{i}", "country": country, "country_code": code, "event_name": name,
            "description": desc,
            "date_time": datetime(day.year, day.month, day.day, hh, mm, tzinfo=timezone.utc),
            "consensus": consensus, "previous": previous, "actual": None, "importance": importance,
        })
    return events


def mock_corporate_events(today=None):
    today = today or date.today()
    return [
        {"id": f"c{i}", "ticker": t, "company": c, "event_name": name, "description": desc,
         "date": today + timedelta(days=d), "logo_url": logo_url(t)}
        for i, (t, c, name, desc, d) in enumerate(_CORPORATE, start=1)
    ]


def news_feed(news, tickers=None):
    """News for the given tickers (all news when none), newest first."""
    if tickers:
        wanted = {t.upper() for t in tickers}
        news = [n for n in news if n["ticker"].upper() in wanted]
    return sorted(news, key=lambda n: n["timestamp"], reverse=True)


def earnings_surprise(event):
    """EPS surprise in % once actuals are in, otherwise None."""
    if event.get("actual_eps") is None or not event["estimated_eps"]:
        return None
    return (event["actual_eps"] - event["estimated_eps"]) / abs(event["estimated_eps"]) * 100


def filter_earnings(events, period="week", today=None):
    """
    period 'today': reports dated today
    period 'week': today through today+7, both ends included
    """
    today = today or date.today()
    if period == "today":
        picked = [e for e in events if e["report_date"] == today]
    elif period == "week":
        end = today + timedelta(days=7)
        picked = [e for e in events if today <= e["report_date"] <= end]
    else:
        raise ValueError(f"unknown earnings period {period!r}")
    return sorted(picked, key=lambda e: e["report_date"])


def filter_macro_events(events, period="all", today=None):
    """period is 'all', 'today' or 'week' (today inclusive, today+7 exclusive); sorted by time."""
    today = today or date.today()
    events = sorted(events, key=lambda e: e["date_time"])
    if period == "all":
        return events
    if period == "today":
        return [e for e in events if e["date_time"].date() == today]
    if period == "week":
        end = today + timedelta(days=7)
        return [e for e in events if today <= e["date_time"].date() < end]
    raise ValueError(f"unknown macro period {period!r}")


def sorted_corporate_events(events):
    return sorted(events, key=lambda e: e["date"])
