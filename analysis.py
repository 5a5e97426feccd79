"""
Signals and chart helpers for the fundamental/technical analysis views.
"""
import pandas as pd

BULLISH, BEARISH, NEUTRAL = "bullish", "bearish", "neutral"

# name -> (label, benchmark, good when above benchmark)
RATIO_BENCHMARKS = {
    "pe": ("P/E Ratio", 20, False),
    "ps": ("P/S Ratio", 3, False),
    "pb": ("P/B Ratio", 2, False),
    "pcf": ("P/FCF Ratio", 15, False),
    "peg": ("PEG Ratio", 1, False),
    "roe": ("ROE (Return on Equity)", 15, True),
    "roa": ("ROA (Return on Assets)", 8, True),
    "debt_to_equity": ("Debt-to-Equity", 1, False),
    "current_ratio": ("Current Ratio", 1.5, True),
    "quick_ratio": ("Quick Ratio", 1, True),
}


def rsi_status(rsi):
    if rsi > 70: return BEARISH  # overbought
    if rsi < 30: return BULLISH  # oversold
    return NEUTRAL


def macd_status(macd):
    if macd > 0.5: return BULLISH
    if macd < -0.5: return BEARISH
    return NEUTRAL


def bollinger_status(price, lower, upper):
    if price > upper * 0.95: return BEARISH
    if price < lower * 1.05: return BULLISH
    return NEUTRAL


def sma_status(price, sma):
    return BULLISH if price > sma else BEARISH


def technical_summary(price, indicators):
    """Status of every indicator for one stock."""
    return {
        "rsi": rsi_status(indicators["rsi"]),
        "macd": macd_status(indicators["macd"]),
        "bollinger": bollinger_status(price, indicators["bollinger_lower"], indicators["bollinger_upper"]),
        "sma20": sma_status(price, indicators["sma20"]),
        "sma50": sma_status(price, indicators["sma50"]),
        "sma200": sma_status(price, indicators["sma200"]),
    }


def ratio_health(name, value):
    """'good' or 'concern' against the benchmark for that ratio."""
    if name not in RATIO_BENCHMARKS:
        raise KeyError(f"no benchmark for ratio {name!r}")
    _, benchmark, good_above = RATIO_BENCHMARKS[name]
    if good_above:
        return "good" if value > benchmark else "concern"
    return "good" if value < benchmark else "concern"


def rolling_average(values, days):
    """Mean of the last `days` values; 0 for no data."""
    values = list(values)
    if not values:
        return 0.0
    recent = values[-days:]
    return sum(recent) / len(recent)


def period_slice(history, period):
    """Trailing window of a daily history frame: '1year' or '3year'."""
    days = {"1year": 365, "3year": 1095}.get(period)
    if days is None:
        raise ValueError(f"unknown chart period {period!r}")
    return history.iloc[-days:]


def percent_change(latest, previous):
    if not previous:
        return None
    return (latest - previous) / previous * 100


def bar_chart_series(quarterly, metric, chart_width, gap=2, padding=16):
    """
    Bar geometry for one quarterly metric.
    Heights are fractions of the tallest bar; widths fill chart_width.
    QoQ compares the last two quarters, YoY the same quarter a year back.
    """
    values = quarterly[metric]
    count = len(values)
    if count == 0:
        return {"bars": [], "bar_width": 0, "latest": 0, "qoq": None, "yoy": None}
    peak = values.max()
    bar_width = max(int((chart_width - (count - 1) * gap - padding) // count), 1)
    bars = []
    for quarter, value in zip(quarterly["quarter"], values):
        q, year = quarter.split(" ")
        bars.append({"quarter": q, "year": year, "value": value,
                     "height": value / peak if peak > 0 else 0.0})
    latest = values.iloc[-1]
    previous = values.iloc[-2] if count >= 2 else latest
    yoy = percent_change(latest, values.iloc[-5]) if count >= 5 else None
    return {"bars": bars, "bar_width": bar_width, "latest": latest,
            "qoq": percent_change(latest, previous), "yoy": yoy}


def line_chart_points(series, width, height):
    """Scale a numeric series to (x, y) pixel points, y growing downward."""
    series = pd.Series(series).reset_index(drop=True)
    if series.empty:
        return []
    low, high = series.min(), series.max()
    span = high - low
    step = width / (len(series) - 1) if len(series) > 1 else 0.0
    points = []
    for i, value in series.items():
        level = (value - low) / span if span else 0.5
        points.append((i * step, height - level * height))
    return points


def benchmark(stocks, metric):
    """Featured stocks side by side on one ratio: DataFrame sorted best first."""
    if metric not in RATIO_BENCHMARKS:
        raise KeyError(f"no benchmark for ratio {metric!r}")
    frame = pd.DataFrame([{"ticker": s["ticker"], "name": s["name"], metric: s["financial_ratios"][metric]}
                          for s in stocks])
    if frame.empty:
        return frame
    good_above = RATIO_BENCHMARKS[metric][2]
    frame["health"] = [ratio_health(metric, v) for v in frame[metric]]
    return frame.sort_values(metric, ascending=not good_above, kind="stable").reset_index(drop=True)
