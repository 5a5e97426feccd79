"""
Heatmap view model: the items fed to the treemap, cell colours, summary
stats and pixel snapping. Kept free of Qt so it can be used headless.
"""
import logging

from stocks_data import get_quote

logger = logging.getLogger(__name__)

# watchlist tiles are all the same size
UNIFORM_VALUE = 100

BASE_GRAY = (44, 44, 52)      # #2c2c34
GREEN_MAX = (16, 185, 129)    # #10b981
RED_MAX = (239, 68, 68)       # #ef4444


def change_color(change, full_scale=6.0):
    """
    등락율에 비례하는 색상: grey at 0, toward green/red as |change| nears full_scale.
    Returns '#rrggbb'.
    """
    if change == 0:
        return "#%02x%02x%02x" % BASE_GRAY
    intensity = min(abs(change) / full_scale, 1.0)
    # nonlinear, never below 25% so small moves stay visible
    intensity = 0.25 + (intensity ** 0.6) * 0.75
    target = GREEN_MAX if change > 0 else RED_MAX
    r, g, b = (int(base + (top - base) * intensity) for base, top in zip(BASE_GRAY, target))
    return f"#{r:02x}{g:02x}{b:02x}"


def market_items(stocks):
    """Independent copies of the market universe, safe to update in place."""
    return [dict(s) for s in stocks]


def apply_changes(items, changes):
    """Overwrite each item's % change from a {ticker: change} refresh. Returns how many matched."""
    updated = 0
    for item in items:
        if item["ticker"] in changes:
            item["change"] = changes[item["ticker"]]
            updated += 1
    return updated


def portfolio_items(entries, mode="portfolio"):
    """
    Heatmap items for stored portfolio/watchlist entries.
    portfolio: sized by position value (price * quantity)
    watchlist: uniform size
    Tickers with no quote are skipped.
    """
    items = []
    for entry in entries:
        quote = get_quote(entry["ticker"])
        if quote is None:
            logger.warning("No quote for %s, left off the heatmap", entry["ticker"])
            continue
        quantity = entry.get("quantity") if mode == "portfolio" else None
        value = quote["price"] * quantity if quantity is not None else UNIFORM_VALUE
        items.append({
            "ticker": entry["ticker"], "name": quote["name"], "price": quote["price"],
            "change": quote["change"], "quantity": quantity, "value": value,
        })
    return items


def group_by_sector(stocks, value_key="market_cap"):
    """[{'sector', 'weight', 'stocks'}] heaviest first, ties by sector name."""
    sectors = {}
    for stock in stocks:
        sectors.setdefault(stock.get("sector", "Unknown"), []).append(stock)
    sector_data = [{"sector": name, "weight": sum(s.get(value_key, 0) for s in members), "stocks": members}
                   for name, members in sectors.items()]
    # [DETERMINISTIC] fixed sector order
    sector_data.sort(key=lambda x: (-x["weight"], x["sector"]))
    return sector_data


def sector_change(stocks, value_key="market_cap"):
    """Weight-averaged % change of a sector."""
    valid = [s for s in stocks if s.get(value_key, 0) > 0]
    total = sum(s[value_key] for s in valid)
    if not total:
        return 0.0
    return sum(s.get("change", 0) * s[value_key] for s in valid) / total


def market_summary(items):
    """gainers / losers / average change / total position value."""
    changes = [i.get("change", 0) for i in items]
    total_value = sum(i["price"] * i["quantity"] for i in items
                      if i.get("quantity") is not None and "price" in i)
    return {
        "gainers": sum(1 for c in changes if c > 0),
        "losers": sum(1 for c in changes if c < 0),
        "avg_change": sum(changes) / len(changes) if changes else 0.0,
        "total_value": total_value,
    }


def snap_rect(rect, boundary_w, boundary_h, min_size=2):
    """
    Float cell -> integer (x, y, w, h).
    [SMART-ROUNDING] w = round(x+w) - round(x) so neighbours share edges
    [HARD-SNAP] cells within 1px of the far edge are stretched to it
    [DOT-GUARD] at least min_size px
    """
    ix, iy = round(rect["x"]), round(rect["y"])
    iw = round(rect["x"] + rect["w"]) - ix
    ih = round(rect["y"] + rect["h"]) - iy
    if ix + iw >= boundary_w - 1: iw = max(iw, boundary_w - ix)
    if iy + ih >= boundary_h - 1: ih = max(ih, boundary_h - iy)
    return ix, iy, max(iw, min_size), max(ih, min_size)


def label_visibility(w, h, show_value=False):
    """Which labels fit in a w x h cell."""
    return {
        "ticker": w > 30 and h > 25,
        "change": w > 45 and h > 40,
        "name": w > 60 and h > 45,
        "value": show_value and w > 60 and h > 55,
    }


def font_size(w, h, largest=36):
    # scales with the cell's side length
    return max(2, min((w * h) ** 0.5 / 4.7, largest))
