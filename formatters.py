"""Display formatting for prices, changes, revenues and calendar times."""
import time
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

COUNTRY_FLAGS = {
    "US": "🇺🇸", "EU": "🇪🇺", "GB": "🇬🇧", "JP": "🇯🇵", "CN": "🇨🇳",
    "DE": "🇩🇪", "FR": "🇫🇷", "CA": "🇨🇦", "AU": "🇦🇺",
}


def format_billions(value):
    """Market cap given in billions: $2.9T / $580B"""
    if value >= 1000:
        return f"${value / 1000:.1f}T"
    return f"${value:.0f}B"


def format_percent(value):
    return f"{value:+.2f}%"


def format_currency(value):
    return f"${value:.2f}"


def format_currency_rounded(value):
    return f"${round(value):,}"


def format_revenue(value):
    if value >= 1e12: return f"${value / 1e12:.2f}T"
    if value >= 1e9: return f"${value / 1e9:.1f}B"
    if value >= 1e6: return f"${value / 1e6:.1f}M"
    return f"${value:,}"


def format_relative_time(timestamp, now=None):
    """timestamp/now in epoch seconds -> 'Just now', '5m ago', '3h ago', 'Yesterday', '4d ago'"""
    now = time.time() if now is None else now
    diff = now - timestamp
    minutes = int(diff // 60)
    hours = int(diff // 3600)
    days = int(diff // 86400)
    if minutes < 1: return "Just now"
    if minutes < 60: return f"{minutes}m ago"
    if hours < 24: return f"{hours}h ago"
    if days == 1: return "Yesterday"
    return f"{days}d ago"


def format_event_date(value, today=None):
    """'Today', 'Tomorrow' or e.g. 'Mon, Mar 3' for an ISO date string or date."""
    event_day = value if isinstance(value, date) else date.fromisoformat(value[:10])
    today = today or date.today()
    if event_day == today: return "Today"
    if event_day == today + timedelta(days=1): return "Tomorrow"
    return f"{event_day:%a}, {event_day:%b} {event_day.day}"


def format_local_time(iso_string, tz=None):
    """UTC ISO datetime -> local clock time like '9:30 AM EST'."""
    moment = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(ZoneInfo(tz)) if tz else moment.astimezone()
    hour = local.hour % 12 or 12
    return f"{hour}:{local.minute:02d} {'AM' if local.hour < 12 else 'PM'} {local.tzname()}"


def country_flag(country_code):
    return COUNTRY_FLAGS.get(country_code, "🌐")
