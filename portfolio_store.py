"""
Portfolio and watchlist state, persisted as one JSON blob in the app config.

State is loaded once when the store is created; every mutation writes the
whole blob back (last write wins). A mutation whose write fails is rolled
back so memory and disk never disagree.
"""
import copy
import time
import logging
from contextlib import contextmanager

from settings import STORAGE_KEY, load_config, save_config

logger = logging.getLogger(__name__)

VIEW_MODES = ("portfolio", "watchlist")
DISPLAY_MODES = ("table", "map")

DEFAULT_PORTFOLIO = [("AAPL", 50), ("MSFT", 30), ("GOOGL", 20), ("NVDA", 15)]
DEFAULT_WATCHLIST = ["AMZN", "META", "TSLA"]

# stored value types; anything else falls back to the default
STATE_TYPES = {"view_mode": str, "display_mode": str, "portfolio": list, "watchlist": list}


def default_state(now=None):
    now = time.time() if now is None else now
    return {
        "view_mode": "portfolio",
        "display_mode": "table",
        "portfolio": [{"ticker": t, "quantity": q, "added_at": now} for t, q in DEFAULT_PORTFOLIO],
        "watchlist": [{"ticker": t, "added_at": now} for t in DEFAULT_WATCHLIST],
    }


def _valid_entry(entry, with_quantity):
    if not isinstance(entry, dict) or not isinstance(entry.get("ticker"), str):
        return False
    if not with_quantity:
        return True
    quantity = entry.get("quantity")
    return isinstance(quantity, (int, float)) and not isinstance(quantity, bool) and quantity > 0


class PortfolioStore:
    def __init__(self, path=None, clock=time.time):
        self.path = path
        self.clock = clock
        self.config = load_config(path)
        self.state = self._restore(self.config.get(STORAGE_KEY))

    def _restore(self, blob):
        state = default_state(self.clock())
        if blob is None:
            return state
        if not isinstance(blob, dict):
            logger.warning("Stored %s is not an object, using defaults", STORAGE_KEY)
            return state
        for key, expected in STATE_TYPES.items():
            if key not in blob:
                continue
            if not isinstance(blob[key], expected):
                logger.warning("Stored %s has type %s, using default", key, type(blob[key]).__name__)
                continue
            state[key] = blob[key]
        for key in ("portfolio", "watchlist"):
            entries = [e for e in state[key] if _valid_entry(e, key == "portfolio")]
            if len(entries) != len(state[key]):
                logger.warning("Dropped %d malformed %s entries", len(state[key]) - len(entries), key)
            state[key] = entries
        if state["view_mode"] not in VIEW_MODES:
            state["view_mode"] = "portfolio"
        if state["display_mode"] not in DISPLAY_MODES:
            state["display_mode"] = "table"
        logger.info("Restored %d positions and %d watchlist entries",
                    len(state["portfolio"]), len(state["watchlist"]))
        return state

    def save(self):
        self.config[STORAGE_KEY] = self.state
        save_config(self.config, self.path)

    @contextmanager
    def _persisting(self):
        """Mutate self.state inside the block; it is saved on exit and restored if the write fails."""
        snapshot = copy.deepcopy(self.state)
        had_blob = STORAGE_KEY in self.config
        previous_blob = copy.deepcopy(self.config.get(STORAGE_KEY))
        yield self.state
        try:
            self.save()
        except OSError:
            logger.error("Could not persist %s, changes rolled back", STORAGE_KEY)
            self.state = snapshot
            if had_blob:
                self.config[STORAGE_KEY] = previous_blob
            else:
                self.config.pop(STORAGE_KEY, None)
            raise

    # --- view state ---
    @property
    def view_mode(self): return self.state["view_mode"]

    @property
    def display_mode(self): return self.state["display_mode"]

    @property
    def portfolio(self): return list(self.state["portfolio"])

    @property
    def watchlist(self): return list(self.state["watchlist"])

    def set_view_mode(self, mode):
        if mode not in VIEW_MODES:
            raise ValueError(f"unknown view mode {mode!r}")
        with self._persisting() as state:
            state["view_mode"] = mode

    def set_display_mode(self, mode):
        if mode not in DISPLAY_MODES:
            raise ValueError(f"unknown display mode {mode!r}")
        with self._persisting() as state:
            state["display_mode"] = mode

    # --- portfolio ---
    def add_to_portfolio(self, ticker, quantity):
        """Add shares; an existing position is topped up rather than duplicated."""
        if quantity <= 0:
            raise ValueError(f"quantity must be positive, got {quantity}")
        with self._persisting() as state:
            existing = self.get_portfolio_item(ticker)
            if existing:
                existing["quantity"] += quantity
            else:
                state["portfolio"].append(
                    {"ticker": ticker.upper(), "quantity": quantity, "added_at": self.clock()})

    def remove_from_portfolio(self, ticker):
        with self._persisting() as state:
            state["portfolio"] = [p for p in state["portfolio"]
                                  if p["ticker"].upper() != ticker.upper()]

    def update_portfolio_quantity(self, ticker, quantity):
        # zero or negative means the position is closed
        if quantity <= 0:
            self.remove_from_portfolio(ticker)
            return
        if self.get_portfolio_item(ticker) is None:
            logger.warning("update_portfolio_quantity: %s not in portfolio", ticker)
            return
        with self._persisting():
            self.get_portfolio_item(ticker)["quantity"] = quantity

    # --- watchlist ---
    def add_to_watchlist(self, ticker):
        if self.is_in_watchlist(ticker):
            return
        with self._persisting() as state:
            state["watchlist"].append({"ticker": ticker.upper(), "added_at": self.clock()})

    def remove_from_watchlist(self, ticker):
        with self._persisting() as state:
            state["watchlist"] = [w for w in state["watchlist"]
                                  if w["ticker"].upper() != ticker.upper()]

    # --- lookups ---
    def is_in_portfolio(self, ticker):
        return self.get_portfolio_item(ticker) is not None

    def is_in_watchlist(self, ticker):
        return any(w["ticker"].upper() == ticker.upper() for w in self.state["watchlist"])

    def get_portfolio_item(self, ticker):
        return next((p for p in self.state["portfolio"] if p["ticker"].upper() == ticker.upper()), None)

    def tickers(self):
        """Every ticker held or watched, upper-case, portfolio first."""
        seen = []
        for entry in self.state["portfolio"] + self.state["watchlist"]:
            if entry["ticker"].upper() not in seen:
                seen.append(entry["ticker"].upper())
        return seen

    def items(self, mode=None):
        """Entries for the given (or current) view mode."""
        mode = mode or self.view_mode
        if mode not in VIEW_MODES:
            raise ValueError(f"unknown view mode {mode!r}")
        return self.portfolio if mode == "portfolio" else self.watchlist
