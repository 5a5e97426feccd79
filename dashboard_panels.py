"""
Dashboard pages stacked next to the market heatmap: the holdings editor
(portfolio/watchlist table or heatmap), news, calendars and stock analysis.
"""
import logging

from PyQt5.QtWidgets import (QWidget, QFrame, QLabel, QVBoxLayout, QHBoxLayout, QGridLayout,
                             QPushButton, QLineEdit, QSpinBox, QListWidget, QListWidgetItem,
                             QTreeWidget, QTreeWidgetItem, QTabWidget, QComboBox, QStackedWidget)
from PyQt5.QtCore import Qt, QTimer, QPointF, QRectF, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen, QPolygonF

import analysis
import dashboard_data
from formatters import format_percent, format_revenue
from stocks_data import FEATURED_PROFILES, search_stocks

logger = logging.getLogger(__name__)

POSITIVE, NEGATIVE, MUTED = "#4caf50", "#ef5350", "#a1a1aa"
SIGNAL_COLORS = {analysis.BULLISH: POSITIVE, analysis.BEARISH: NEGATIVE, analysis.NEUTRAL: MUTED}
HEALTH_COLORS = {"good": POSITIVE, "concern": NEGATIVE}

PANEL_STYLE = "QFrame { background: #18181b; border-radius: 6px; } QLabel { color: #e4e4e7; border: none; }"
TREE_STYLE = ("QTreeWidget { background: #18181b; color: #e4e4e7; border: none; font-size: 12px; }"
              " QHeaderView::section { background: #27272a; color: #a1a1aa; border: none; padding: 4px; }")
INPUT_STYLE = ("QLineEdit, QSpinBox, QComboBox { color: white; background: #27272a; border: 1px solid #3f3f46;"
               " border-radius: 4px; padding: 4px 6px; }")
TOGGLE_STYLE = ("QPushButton { color: rgba(255,255,255,0.6); background: transparent; border: none; padding: 4px 10px; }"
                " QPushButton:checked { color: white; background: #2563eb; border-radius: 4px; }")


def persist(action, *args):
    """Run a store mutation. A failed config write is logged and the UI carries on; returns success."""
    try:
        action(*args)
    except OSError as e:
        logger.error("Could not save to the config file: %s", e)
        return False
    return True


def make_tree(headers):
    tree = QTreeWidget()
    tree.setRootIsDecorated(False)
    tree.setAlternatingRowColors(False)
    tree.setStyleSheet(TREE_STYLE)
    tree.setColumnCount(len(headers))
    tree.setHeaderLabels(headers)
    return tree


def fill_tree(tree, rows):
    """rows: lists of cell strings. Returns the created items."""
    tree.clear()
    items = [QTreeWidgetItem([str(v) for v in row]) for row in rows]
    tree.addTopLevelItems(items)
    for col in range(tree.columnCount()):
        tree.resizeColumnToContents(col)
    return items


def combo(options, on_change):
    """QComboBox of (label, value) pairs."""
    box = QComboBox()
    box.setStyleSheet(INPUT_STYLE)
    for label, value in options:
        box.addItem(label, value)
    box.currentIndexChanged.connect(on_change)
    return box


# ---------------------------------------------------------------------------
# Holdings
# ---------------------------------------------------------------------------

class HoldingsView(QFrame):
    """Portfolio or watchlist page: search-and-add bar over a table or heatmap of the entries."""
    holdings_changed = pyqtSignal()

    def __init__(self, store, heatmap, parent=None):
        super().__init__(parent)
        self.store = store
        self.heatmap = heatmap
        self.mode = store.view_mode
        self.changes = {}
        self.setup_ui()
        self.set_mode(self.mode)

    def setup_ui(self):
        self.setStyleSheet(INPUT_STYLE)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4); layout.setSpacing(4)

        # --- search / add bar ---
        bar = QHBoxLayout()
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search ticker or company...")
        self.search_edit.textChanged.connect(self.update_results)
        self.search_edit.returnPressed.connect(self.add_current)
        self.quantity_spin = QSpinBox()
        self.quantity_spin.setRange(1, 1_000_000)
        self.quantity_spin.setPrefix("Qty ")
        self.add_button = QPushButton("Add")
        self.add_button.setStyleSheet("QPushButton { color: white; background: #2563eb; border: none; border-radius: 4px; padding: 4px 12px; }")
        self.add_button.clicked.connect(self.add_current)
        bar.addWidget(self.search_edit, 1)
        bar.addWidget(self.quantity_spin)
        bar.addWidget(self.add_button)
        bar.addStretch()
        self.display_buttons = {}
        for mode, text in (("table", "Table"), ("map", "Map")):
            btn = QPushButton(text)
            btn.setCheckable(True)
            btn.setStyleSheet(TOGGLE_STYLE)
            btn.clicked.connect(lambda _, m=mode: self.set_display_mode(m))
            bar.addWidget(btn)
            self.display_buttons[mode] = btn
        layout.addLayout(bar)

        self.results = QListWidget()
        self.results.setMaximumHeight(140)
        self.results.setStyleSheet("QListWidget { color: #e4e4e7; background: #27272a; border: none; }")
        self.results.itemClicked.connect(self.pick_result)
        self.results.hide()
        layout.addWidget(self.results)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #71717a; font-size: 12px; border: none;")
        layout.addWidget(self.status_label)

        self.table = make_tree([])
        self.content = QStackedWidget()
        self.content.addWidget(self.table)
        self.content.addWidget(self.heatmap)
        layout.addWidget(self.content, 1)
        self.show_display_mode(self.store.display_mode)

    # --- search ---
    def update_results(self, text):
        self.results.clear()
        for stock in search_stocks(text):
            held = dashboard_data.is_held(self.store, self.mode, stock["ticker"])
            item = QListWidgetItem(f"{stock['ticker']}  {stock['name']}" + ("  (added)" if held else ""))
            item.setData(Qt.UserRole, stock["ticker"])
            self.results.addItem(item)
        self.results.setVisible(self.results.count() > 0)

    def pick_result(self, item):
        self.search_edit.blockSignals(True)
        self.search_edit.setText(item.data(Qt.UserRole))
        self.search_edit.blockSignals(False)
        self.results.hide()

    def add_current(self):
        ticker = dashboard_data.resolve_ticker(self.search_edit.text())
        if ticker is None:
            self.status_label.setText("Pick a stock from the search results")
            return
        if dashboard_data.is_held(self.store, self.mode, ticker):
            self.status_label.setText(f"{ticker} is already in your {self.mode}")
            return
        quantity = self.quantity_spin.value() if self.mode == "portfolio" else None
        if not persist(dashboard_data.add_holding, self.store, self.mode, ticker, quantity):
            self.status_label.setText("Could not save changes to the config file")
            return
        self.search_edit.clear()
        self.quantity_spin.setValue(1)
        self.results.hide()
        self.refresh()

    # --- row actions ---
    def update_quantity(self, ticker, quantity):
        if not persist(self.store.update_portfolio_quantity, ticker, quantity):
            self.status_label.setText("Could not save changes to the config file")
        # the sender lives in the table being rebuilt
        QTimer.singleShot(0, self.refresh)

    def remove(self, ticker):
        if not persist(dashboard_data.remove_holding, self.store, self.mode, ticker):
            self.status_label.setText("Could not save changes to the config file")
        QTimer.singleShot(0, self.refresh)

    # --- modes ---
    def set_mode(self, mode):
        self.mode = mode
        self.quantity_spin.setVisible(mode == "portfolio")
        self.search_edit.clear()
        self.heatmap.set_mode(mode)
        self.populate_table()

    def set_display_mode(self, mode):
        persist(self.store.set_display_mode, mode)
        # a failed write leaves the stored mode untouched
        self.show_display_mode(self.store.display_mode)

    def show_display_mode(self, mode):
        for m, btn in self.display_buttons.items(): btn.setChecked(m == mode)
        self.content.setCurrentWidget(self.table if mode == "table" else self.heatmap)

    def refresh(self, changes=None):
        if changes is not None:
            self.changes = changes
        self.heatmap.refresh_data(self.changes)
        self.populate_table()
        self.holdings_changed.emit()

    def populate_table(self):
        rows = dashboard_data.holding_rows(self.store, self.mode, self.changes)
        portfolio = self.mode == "portfolio"
        headers = ["Ticker", "Name", "Price", "Change"] + (["Qty", "Value"] if portfolio else []) + [""]
        self.table.setColumnCount(len(headers))
        self.table.setHeaderLabels(headers)
        values = [[r["ticker"], r["name"], r["price"], r["change"]] + (["", r["value"]] if portfolio else []) + [""]
                  for r in rows]
        for row, item in zip(rows, fill_tree(self.table, values)):
            item.setForeground(3, QColor(POSITIVE if row["change_value"] >= 0 else NEGATIVE))
            if portfolio:
                spin = QSpinBox()
                spin.setRange(0, 1_000_000)
                spin.setValue(int(row["quantity"]))
                spin.setKeyboardTracking(False)
                spin.valueChanged.connect(lambda qty, t=row["ticker"]: self.update_quantity(t, qty))
                self.table.setItemWidget(item, 4, spin)
            remove = QPushButton("Remove")
            remove.setStyleSheet("QPushButton { color: #ef5350; background: transparent; border: none; }")
            remove.clicked.connect(lambda _, t=row["ticker"]: self.remove(t))
            self.table.setItemWidget(item, len(headers) - 1, remove)
        count = len(rows)
        if count:
            self.status_label.setText(f"{count} positions" if portfolio else f"{count} watching")
        else:
            self.status_label.setText(f"Your {self.mode} is empty. Search above to add stocks.")


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------

class NewsPanel(QFrame):
    def __init__(self, store, parent=None):
        super().__init__(parent)
        self.store = store
        self.setStyleSheet(PANEL_STYLE)
        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        title = QLabel("Market News")
        title.setStyleSheet("font-size: 16px; font-weight: 800;")
        self.scope_combo = combo([("All news", "all"), ("My stocks", "mine")], lambda _: self.refresh())
        header.addWidget(title); header.addStretch(); header.addWidget(self.scope_combo)
        layout.addLayout(header)
        self.tree = make_tree(["Time", "Ticker", "Headline", "Source"])
        self.tree.itemClicked.connect(self.show_detail)
        layout.addWidget(self.tree, 1)
        self.detail = QLabel("")
        self.detail.setWordWrap(True)
        self.detail.setStyleSheet("color: #a1a1aa; font-size: 12px;")
        layout.addWidget(self.detail)

    def refresh(self):
        tickers = self.store.tickers() if self.scope_combo.currentData() == "mine" else None
        rows = dashboard_data.news_rows(tickers)
        items = fill_tree(self.tree, [[r["age"], r["ticker"], r["headline"], r["source"]] for r in rows])
        for row, item in zip(rows, items):
            item.setData(0, Qt.UserRole, row)
            item.setToolTip(2, row["snippet"])
        self.detail.setText("" if rows else "No news available for selected tickers")

    def show_detail(self, item, column):
        row = item.data(0, Qt.UserRole)
        self.detail.setText(f"<b>{row['headline']}</b><br>{row['company']} · {row['source']} · {row['age']}"
                            f"<br>{row['snippet']}")


# ---------------------------------------------------------------------------
# Calendars
# ---------------------------------------------------------------------------

class CalendarPanel(QFrame):
    """Earnings, macro and corporate event calendars in tabs."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet(PANEL_STYLE)
        layout = QVBoxLayout(self)
        self.tabs = QTabWidget()
        self.tabs.setStyleSheet("QTabBar::tab { color: #a1a1aa; background: transparent; padding: 6px 12px; }"
                                " QTabBar::tab:selected { color: white; border-bottom: 2px solid #2563eb; }"
                                " QTabWidget::pane { border: none; }")

        self.earnings_period = combo([("This week", "week"), ("Today", "today")], lambda _: self.refresh_earnings())
        self.earnings_tree = make_tree(["Date", "Time", "Ticker", "Company", "EPS Est.", "Revenue Est.",
                                        "EPS Actual", "Surprise"])
        self.tabs.addTab(self.tab(self.earnings_period, self.earnings_tree), "Earnings")

        self.macro_period = combo([("All", "all"), ("Today", "today"), ("This week", "week")],
                                  lambda _: self.refresh_macro())
        self.macro_tree = make_tree(["Date", "Time", "", "Country", "Event", "Consensus", "Previous",
                                     "Actual", "Impact"])
        self.tabs.addTab(self.tab(self.macro_period, self.macro_tree), "Macro")

        self.events_tree = make_tree(["Date", "In", "Ticker", "Company", "Event", "Description"])
        self.tabs.addTab(self.tab(None, self.events_tree), "Events")
        layout.addWidget(self.tabs)

    @staticmethod
    def tab(selector, tree):
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 4, 0, 0)
        if selector is not None:
            row = QHBoxLayout(); row.addStretch(); row.addWidget(selector)
            layout.addLayout(row)
        layout.addWidget(tree, 1)
        return page

    def refresh(self):
        self.refresh_earnings()
        self.refresh_macro()
        fill_tree(self.events_tree, [[r["date"], f"{r['days_until']}d", r["ticker"], r["company"], r["event"],
                                      r["description"]] for r in dashboard_data.corporate_rows()])

    def refresh_earnings(self):
        rows = dashboard_data.earnings_rows(self.earnings_period.currentData())
        items = fill_tree(self.earnings_tree, [[r["date"], r["time"], r["ticker"], r["company"], r["eps_estimate"],
                                                r["revenue_estimate"], r["eps_actual"], r["surprise"]] for r in rows])
        for row, item in zip(rows, items):
            if row["surprise"] != "-":
                item.setForeground(7, QColor(NEGATIVE if row["surprise"].startswith("-") else POSITIVE))

    def refresh_macro(self):
        rows = dashboard_data.macro_rows(self.macro_period.currentData())
        items = fill_tree(self.macro_tree, [[r["date"], r["time"], r["flag"], r["country"], r["event"],
                                             r["consensus"], r["previous"], r["actual"], r["importance"]]
                                            for r in rows])
        for row, item in zip(rows, items):
            item.setToolTip(4, row["description"])
            if row["importance"] == "high":
                item.setForeground(8, QColor(NEGATIVE))


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class BarChart(QWidget):
    """Quarterly bars scaled to the tallest one; the latest quarter is highlighted."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.quarterly = None
        self.metric = "revenue"
        self.setMinimumHeight(150)

    def set_data(self, quarterly, metric="revenue"):
        self.quarterly, self.metric = quarterly, metric
        self.update()

    def paintEvent(self, event):
        if self.quarterly is None or self.quarterly.empty: return
        chart = analysis.bar_chart_series(self.quarterly, self.metric, self.width())
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setPen(QColor("#e4e4e7"))
        # quarterly figures are in billions
        growth = [f"{self.metric.replace('_', ' ').title()} {format_revenue(chart['latest'] * 1e9)}"]
        if chart["qoq"] is not None: growth.append(f"QoQ {format_percent(chart['qoq'])}")
        if chart["yoy"] is not None: growth.append(f"YoY {format_percent(chart['yoy'])}")
        painter.drawText(QPointF(8, 14), "   ".join(growth))

        top, bottom = 22, self.height() - 14
        usable = max(bottom - top, 1)
        x = 8
        last = len(chart["bars"]) - 1
        for i, bar in enumerate(chart["bars"]):
            h = bar["height"] * usable
            color = QColor("#3B82F6") if i == last else QColor(59, 130, 246, 110)
            painter.fillRect(QRectF(x, bottom - h, chart["bar_width"], h), color)
            if bar["quarter"] == "Q1":
                painter.setPen(QColor(MUTED))
                painter.drawText(QPointF(x, self.height() - 2), f"'{bar['year'][2:]}")
            x += chart["bar_width"] + 2
        painter.end()


class LineChart(QWidget):
    def __init__(self, label="", parent=None):
        super().__init__(parent)
        self.label = label
        self.series = None
        self.setMinimumHeight(120)

    def set_data(self, series):
        self.series = series
        self.update()

    def paintEvent(self, event):
        if self.series is None or len(self.series) == 0: return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setPen(QColor("#e4e4e7"))
        average = analysis.rolling_average(self.series, len(self.series))
        painter.drawText(QPointF(8, 14), f"{self.label}  now {self.series.iloc[-1]:.1f}  avg {average:.1f}")
        points = analysis.line_chart_points(self.series, self.width() - 16, self.height() - 26)
        painter.setPen(QPen(QColor("#8B5CF6"), 1.5))
        painter.drawPolyline(QPolygonF([QPointF(8 + x, 20 + y) for x, y in points]))
        painter.end()


class AnalysisPanel(QFrame):
    """Featured stock page: price, technical signals, ratios, revenue and P/E charts, peer ranking."""

    def __init__(self, seed=0, parent=None):
        super().__init__(parent)
        self.seed = seed
        self.setStyleSheet(PANEL_STYLE)
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        top = QHBoxLayout()
        self.stock_combo = combo([(f"{p['ticker']}  {p['name']}", p["ticker"]) for p in FEATURED_PROFILES],
                                 lambda _: self.refresh())
        self.period_combo = combo([("1 year", "1year"), ("3 years", "3year")], lambda _: self.refresh())
        self.name_label = QLabel("")
        self.name_label.setStyleSheet("font-size: 18px; font-weight: 800;")
        self.price_label = QLabel("")
        top.addWidget(self.stock_combo); top.addWidget(self.name_label); top.addWidget(self.price_label)
        top.addStretch(); top.addWidget(self.period_combo)
        layout.addLayout(top)

        body = QHBoxLayout()
        left = QVBoxLayout()
        self.signals_grid = QGridLayout()
        self.signal_labels = {}
        for i, name in enumerate(("rsi", "macd", "bollinger", "sma20", "sma50", "sma200")):
            self.signals_grid.addWidget(QLabel(name.upper()), i // 3 * 2, i % 3)
            value = QLabel("")
            self.signals_grid.addWidget(value, i // 3 * 2 + 1, i % 3)
            self.signal_labels[name] = value
        left.addLayout(self.signals_grid)
        self.rsi_label = QLabel("")
        self.rsi_label.setStyleSheet("color: #a1a1aa; font-size: 12px;")
        left.addWidget(self.rsi_label)
        self.revenue_chart = BarChart()
        self.pe_chart = LineChart("P/E")
        left.addWidget(self.revenue_chart, 1)
        left.addWidget(self.pe_chart, 1)
        body.addLayout(left, 3)

        right = QVBoxLayout()
        self.ratios_tree = make_tree(["Ratio", "Value", "Health"])
        right.addWidget(self.ratios_tree, 1)
        self.metric_combo = combo([(label, name) for name, (label, _, _) in analysis.RATIO_BENCHMARKS.items()],
                                  lambda _: self.refresh_benchmark())
        right.addWidget(self.metric_combo)
        self.benchmark_tree = make_tree(["#", "Ticker", "Company", "Value", "Health"])
        right.addWidget(self.benchmark_tree, 1)
        body.addLayout(right, 2)
        layout.addLayout(body, 1)

    def show_stock(self, ticker):
        """Select a featured stock; False when the ticker has no analysis page."""
        index = self.stock_combo.findData(ticker.upper())
        if index < 0:
            return False
        self.stock_combo.setCurrentIndex(index)
        self.refresh()
        return True

    def refresh(self):
        overview = dashboard_data.stock_overview(self.stock_combo.currentData(), self.seed,
                                                 self.period_combo.currentData())
        if overview is None: return
        self.name_label.setText(f"{overview['name']}  ·  {overview['sector']}  ·  {overview['market_cap']}")
        color = POSITIVE if overview["change_value"] >= 0 else NEGATIVE
        self.price_label.setText(f"{overview['price']}  <span style='color:{color};'>{overview['change']}</span>")
        for name, status in overview["signals"].items():
            self.signal_labels[name].setText(status.capitalize())
            self.signal_labels[name].setStyleSheet(f"color: {SIGNAL_COLORS[status]}; font-weight: 700;")
        self.rsi_label.setText(f"30-day average RSI {overview['rsi_30d']:.1f}")
        items = fill_tree(self.ratios_tree, [[r["label"], r["value"], r["health"].capitalize()]
                                             for r in overview["ratios"]])
        for row, item in zip(overview["ratios"], items):
            item.setForeground(2, QColor(HEALTH_COLORS[row["health"]]))
        self.revenue_chart.set_data(overview["quarterly"])
        self.pe_chart.set_data(overview["pe_history"])
        self.refresh_benchmark()

    def refresh_benchmark(self):
        rows = dashboard_data.benchmark_rows(self.metric_combo.currentData(), self.seed)
        items = fill_tree(self.benchmark_tree, [[r["rank"], r["ticker"], r["name"], r["value"],
                                                 r["health"].capitalize()] for r in rows])
        current = self.stock_combo.currentData()
        for row, item in zip(rows, items):
            item.setForeground(4, QColor(HEALTH_COLORS[row["health"]]))
            if row["ticker"] == current:
                item.setForeground(1, QColor("#3B82F6"))
