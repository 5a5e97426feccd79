import sys
import random
import logging
from datetime import datetime

from PyQt5.QtWidgets import (QApplication, QWidget, QLabel, QVBoxLayout, QHBoxLayout,
                             QPushButton, QFrame, QStackedWidget, QGraphicsDropShadowEffect, QToolTip)
from PyQt5.QtCore import Qt, QTimer, pyqtSignal, QThread
from PyQt5.QtGui import QColor, QFont, QCursor

import stocks_data
from dashboard_panels import HoldingsView, NewsPanel, CalendarPanel, AnalysisPanel, persist
from treemap_layout import calculate_treemap
from heatmap_data import (change_color, market_items, apply_changes, portfolio_items, group_by_sector,
                          sector_change, market_summary, snap_rect, label_visibility, font_size)
from formatters import format_percent, format_currency_rounded, format_billions
from portfolio_store import PortfolioStore
from settings import load_config, save_config

logger = logging.getLogger(__name__)


class StockCell(QFrame):
    clicked = pyqtSignal(dict)

    def __init__(self, item, full_scale=6.0, show_value=False, parent=None):
        super().__init__(parent)
        self.item = item
        self.full_scale = full_scale
        self.show_value = show_value
        self.setObjectName("StockCell")
        self.setMouseTracking(True)
        self.tooltip_timer = QTimer(self)
        self.tooltip_timer.setSingleShot(True)
        self.tooltip_timer.timeout.connect(self.show_custom_tooltip)
        self.setup_ui()

    def setup_ui(self):
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)
        self.layout.setAlignment(Qt.AlignCenter)
        self.ticker_label = QLabel(self.item["ticker"])
        self.change_label = QLabel("")
        self.extra_label = QLabel("")
        for label in (self.ticker_label, self.change_label, self.extra_label):
            label.setAlignment(Qt.AlignCenter)
            self.layout.addWidget(label)
        self.add_shadow(self.ticker_label)
        self.add_shadow(self.change_label)
        self.update_content()

    def add_shadow(self, label):
        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(2); shadow.setColor(QColor(0, 0, 0, 120)); shadow.setOffset(1, 1)
        label.setGraphicsEffect(shadow)

    def update_color(self):
        color = change_color(self.item.get("change", 0), self.full_scale)
        self.setStyleSheet(
            f"QFrame#StockCell {{ background-color: {color}; border: 1px solid rgba(0,0,0,0.25); border-radius: 2px; }}"
            " QFrame#StockCell:hover { border: 1.5px solid white; }")

    def update_content(self):
        self.update_color()
        change = self.item.get("change", 0)
        self.change_label.setText(format_percent(change) if change != 0 else "-")
        if self.show_value and self.item.get("quantity") is not None:
            self.extra_label.setText(format_currency_rounded(self.item["value"]))
        else:
            self.extra_label.setText(self.item.get("name", ""))
        self.resizeEvent(None)

    def enterEvent(self, event):
        self.tooltip_timer.start(300)

    def leaveEvent(self, event):
        self.tooltip_timer.stop()
        QToolTip.hideText()

    def mouseReleaseEvent(self, e):
        if e.button() == Qt.LeftButton: self.clicked.emit(self.item)

    def show_custom_tooltip(self):
        change = self.item.get("change", 0)
        color = '#4caf50' if change >= 0 else '#ef5350'
        text = f"<b>{self.item.get('name', '')}</b> ({self.item['ticker']})<br>Change: <span style='color:{color};'>{format_percent(change)}</span>"
        if "market_cap" in self.item:
            text += f"<br>Market cap: {format_billions(self.item['market_cap'])}"
        QToolTip.showText(QCursor.pos(), text, self)

    def resizeEvent(self, event):
        w, h = self.width(), self.height()
        visible = label_visibility(w, h, self.show_value)
        size = font_size(w, h)
        # [REFINED] 글자가 너무 작으면 깔끔하게 숨김
        if not visible["ticker"] or size < 2.8:
            self.ticker_label.hide(); self.change_label.hide(); self.extra_label.hide()
            return
        self.ticker_label.show()
        self.ticker_label.setStyleSheet(f"color: white; font-weight: 800; font-size: {int(size)}px; background: transparent; border: none;")
        self.change_label.setVisible(visible["change"])
        self.change_label.setStyleSheet(f"color: rgba(255,255,255,0.85); font-weight: 500; font-size: {max(2, int(size * 0.8))}px; background: transparent; border: none;")
        self.extra_label.setVisible(visible["value"] if self.show_value else visible["name"])
        self.extra_label.setStyleSheet("color: rgba(255,255,255,0.6); font-size: 8px; background: transparent; border: none;")


def place_cells(cells, rects, boundary_w, boundary_h):
    """Position cell widgets from treemap rects (matched by ticker)."""
    by_ticker = {c.item["ticker"]: c for c in cells}
    for rect in rects:
        cell = by_ticker.get(rect["data"]["ticker"])
        if cell is None:
            continue
        if rect["w"] <= 0 or rect["h"] <= 0:
            cell.hide()
            continue
        cell.show()
        cell.setGeometry(*snap_rect(rect, boundary_w, boundary_h))


class SectorContainer(QFrame):
    stock_clicked = pyqtSignal(dict)

    def __init__(self, sector_name, stocks, full_scale=6.0, parent=None):
        super().__init__(parent)
        self.sector_name = sector_name
        self.stocks = stocks
        self.full_scale = full_scale
        self.cells = []
        self.setup_ui()

    def setup_ui(self):
        self.setStyleSheet("QFrame { background: rgba(255,255,255,0.01); border: 1px solid rgba(255, 255, 255, 0.12); border-radius: 1px; }")
        self.header_bg = QFrame(self)
        self.header_bg.setStyleSheet("background: rgba(255,255,255,0.03); border: none;")
        self.header = QLabel(self.sector_name.upper(), self.header_bg)
        accent = stocks_data.SECTOR_COLORS.get(self.sector_name, "#a1a1aa")
        self.header.setStyleSheet(f"color: {accent}; font-size: 9px; font-weight: 800; letter-spacing: 0.4px; background: transparent; border: none;")
        self.header.setAttribute(Qt.WA_TransparentForMouseEvents)
        self.sector_perf = QLabel("", self.header_bg)
        self.sector_perf.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self.update_performance()
        for stock in self.stocks:
            cell = StockCell(stock, self.full_scale, parent=self)
            cell.clicked.connect(self.stock_clicked)
            self.cells.append(cell)

    def update_performance(self):
        avg_change = sector_change(self.stocks)
        color_rgb = "76, 175, 80" if avg_change >= 0 else "239, 83, 80"
        self.sector_perf.setText(format_percent(avg_change))
        self.sector_perf.setStyleSheet(f"color: rgba({color_rgb}, 0.85); font-size: 9px; font-weight: 700; background: transparent; border: none;")

    def resizeEvent(self, event):
        w, h = self.width(), self.height()
        if w <= 4 or h <= 4: return
        header_h = 16
        self.header_bg.setGeometry(0, 0, w, header_h)
        self.header.setGeometry(6, 0, w - 12, header_h)
        self.sector_perf.setGeometry(6, 0, w - 12, header_h)
        self.header_bg.setVisible(h >= 35 and w >= 60)
        top_margin = header_h if h > 45 else 0

        margin = 1
        treemap_w = w - 2 * margin
        treemap_h = h - margin - top_margin
        if treemap_w <= 0 or treemap_h <= 0: return
        rects = calculate_treemap(self.stocks, treemap_w, treemap_h, value_key="market_cap", x=margin, y=top_margin)
        place_cells(self.cells, rects, margin + treemap_w, top_margin + treemap_h)

    def update_cells(self):
        for cell in self.cells: cell.update_content()
        self.update_performance()


class TreemapWidget(QFrame):
    """S&P 500 heatmap: sectors laid out by total market cap, stocks inside each sector."""
    stock_clicked = pyqtSignal(dict)

    def __init__(self, stocks, full_scale=6.0, parent=None):
        super().__init__(parent)
        self.stocks = stocks
        self.full_scale = full_scale
        self.sector_containers = []
        self.setup_base()

    def setup_base(self):
        self.sector_data = group_by_sector(self.stocks)
        for s_data in self.sector_data:
            container = SectorContainer(s_data["sector"], s_data["stocks"], self.full_scale, parent=self)
            container.stock_clicked.connect(self.stock_clicked)
            self.sector_containers.append(container)
            container.show()

    def resizeEvent(self, event):
        w, h = self.width(), self.height()
        if w <= 0 or h <= 0: return
        rects = calculate_treemap(self.sector_data, w, h, value_key="weight")
        by_sector = {c.sector_name: c for c in self.sector_containers}
        for rect in rects:
            container = by_sector.get(rect["data"]["sector"])
            if container:
                container.setGeometry(*snap_rect(rect, w, h, min_size=0))

    def update_all_cells(self):
        for container in self.sector_containers: container.update_cells()

    def clear_containers(self):
        for c in self.sector_containers:
            c.setParent(None); c.deleteLater()
        self.sector_containers = []

    def refresh_data(self, stocks):
        self.stocks = stocks
        self.clear_containers()
        self.setup_base()
        self.resizeEvent(None)


class PortfolioHeatmapWidget(QFrame):
    """Portfolio (sized by position value) or watchlist (uniform tiles) heatmap."""
    stock_clicked = pyqtSignal(dict)

    def __init__(self, store, mode="portfolio", full_scale=6.0, parent=None):
        super().__init__(parent)
        self.store = store
        self.mode = mode
        self.full_scale = full_scale
        self.changes = {}
        self.items = []
        self.cells = []
        self.empty_label = QLabel("", self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet("color: #71717a; font-size: 13px; border: none;")
        self.setStyleSheet("QFrame { background: #18181b; border-radius: 6px; }")
        self.refresh_data()

    def set_mode(self, mode):
        self.mode = mode
        self.refresh_data()

    def build_items(self):
        items = portfolio_items(self.store.items(self.mode), self.mode)
        apply_changes(items, self.changes)
        return items

    def refresh_data(self, changes=None):
        if changes is not None:
            self.changes = changes
        for cell in self.cells:
            cell.setParent(None); cell.deleteLater()
        self.items = self.build_items()
        self.cells = []
        for item in self.items:
            cell = StockCell(item, self.full_scale, show_value=self.mode == "portfolio", parent=self)
            cell.clicked.connect(self.stock_clicked)
            self.cells.append(cell)
        self.empty_label.setText(f"Your {self.mode} is empty. Search above to add stocks.")
        self.empty_label.setVisible(not self.items)
        self.resizeEvent(None)

    def resizeEvent(self, event):
        w, h = self.width(), self.height()
        self.empty_label.setGeometry(0, 0, w, h)
        if w <= 0 or h <= 0 or not self.items: return
        rects = calculate_treemap(self.items, w, h, value_key="value")
        place_cells(self.cells, rects, w, h)


class DashboardWindow(QWidget):
    HEATMAP_MODES = ("market", "portfolio", "watchlist")
    PANEL_TITLES = {"news": "News", "calendar": "Calendar", "analysis": "Analysis"}

    def __init__(self, stocks, store, config, parent=None):
        super().__init__(parent)
        self.stocks = stocks
        self.store = store
        self.config = config
        self.setup_ui()

    def setup_ui(self):
        self.setWindowTitle("Market Heatmap")
        self.resize(self.config["heatmap_width"], self.config["heatmap_height"] + 50)
        self.setStyleSheet("background-color: rgb(15, 15, 20);")
        full_scale = self.config["change_full_scale"]

        layout = QVBoxLayout(self)
        layout.setContentsMargins(1, 1, 1, 1); layout.setSpacing(2)

        # --- Header ---
        header = QHBoxLayout()
        self.title_label = QLabel("S&P 500")
        self.title_label.setStyleSheet("color: white; font-size: 24px; font-weight: 800; border: none;")
        self.summary_label = QLabel("")
        self.summary_label.setStyleSheet("color: #aaa; font-size: 14px; border: none; margin-left: 10px;")
        header.addWidget(self.title_label)
        header.addWidget(self.summary_label)
        header.addStretch()
        self.mode_buttons = {}
        for mode, text in (("market", "Market"), ("portfolio", "Portfolio"), ("watchlist", "Watchlist"),
                           ("news", "News"), ("calendar", "Calendar"), ("analysis", "Analysis")):
            btn = QPushButton(text)
            btn.setCheckable(True)
            btn.setStyleSheet("QPushButton { color: rgba(255,255,255,0.6); background: transparent; border: none; padding: 4px 10px; }"
                              " QPushButton:checked { color: white; background: #2563eb; border-radius: 4px; }")
            btn.clicked.connect(lambda _, m=mode: self.set_mode(m))
            header.addWidget(btn)
            self.mode_buttons[mode] = btn
        self.update_time_label = QLabel("")
        self.update_time_label.setStyleSheet("color: rgba(255,255,255,0.4); font-size: 11px; border: none;")
        header.addWidget(self.update_time_label)
        layout.addLayout(header)

        # --- Pages ---
        seed = self.config.get("seed") or 0
        self.stack = QStackedWidget()
        self.treemap = TreemapWidget(self.stocks, full_scale)
        self.portfolio_map = PortfolioHeatmapWidget(self.store, self.store.view_mode, full_scale)
        self.holdings = HoldingsView(self.store, self.portfolio_map)
        self.holdings.holdings_changed.connect(self.update_view)
        self.treemap.stock_clicked.connect(self.on_stock_clicked)
        self.portfolio_map.stock_clicked.connect(self.on_stock_clicked)
        self.panels = {"news": NewsPanel(self.store), "calendar": CalendarPanel(), "analysis": AnalysisPanel(seed)}
        self.stack.addWidget(self.treemap)
        self.stack.addWidget(self.holdings)
        for panel in self.panels.values(): self.stack.addWidget(panel)
        layout.addWidget(self.stack)

        self.set_mode("market")

    def set_mode(self, mode):
        for m, btn in self.mode_buttons.items(): btn.setChecked(m == mode)
        if mode == "market":
            self.title_label.setText("S&P 500")
            self.stack.setCurrentWidget(self.treemap)
        elif mode in self.PANEL_TITLES:
            self.title_label.setText(self.PANEL_TITLES[mode])
            self.panels[mode].refresh()
            self.stack.setCurrentWidget(self.panels[mode])
        else:
            # the page still switches when the mode cannot be saved
            persist(self.store.set_view_mode, mode)
            self.title_label.setText(mode.capitalize())
            self.holdings.set_mode(mode)
            self.stack.setCurrentWidget(self.holdings)
        self.mode = mode
        self.update_view()

    def on_stock_clicked(self, item):
        logger.info("Selected %s (%s)", item["ticker"], format_percent(item.get("change", 0)))
        if self.panels["analysis"].show_stock(item["ticker"]):
            self.set_mode("analysis")

    def update_view(self):
        if self.mode not in self.HEATMAP_MODES:
            self.summary_label.setText("")
            self.update_time_label.setText(datetime.now().strftime("Updated %H:%M:%S"))
            return
        if self.mode == "market":
            self.treemap.update_all_cells()
            summary = market_summary(self.stocks)
        else:
            summary = market_summary(self.portfolio_map.items)
        text = f"▲ {summary['gainers']}  ▼ {summary['losers']}  {format_percent(summary['avg_change'])}"
        if self.mode == "portfolio":
            text += f"  {format_currency_rounded(summary['total_value'])}"
        c_color = "#4caf50" if summary["avg_change"] >= 0 else "#ef5350"
        self.summary_label.setText(text)
        self.summary_label.setStyleSheet(f"color: {c_color}; font-size: 16px; border: none; margin-left: 12px; font-weight: 800;")
        self.update_time_label.setText(datetime.now().strftime("Updated %H:%M:%S"))


class QuoteSimulator(QThread):
    """Produces mock % changes off the UI thread; stands in for a live quote feed."""
    data_updated = pyqtSignal(dict)

    def __init__(self, tickers, seed=None):
        super().__init__()
        # read off the UI thread, so never a list the UI mutates
        self.tickers = tuple(tickers)
        self.rng = random.Random(seed)

    def run(self):
        changes = stocks_data.simulate_changes(self.tickers, self.rng)
        logger.info("Simulated quotes for %d tickers", len(changes))
        self.data_updated.emit(changes)


class HeatmapApp:
    def __init__(self, config_path=None):
        self.app = QApplication(sys.argv)
        self.app.setFont(QFont("Segoe UI", 10))
        self.config_path = config_path
        self.config = load_config(config_path)
        self.store = PortfolioStore(config_path)
        self.stocks = market_items(stocks_data.SP500_STOCKS)

        self.window = DashboardWindow(self.stocks, self.store, self.config)
        pos = self.config.get("window_position")
        if pos: self.window.move(pos["x"], pos["y"])

        self.simulator = QuoteSimulator(tuple(s["ticker"] for s in self.stocks), self.config.get("seed"))
        self.simulator.data_updated.connect(self.on_data_updated)
        self.timer = QTimer(); self.timer.timeout.connect(self.update_data)
        self.timer.start(self.config["refresh_interval_ms"])
        self.app.aboutToQuit.connect(self.save_window_position)
        self.window.show()

    def update_data(self):
        # Prevent Thread overlap
        if self.simulator.isRunning(): return
        self.simulator.start()

    def on_data_updated(self, changes):
        apply_changes(self.stocks, changes)
        self.window.holdings.refresh(changes)
        self.window.update_view()
        logger.info("UI refreshed")

    def save_window_position(self):
        # the store owns the portfolio blob, so merge into its copy of the config
        self.store.config["window_position"] = {"x": self.window.pos().x(), "y": self.window.pos().y()}
        try:
            save_config(self.store.config, self.config_path)
        except OSError as e:
            logger.warning("Could not save window position: %s", e)

    def run(self): return self.app.exec_()


def main():
    config = load_config()
    logging.basicConfig(level=getattr(logging, str(config["log_level"]).upper(), logging.INFO),
                        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    return HeatmapApp().run()


if __name__ == "__main__":
    sys.exit(main())
