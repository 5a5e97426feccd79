"""Tests for the store mutations run from the dashboard widgets."""

import logging

import pytest

pytest.importorskip("PyQt5.QtWidgets")

import dashboard_data  # noqa: E402
from dashboard_panels import persist  # noqa: E402
from portfolio_store import PortfolioStore  # noqa: E402


def _failing_save(config, path=None):
    raise OSError("disk full")


@pytest.fixture
def store(config_path, fixed_clock):
    return PortfolioStore(config_path, clock=fixed_clock)


class TestPersist:
    def test_success(self, store):
        assert persist(store.set_display_mode, "map") is True
        assert store.display_mode == "map"

    def test_failed_write_is_logged_not_raised(self, store, monkeypatch, caplog):
        monkeypatch.setattr("portfolio_store.save_config", _failing_save)
        with caplog.at_level(logging.ERROR):
            assert persist(store.set_view_mode, "watchlist") is False
        assert store.view_mode == "portfolio"
        assert "disk full" in caplog.text

    def test_failed_add_leaves_lists_unchanged(self, store, monkeypatch):
        monkeypatch.setattr("portfolio_store.save_config", _failing_save)
        assert persist(dashboard_data.add_holding, store, "portfolio", "AMD", 3) is False
        assert not store.is_in_portfolio("AMD")
        assert persist(dashboard_data.remove_holding, store, "watchlist", "META") is False
        assert store.is_in_watchlist("META")

    def test_other_errors_propagate(self, store):
        with pytest.raises(ValueError):
            persist(store.set_view_mode, "market")
