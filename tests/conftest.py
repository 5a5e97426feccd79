"""Shared fixtures for the heatmap dashboard tests."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


@pytest.fixture
def config_path(tmp_path):
    """Config file location in a temp dir (not created yet)."""
    return tmp_path / "config.json"


@pytest.fixture
def fixed_clock():
    return lambda: 1_700_000_000.0


@pytest.fixture
def today():
    return date(2025, 3, 3)  # a Monday


@pytest.fixture
def abcd_items():
    return [
        {"key": "A", "weight": 60},
        {"key": "B", "weight": 25},
        {"key": "C", "weight": 10},
        {"key": "D", "weight": 5},
    ]
