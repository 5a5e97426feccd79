"""
App configuration: a single JSON file next to the script (or the frozen exe).

The file also carries the persisted portfolio/watchlist blob under
STORAGE_KEY; see portfolio_store.
"""
import sys
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# EXE 실행 시 실행 파일 위치, 소스 실행 시 스크립트 위치
if getattr(sys, 'frozen', False):
    CONFIG_FILE = Path(sys.executable).parent / "config.json"
else:
    CONFIG_FILE = Path(__file__).parent / "config.json"

STORAGE_KEY = "portfolio-storage"

DEFAULT_CONFIG = {
    "refresh_interval_ms": 120000,
    "heatmap_width": 1200,
    "heatmap_height": 800,
    "portfolio_heatmap_height": 320,
    # +-% at which a cell reaches full colour
    "change_full_scale": 6.0,
    "log_level": "INFO",
    "seed": None,
}


def load_config(path=None):
    """Read the config file merged over DEFAULT_CONFIG. Missing or corrupt files give the defaults."""
    path = Path(path) if path else CONFIG_FILE
    config = dict(DEFAULT_CONFIG)
    if not path.exists():
        return config
    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Config %s unreadable, using defaults: %s", path, e)
        return config
    if not isinstance(stored, dict):
        logger.warning("Config %s is not a JSON object, ignoring it", path)
        return config
    config.update(stored)
    return config


def save_config(config, path=None):
    """Write the whole config back; the last write wins."""
    path = Path(path) if path else CONFIG_FILE
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    logger.debug("Config saved to %s", path)
