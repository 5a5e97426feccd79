"""Tests for the JSON config layer."""

import json

from settings import DEFAULT_CONFIG, STORAGE_KEY, load_config, save_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, config_path):
        assert load_config(config_path) == DEFAULT_CONFIG

    def test_defaults_are_copied(self, config_path):
        config = load_config(config_path)
        config["heatmap_width"] = 1
        assert DEFAULT_CONFIG["heatmap_width"] == 1200

    def test_stored_values_override_defaults(self, config_path):
        config_path.write_text(json.dumps({"refresh_interval_ms": 5000, "extra": True}), encoding="utf-8")
        config = load_config(config_path)
        assert config["refresh_interval_ms"] == 5000
        assert config["extra"] is True
        assert config["heatmap_height"] == DEFAULT_CONFIG["heatmap_height"]

    def test_corrupt_file_falls_back(self, config_path, caplog):
        config_path.write_text("{not json", encoding="utf-8")
        assert load_config(config_path) == DEFAULT_CONFIG
        assert "unreadable" in caplog.text

    def test_non_object_ignored(self, config_path):
        config_path.write_text("[1, 2, 3]", encoding="utf-8")
        assert load_config(config_path) == DEFAULT_CONFIG


class TestSaveConfig:
    def test_round_trip_keeps_storage_blob(self, config_path):
        config = load_config(config_path)
        config[STORAGE_KEY] = {"view_mode": "watchlist"}
        save_config(config, config_path)
        assert load_config(config_path)[STORAGE_KEY] == {"view_mode": "watchlist"}

    def test_last_write_wins(self, config_path):
        save_config({"seed": 1}, config_path)
        save_config({"seed": 2}, config_path)
        assert json.loads(config_path.read_text(encoding="utf-8")) == {"seed": 2}
