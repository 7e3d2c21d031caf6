"""Tests for JSON settings."""

from __future__ import annotations

import json

from devsweep.settings import DEFAULTS, Settings


class TestSettings:
    def test_defaults_without_file(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        assert settings.get("cache.min_size_gb") == 1.0
        assert settings.get("scan.skip_dirs") == []
        assert settings.get("no.such.key", "fallback") == "fallback"

    def test_set_persists(self, tmp_path):
        path = tmp_path / "sub" / "settings.json"
        Settings(path).set("cache.min_size_gb", 2.5)

        assert json.loads(path.read_text()) == {"cache": {"min_size_gb": 2.5}}
        assert Settings(path).get("cache.min_size_gb") == 2.5

    def test_file_overrides_only_given_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"cache": {"safe_only": True}}))

        settings = Settings(path)
        assert settings.get("cache.safe_only") is True
        assert settings.get("cache.min_size_gb") == 1.0
        merged = settings.as_dict()
        assert merged["cache"] == {"min_size_gb": 1.0, "safe_only": True, "safety_table": None}
        assert merged["plugin_paths"] == []

    def test_as_dict_does_not_mutate_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"cache": {"safe_only": True}}))
        Settings(path).as_dict()
        assert DEFAULTS["cache"]["safe_only"] is False

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{oops")

        settings = Settings(path)
        assert settings.get("cache.min_size_gb") == 1.0
        assert "Could not load settings" in caplog.text

    def test_non_object_file_is_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert Settings(path).get("plugin_paths") == []

    def test_set_replaces_scalar_parent(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("scan", "oops")
        settings.set("scan.skip_dirs", ["vendor"])
        assert settings.get("scan.skip_dirs") == ["vendor"]

    def test_instance_uses_xdg_config_home(self, isolate_settings):
        settings = Settings.instance()
        assert settings.path == isolate_settings
        assert Settings.instance() is settings
