"""Tests for configuration lookup."""

import pytest

from legoworld.config import (
    DEFAULT_CACHE_PATH,
    Config,
    get_cache_path,
    get_cloudinary_cloud_name,
    get_debug_mode,
)
from legoworld.ui.handlers.error import ConfigError


class TestConfig:
    """Test the Config class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = Config()

    def test_get_from_environment(self, monkeypatch):
        monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")

        assert self.config.get("CLOUDINARY_CLOUD_NAME") == "demo"

    def test_missing_value_uses_default(self):
        assert self.config.get("LEGOWORLD_UNSET_KEY", "fallback") == "fallback"
        assert self.config.get("LEGOWORLD_UNSET_KEY") is None

    def test_empty_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("LEGOWORLD_EMPTY", "")

        assert self.config.get("LEGOWORLD_EMPTY", "fallback") == "fallback"

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("Yes", True), ("off", False), ("0", False)])
    def test_cast_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("LEGOWORLD_FLAG", raw)

        assert self.config.get("LEGOWORLD_FLAG", cast_type=bool) is expected

    def test_cast_int(self, monkeypatch):
        monkeypatch.setenv("MAX_FILES", "12")

        assert self.config.get("MAX_FILES", 10, int) == 12

    def test_cast_failure_uses_default(self, monkeypatch):
        monkeypatch.setenv("MAX_FILES", "many")

        assert self.config.get("MAX_FILES", 10, int) == 10

    def test_values_are_cached(self, monkeypatch):
        monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "first")
        assert self.config.get("CLOUDINARY_CLOUD_NAME") == "first"

        monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "second")
        assert self.config.get("CLOUDINARY_CLOUD_NAME") == "first"

        self.config.clear_cache()
        assert self.config.get("CLOUDINARY_CLOUD_NAME") == "second"

    def test_get_required_missing(self):
        with pytest.raises(ConfigError, match="LEGOWORLD_UNSET_KEY"):
            self.config.get_required("LEGOWORLD_UNSET_KEY")

    @pytest.mark.parametrize("environment,expected", [("development", True), ("local", True), ("production", False)])
    def test_is_development(self, monkeypatch, environment, expected):
        monkeypatch.setenv("ENVIRONMENT", environment)

        assert self.config.is_development() is expected


class TestConfigHelpers:
    """Test module-level getters."""

    def test_unconfigured_media_host(self):
        assert get_cloudinary_cloud_name() is None

    def test_cache_path_from_environment(self, tmp_path):
        assert get_cache_path() == str(tmp_path / "cache.duckdb")

    def test_default_cache_path(self, monkeypatch):
        monkeypatch.delenv("LOCAL_CACHE_PATH")

        assert get_cache_path() == DEFAULT_CACHE_PATH

    def test_debug_mode_off_in_tests(self, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)

        assert get_debug_mode() is False
