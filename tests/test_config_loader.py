"""Tests for config_loader."""

import json

import pytest

from config_loader import (
    DEFAULT_API_URL,
    get_api_base_url,
    get_api_timeout,
    get_search_settings,
    get_session_max_age,
    load_config,
)


@pytest.fixture(autouse=True)
def no_env_override(monkeypatch):
    monkeypatch.delenv("CV_TAILOR_API_URL", raising=False)


class TestLoadConfig:
    def test_explicit_file_is_merged_with_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"search": {"debounce_ms": 150}}))

        config = load_config(str(path))

        assert config["search"]["debounce_ms"] == 150
        assert config["search"]["min_query_length"] == 2
        assert config["api"]["base_url"] == DEFAULT_API_URL

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.json"))

    def test_env_overrides_base_url(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api": {"base_url": "http://from-file"}}))
        monkeypatch.setenv("CV_TAILOR_API_URL", "http://from-env")

        assert load_config(str(path))["api"]["base_url"] == "http://from-env"


class TestAccessors:
    def test_base_url_strips_trailing_slash(self):
        assert get_api_base_url({"api": {"base_url": "http://x.test/"}}) == "http://x.test"

    def test_base_url_default(self):
        assert get_api_base_url({}) == DEFAULT_API_URL

    def test_timeout(self):
        assert get_api_timeout({"api": {"timeout": 5}}) == 5
        assert get_api_timeout({}) is None

    def test_search_settings_defaults(self):
        settings = get_search_settings({})
        assert settings.min_query_length == 2
        assert settings.debounce == pytest.approx(0.3)
        assert settings.limit == 10
        assert settings.cancel_superseded is True

    def test_search_settings_override(self):
        settings = get_search_settings(
            {"search": {"debounce_ms": 250, "cancel_superseded": False}}
        )
        assert settings.debounce == pytest.approx(0.25)
        assert settings.cancel_superseded is False

    def test_search_settings_rejects_zero_min_length(self):
        with pytest.raises(ValueError):
            get_search_settings({"search": {"min_query_length": 0}})

    def test_session_max_age(self):
        assert get_session_max_age({}) == 1800
        assert get_session_max_age({"session": {"max_age_seconds": 60}}) == 60
