"""Tests for core.settings module.

Covers:
- DispatchSettings defaults
- Environment variable override
- Validation of level and format
- Cached instance
"""

import pytest
from pydantic import ValidationError

from trigger_dispatch.core.settings import DispatchSettings, get_settings, reset_settings


class TestDefaults:
    def test_log_level(self):
        assert DispatchSettings().log_level == "INFO"

    def test_log_format(self):
        assert DispatchSettings().log_format == "console"

    def test_kill_switch_prefix(self):
        assert DispatchSettings().kill_switch_env_prefix == "TRIGGER_KS_"

    def test_debug_false(self):
        assert DispatchSettings().debug is False


class TestEnvOverride:
    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("TRIGGER_LOG_LEVEL", "debug")
        assert DispatchSettings().log_level == "DEBUG"

    def test_log_format_from_env(self, monkeypatch):
        monkeypatch.setenv("TRIGGER_LOG_FORMAT", "JSON")
        assert DispatchSettings().log_format == "json"

    def test_unprefixed_ignored(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert DispatchSettings().log_level == "INFO"

    def test_debug_forces_debug_level(self, monkeypatch):
        monkeypatch.setenv("TRIGGER_DEBUG", "true")
        settings = DispatchSettings()
        assert settings.log_level == "INFO"
        assert settings.effective_log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("TRIGGER_LOG_LEVEL=WARNING\n")
        assert DispatchSettings().log_level == "WARNING"

    def test_invalid_level_rejected(self, monkeypatch):
        monkeypatch.setenv("TRIGGER_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            DispatchSettings()

    def test_invalid_format_rejected(self):
        with pytest.raises(ValidationError):
            DispatchSettings(log_format="xml")


class TestCachedSettings:
    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_reset_settings(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("TRIGGER_LOG_LEVEL", "ERROR")
        assert get_settings().log_level == "INFO"
        reset_settings()
        second = get_settings()
        assert second is not first
        assert second.log_level == "ERROR"
