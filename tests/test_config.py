"""Tests for configuration settings."""

import pytest

from feedback_sync.config import ProviderLimitsConfig, Settings, get_settings


class TestSettings:
    """Tests for Settings class."""

    def test_settings_defaults(self):
        """Test default values are correct."""
        settings = Settings(
            _env_file=None,  # Don't load .env
        )

        assert settings.database_url == "sqlite+aiosqlite:///./feedback_sync.db"
        assert settings.trello_api_key == ""
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.sync.bulk_max_batch_size > 0
        assert settings.sync.trigger_timeout_seconds > 0

    def test_settings_default_provider_limits(self):
        """Every built-in provider has its own limits."""
        settings = Settings(_env_file=None)

        for provider in ("github", "clickup", "trello", "linear", "notion", "monday"):
            assert provider in settings.provider_limits

        assert settings.limits_for("monday").max_concurrent == 2

    def test_limits_for_unknown_provider_falls_back(self):
        """Unknown providers get the conservative defaults."""
        settings = Settings(_env_file=None)

        assert settings.limits_for("jira") == ProviderLimitsConfig()

    def test_settings_from_env(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
        monkeypatch.setenv("TRELLO_API_KEY", "trello_key_123")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./test.db"
        assert settings.trello_api_key == "trello_key_123"
        assert settings.environment == "production"
        assert settings.log_level == "DEBUG"

    def test_nested_settings_from_env(self, monkeypatch):
        """Nested sections use the double-underscore delimiter."""
        monkeypatch.setenv("SYNC__BULK_MAX_BATCH_SIZE", "7")
        monkeypatch.setenv("HTTP__TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.sync.bulk_max_batch_size == 7
        assert settings.http.timeout_seconds == 2.5

    def test_settings_environment_validation(self, monkeypatch):
        """Test that invalid environment value is rejected."""
        monkeypatch.setenv("ENVIRONMENT", "invalid")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_log_level_validation(self, monkeypatch):
        """Test that invalid log level is rejected."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_case_insensitive(self, monkeypatch):
        """Test that env var names are case-insensitive."""
        monkeypatch.setenv("database_url", "sqlite+aiosqlite:///./lower.db")
        monkeypatch.setenv("TRELLO_API_KEY", "upper_key")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./lower.db"
        assert settings.trello_api_key == "upper_key"


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_returns_settings(self):
        """Test that get_settings returns a Settings instance."""
        get_settings.cache_clear()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_get_settings_cached(self):
        """Test that get_settings returns cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
