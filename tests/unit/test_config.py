"""
Unit tests for friendsocial/config.py

Tests Settings defaults, environment variable loading, production
validation and configuration caching behavior.
"""

import pytest
from pydantic import ValidationError

from friendsocial.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove settings-related env vars so defaults are observable."""
    for name in (
        "PYTHON_ENV",
        "LOG_LEVEL",
        "DATABASE_URL",
        "TIMEZONE",
        "SCHEDULING_HORIZON_MONTHS",
        "SERIALIZE_WRITES",
        "API_HOST",
        "API_PORT",
        "API_RELOAD",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettingsDefaults:
    """Test Settings initialization with default values."""

    def test_settings_defaults(self):
        """Settings should initialize with correct default values."""
        settings = Settings(_env_file=None)

        assert settings.python_env == "development"
        assert settings.log_level == "INFO"
        assert settings.database_url == "sqlite:///./friendsocial.db"
        assert settings.timezone == "UTC"
        assert settings.scheduling_horizon_months == 6
        assert settings.serialize_writes is False
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 8000
        assert settings.api_reload is True

    def test_is_development_default(self):
        settings = Settings(_env_file=None)

        assert settings.is_development is True
        assert settings.is_production is False
        assert settings.uses_sqlite is True
        assert settings.uses_postgresql is False


class TestSettingsEnvironmentVariables:
    """Test Settings loading from environment variables."""

    def test_settings_from_env_vars(self, monkeypatch):
        monkeypatch.setenv("PYTHON_ENV", "production")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/friendsocial")
        monkeypatch.setenv("TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("SCHEDULING_HORIZON_MONTHS", "3")
        monkeypatch.setenv("SERIALIZE_WRITES", "true")
        monkeypatch.setenv("API_PORT", "9000")

        settings = Settings(_env_file=None)

        assert settings.python_env == "production"
        assert settings.log_level == "DEBUG"
        assert settings.uses_postgresql is True
        assert settings.timezone == "Europe/Berlin"
        assert settings.scheduling_horizon_months == 3
        assert settings.serialize_writes is True
        assert settings.api_port == 9000

    def test_settings_case_insensitive(self, monkeypatch):
        """Env var names are case-insensitive; values must match literals exactly."""
        monkeypatch.setenv("python_env", "production")
        monkeypatch.setenv("log_level", "ERROR")

        settings = Settings(_env_file=None)

        assert settings.python_env == "production"
        assert settings.log_level == "ERROR"


class TestSettingsValidation:
    """Test Settings field validation."""

    def test_invalid_python_env(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, python_env="staging")

        error = exc_info.value.errors()[0]
        assert error["type"] == "literal_error"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_horizon_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, scheduling_horizon_months=0)

    def test_invalid_api_port(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_port="not_a_number")


class TestProductionConfig:
    """Test validate_production_config()."""

    def test_development_skips_validation(self):
        Settings(_env_file=None).validate_production_config()

    def test_production_requires_postgresql(self):
        settings = Settings(_env_file=None, python_env="production", api_reload=False)

        with pytest.raises(ValueError, match="PostgreSQL"):
            settings.validate_production_config()

    def test_production_requires_reload_disabled(self):
        settings = Settings(
            _env_file=None,
            python_env="production",
            database_url="postgresql://db/friendsocial",
        )

        with pytest.raises(ValueError, match="API_RELOAD"):
            settings.validate_production_config()

    def test_valid_production_config(self):
        settings = Settings(
            _env_file=None,
            python_env="production",
            database_url="postgresql://db/friendsocial",
            api_reload=False,
        )

        settings.validate_production_config()


class TestGetSettingsCaching:
    """Test get_settings() function and LRU cache behavior."""

    def test_get_settings_returns_settings_instance(self):
        assert isinstance(get_settings(), Settings)

    def test_get_settings_cached(self):
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_get_settings_cache_clear(self):
        get_settings.cache_clear()

        get_settings()
        get_settings.cache_clear()
        get_settings()

        assert get_settings.cache_info().currsize == 1
