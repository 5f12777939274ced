"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from src.config import Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Don't leak environment-specific settings into other tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestConfigurationSystem:
    """Test suite for configuration management."""

    def test_default_values(self):
        """Verify all configuration fields have sensible defaults."""
        settings = Settings(_env_file=None)

        # Storage
        assert settings.mongodb_database == "voice_crm"
        assert settings.storage_backend == "mongodb"

        # Views
        assert settings.display_timezone == "UTC"
        assert settings.news_display_limit == 3
        assert settings.dashboard_recent_limit == 5

        # Enrichment
        assert settings.enrichment_provider_url is None
        assert settings.enrichment_provider_timeout_seconds == 30.0
        assert settings.enrichment_stale_after_days == 30
        assert settings.enrichment_worker_enabled is True

        # Logging
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False

    def test_environment_variable_override(self, monkeypatch):
        """Verify environment variables override defaults."""
        monkeypatch.setenv("MONGODB_DATABASE", "crm_test")
        monkeypatch.setenv("DISPLAY_TIMEZONE", "America/Mexico_City")
        monkeypatch.setenv("NEWS_DISPLAY_LIMIT", "5")
        monkeypatch.setenv("ENRICHMENT_PROVIDER_URL", "https://enrich.example/v1")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = get_settings()

        assert settings.mongodb_database == "crm_test"
        assert settings.display_timezone == "America/Mexico_City"
        assert settings.news_display_limit == 5
        assert settings.enrichment_provider_url == "https://enrich.example/v1"
        assert settings.log_level == "DEBUG"
        assert settings.environment == "production"

    def test_boolean_environment_variables(self, monkeypatch):
        """Verify boolean environment variables parse correctly."""
        monkeypatch.setenv("ENRICHMENT_WORKER_ENABLED", "false")
        monkeypatch.setenv("ENABLE_STRUCTURED_LOGGING", "true")

        settings = get_settings()

        assert settings.enrichment_worker_enabled is False
        assert settings.enable_structured_logging is True

    def test_singleton_pattern(self):
        """Verify get_settings() returns same instance."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_invalid_storage_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "postgres")

        with pytest.raises(ValueError):
            get_settings()
