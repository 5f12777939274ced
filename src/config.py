"""
Centralized Configuration System
Environment-aware settings for storage, enrichment and views.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.
    """

    # ============================================
    # MONGODB
    # ============================================
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "voice_crm"
    mongodb_max_pool_size: int = 20
    mongodb_min_pool_size: int = 1
    mongodb_server_selection_timeout_ms: int = 5000
    storage_backend: Literal["mongodb", "memory"] = "mongodb"  # memory: single-instance dev, data lost on restart

    # ============================================
    # VIEWS
    # ============================================
    display_timezone: str = "UTC"    # Calendar-day boundaries for due dates and log grouping
    news_display_limit: int = 3      # News items shown per enrichment (storage keeps all)
    dashboard_recent_limit: int = 5  # Recent tasks/contacts on the dashboard

    # ============================================
    # ENRICHMENT PROVIDER
    # ============================================
    enrichment_provider_url: Optional[str] = None
    enrichment_provider_api_key: Optional[str] = None
    enrichment_provider_timeout_seconds: float = 30.0

    # ============================================
    # ENRICHMENT WORKER
    # ============================================
    enrichment_worker_enabled: bool = True
    enrichment_poll_interval_seconds: float = 5.0
    enrichment_max_concurrent: int = 5
    enrichment_batch_size: int = 20
    enrichment_stale_after_days: int = 30

    # ============================================
    # LOGGING
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "test", "staging", "production"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()


# Convenience accessor for common use
settings = get_settings()
