"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, no scattered magic strings.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        environment: Deployment environment name.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        host: Bind address for the HTTP server.
        port: Bind port for the HTTP server.
        use_inmemory: Use in-memory adapters instead of the database.
        database_url: Async SQLAlchemy URL, required when use_inmemory is False.
        pricing_service_url: Base URL of the external pricing API.
        pricing_timeout_seconds: Timeout for a single pricing request.
        static_prices: sku -> currency -> amount, served in in-memory mode.
        outbox_dispatch_interval_seconds: Pause between outbox relay passes.
        outbox_batch_size: Maximum events relayed per pass.
        outbox_webhook_url: Relay target; events are only logged when unset.
        rate_limit_enabled: Toggle request rate limiting.
        rate_limit_default: Default rate limit for all endpoints.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Order Service"
    version: str = "0.1.0"
    environment: Literal["development", "test", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    use_inmemory: bool = True
    database_url: Optional[str] = None

    pricing_service_url: str = "http://localhost:4000"
    pricing_timeout_seconds: float = 2.0
    static_prices: dict[str, dict[str, Decimal]] = {}

    outbox_dispatch_interval_seconds: float = 5.0
    outbox_batch_size: int = 100
    outbox_webhook_url: Optional[str] = None

    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"

    @model_validator(mode="after")
    def _require_database_url(self) -> "Settings":
        if not self.use_inmemory and not self.database_url:
            raise ValueError("DATABASE_URL is required when USE_INMEMORY is false")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the settings of the running process."""
    return Settings()
