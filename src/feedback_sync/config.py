"""Configuration settings for the feedback sync engine."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderLimitsConfig(BaseModel):
    """Rate and concurrency bounds for one provider.

    Bulk operations fan out at most ``max_concurrent`` calls at a time and
    never start more than ``requests_per_minute`` calls in a rolling minute.
    """

    max_concurrent: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Maximum parallel requests against this provider",
    )
    requests_per_minute: int = Field(
        default=60,
        ge=1,
        description="Request starts allowed in any rolling 60 second window",
    )
    min_request_interval_ms: int = Field(
        default=0,
        ge=0,
        description="Minimum milliseconds between two request starts",
    )


def _default_provider_limits() -> dict[str, ProviderLimitsConfig]:
    return {
        "github": ProviderLimitsConfig(max_concurrent=5, requests_per_minute=60),
        "clickup": ProviderLimitsConfig(max_concurrent=3, requests_per_minute=90),
        "trello": ProviderLimitsConfig(max_concurrent=3, requests_per_minute=90),
        "linear": ProviderLimitsConfig(max_concurrent=3, requests_per_minute=60),
        "notion": ProviderLimitsConfig(
            max_concurrent=2, requests_per_minute=150, min_request_interval_ms=350
        ),
        "monday": ProviderLimitsConfig(max_concurrent=2, requests_per_minute=60),
    }


class HttpConfig(BaseModel):
    """Configuration for outbound provider HTTP calls."""

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout for provider API calls",
    )
    user_agent: str = Field(
        default="feedback-sync/0.1",
        description="User-Agent header sent to providers",
    )


class SyncConfig(BaseModel):
    """Configuration for sync behavior.

    Controls bulk batching and the lifetime of detached event hooks.
    """

    bulk_max_batch_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Feedback items submitted per bulk batch",
    )
    trigger_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound for a detached event hook before it is cancelled",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./feedback_sync.db",
        description="Async database connection string",
    )

    # --------------------------------------------------------------------------
    # Providers
    # --------------------------------------------------------------------------
    trello_api_key: str = Field(
        default="",
        description="Trello application key (paired with each project's token)",
    )
    http: HttpConfig = Field(
        default_factory=HttpConfig,
        description="Outbound HTTP configuration",
    )
    provider_limits: dict[str, ProviderLimitsConfig] = Field(
        default_factory=_default_provider_limits,
        description="Per-provider concurrency and rate limits",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Sync Configuration
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Bulk and event-triggered sync configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )

    def limits_for(self, provider: str) -> ProviderLimitsConfig:
        """Get the limits for a provider, falling back to conservative defaults."""
        return self.provider_limits.get(provider, ProviderLimitsConfig())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
