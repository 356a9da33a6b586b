"""Application configuration loaded from environment variables.

Settings for database, API, the OpenWeather upstream, and the auth flows.
Uses pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_MISSING_API_KEY_MSG = (
    "OPENWEATHER_API_KEY missing. Set it in environment and restart backend."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    # SQLite by default; postgresql+asyncpg://... works with the postgres extra
    database_url: str = "sqlite+aiosqlite:///./data.sqlite"
    database_echo: bool = False
    # Dev convenience: create missing tables on startup instead of running Alembic
    auto_create_tables: bool = True

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 4000

    # CORS
    # Never set to ["*"] (credentials are allowed)
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Application
    environment: Literal["development", "test", "production"] = "development"
    log_level: str = "INFO"

    # Upstream weather provider
    openweather_api_key: SecretStr = SecretStr("")
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    upstream_timeout_seconds: float = 10.0

    # Auth
    reset_token_ttl_minutes: int = 15
    # None -> echo the reset token only in development
    expose_reset_token: bool | None = None

    # Feature limits
    history_page_size: int = 50
    forecast_max_days: int = 6

    # Rate Limiting (Security)
    # Process-wide: applies to the shared limiter, not only to this app
    rate_limit_enabled: bool = True

    @property
    def reset_token_exposed(self) -> bool:
        """Whether POST /auth/request-reset echoes the token to the caller."""
        if self.expose_reset_token is None:
            return self.environment == "development"
        return self.expose_reset_token

    @property
    def openweather_configured(self) -> bool:
        """True once an OpenWeather API key is present."""
        return bool(self.openweather_api_key.get_secret_value().strip())

    @property
    def missing_api_key_message(self) -> str:
        """Operator-facing message for an unset OPENWEATHER_API_KEY."""
        return _MISSING_API_KEY_MSG

    @model_validator(mode="after")
    def check_settings(self) -> "Settings":
        """Validate limits and production security requirements.

        Checks:
        - History page size and forecast day cap must be positive
        - Upstream timeout and reset token TTL must be positive
        - CORS must not use wildcard origin (incompatible with credentials)
        - Reset tokens must never be echoed in production
        """
        if self.history_page_size <= 0:
            msg = f"HISTORY_PAGE_SIZE must be positive. Got: {self.history_page_size}"
            raise ValueError(msg)
        if self.forecast_max_days <= 0:
            msg = f"FORECAST_MAX_DAYS must be positive. Got: {self.forecast_max_days}"
            raise ValueError(msg)
        if self.upstream_timeout_seconds <= 0:
            msg = (
                "UPSTREAM_TIMEOUT_SECONDS must be positive. "
                f"Got: {self.upstream_timeout_seconds}"
            )
            raise ValueError(msg)
        if self.reset_token_ttl_minutes <= 0:
            msg = (
                "RESET_TOKEN_TTL_MINUTES must be positive. "
                f"Got: {self.reset_token_ttl_minutes}"
            )
            raise ValueError(msg)

        # CORS wildcard with credentials is invalid (all environments)
        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application sends credentials (Authorization headers) which "
                "are incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        if self.environment == "production" and self.expose_reset_token:
            msg = (
                "EXPOSE_RESET_TOKEN must not be enabled in production. "
                "Reset tokens would be returned to any caller who knows an email."
            )
            raise ValueError(msg)

        return self

