"""Configuration management for flatmate."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Record store
    sqlite_db_path: str = Field(default="./data/flatmate.db", description="SQLite database file path")

    # WAHA Configuration
    waha_base_url: str = Field(default="http://waha:3000", description="WAHA Base URL")
    waha_api_key: str | None = Field(default=None, description="WAHA API Key (optional)")
    webhook_secret: str | None = Field(default=None, description="Shared secret expected in X-Webhook-Secret")

    # Observability
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    log_level: str = Field(default="INFO", pattern=r"(?i)^(debug|info|warning|error|critical)$")

    # Household Configuration
    household_size: int = Field(default=3, ge=1, description="Number of people the shared costs are split between")
    include_non_payers: bool = Field(
        default=False,
        description="Add members known from /setemoji to the balance roster even if they never paid",
    )
    rent_day: int = Field(default=27, ge=1, le=28, description="Day of the month rent is due")
    default_emoji: str = Field(default="\U0001f914", description="Emoji shown for members without one")


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_BAD_REQUEST: int = 400

    # Rate Limiting
    MAX_REQUESTS_PER_MINUTE: int = 60

    # Webhook Security
    WEBHOOK_MAX_AGE_SECONDS: int = 300  # 5 minutes

    # Money
    AMOUNT_DECIMAL_PLACES: int = 2
    BALANCE_EPSILON: float = 0.005  # below half a cent counts as settled


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
