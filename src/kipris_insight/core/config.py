"""
Configuration management for KIPRIS Insight.
Loads environment variables and provides centralized access to application settings.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SEARCH_ENDPOINT_PATH = "/kipo-api/kipi/patUtiModInfoSearchSevice/getAdvancedSearch"
MIN_BATCH_DELAY_SECONDS = 0.2


class KiprisConfig(BaseSettings):
    """
    Centralized configuration for KIPRIS Insight.
    Loads from environment variables and .env file.
    """

    # === API Credentials ===
    kipris_api_key: str = Field(default="", alias="KIPRIS_API_KEY")
    kipris_base_url: str = Field(
        default="http://plus.kipris.or.kr",
        alias="KIPRIS_BASE_URL",
    )
    kipris_request_timeout_seconds: float = Field(
        default=30.0,
        alias="KIPRIS_REQUEST_TIMEOUT_SECONDS",
    )

    # === Paging ===
    summary_page_size: int = Field(default=100, alias="SUMMARY_PAGE_SIZE")
    search_page_size: int = Field(default=20, alias="SEARCH_PAGE_SIZE")

    # === Rate Limiting ===
    fetch_concurrency_limit: int = Field(default=5, alias="FETCH_CONCURRENCY_LIMIT")
    batch_delay_seconds: float = Field(default=0.25, alias="BATCH_DELAY_SECONDS")
    max_retry_attempts: int = Field(default=3, alias="MAX_RETRY_ATTEMPTS")
    retry_delay_multiplier: float = Field(default=1.0, alias="RETRY_DELAY_MULTIPLIER")

    # === Application Configuration ===
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("batch_delay_seconds")
    @classmethod
    def _check_batch_delay(cls, value: float) -> float:
        if value < MIN_BATCH_DELAY_SECONDS:
            raise ValueError(
                f"batch_delay_seconds must be at least {MIN_BATCH_DELAY_SECONDS}s"
            )
        return value

    @field_validator(
        "summary_page_size",
        "search_page_size",
        "fetch_concurrency_limit",
        "max_retry_attempts",
    )
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be >= 1")
        return value

    @property
    def search_url(self) -> str:
        """KIPRIS advanced search endpoint."""
        return f"{self.kipris_base_url.rstrip('/')}{SEARCH_ENDPOINT_PATH}"

    @property
    def is_kipris_configured(self) -> bool:
        """Check if a KIPRIS service key is configured."""
        return bool(self.kipris_api_key and self.kipris_api_key.strip())


# Singleton instance
_config: KiprisConfig | None = None


def get_config() -> KiprisConfig:
    """
    Get the application configuration singleton.
    Initializes on first call.
    """
    global _config
    if _config is None:
        _config = KiprisConfig()
    return _config


def reload_config() -> KiprisConfig:
    """Force reload of configuration from environment."""
    global _config
    _config = KiprisConfig()
    return _config
