from __future__ import annotations

from datetime import date
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    cyfra_api_url: str = Field(default="http://127.0.0.1:5000", alias="CYFRA_API_URL")
    cyfra_search_debounce_seconds: float = Field(
        default=0.3,
        alias="CYFRA_SEARCH_DEBOUNCE_SECONDS",
        ge=0.0,
        le=10.0,
    )
    cyfra_date_display_limit: int = Field(
        default=10,
        alias="CYFRA_DATE_DISPLAY_LIMIT",
        ge=1,
        le=500,
    )
    cyfra_default_date: date = Field(default=date(2024, 10, 15), alias="CYFRA_DEFAULT_DATE")
    cyfra_default_width: int = Field(default=512, alias="CYFRA_DEFAULT_WIDTH", ge=64, le=4096)
    cyfra_default_height: int = Field(default=512, alias="CYFRA_DEFAULT_HEIGHT", ge=64, le=4096)
    cyfra_request_timeout_seconds: float | None = Field(
        default=None,
        alias="CYFRA_REQUEST_TIMEOUT_SECONDS",
        gt=0.0,
    )

    cyfra_log_level: str = Field(default="INFO", alias="CYFRA_LOG_LEVEL")
    cyfra_log_json: bool = Field(default=False, alias="CYFRA_LOG_JSON")

    @property
    def api_url(self) -> str:
        return self.cyfra_api_url.strip().rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
