"""
Configuration settings for the cattle price tracker.

Uses Pydantic Settings to load environment variables for the SQLite store,
the market source, the scraper acceptance policy and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SOURCE_URL = "https://www.mercadoagroganadero.com.ar/dll/hacienda2.dll/haciinfo000011"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class Settings(BaseSettings):
    # Storage
    db_path: str = Field("data/prices.db", alias="DB_PATH")

    # Market source
    source_url: str = Field(DEFAULT_SOURCE_URL, alias="SOURCE_URL")
    scrape_timeout: float = Field(15.0, alias="SCRAPE_TIMEOUT")
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="USER_AGENT")

    # Acceptance policy (exclusive bounds)
    index_min: float = Field(100, alias="INDEX_MIN")
    index_max: float = Field(50_000, alias="INDEX_MAX")
    head_count_min: int = Field(0, alias="HEAD_COUNT_MIN")
    head_count_max: int = Field(500_000, alias="HEAD_COUNT_MAX")

    # Backfill
    seed_path: str = Field("data/historical.json", alias="SEED_PATH")
    backfill_months: int = Field(2, alias="BACKFILL_MONTHS")

    # Default windows
    latest_limit: int = Field(10, alias="LATEST_LIMIT")
    history_days: int = Field(30, alias="HISTORY_DAYS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
