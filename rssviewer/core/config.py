# rssviewer/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FRONTEND_URL = "http://localhost:3386"
# Deployed frontends that are always allowed besides FRONTEND_URL
STATIC_ALLOWED_ORIGINS = (
    "http://cryptorssview.ai-server.org",
    "http://cryptoapi.ai-server.org",
)


class DatabaseSettings(BaseSettings):
    """Connection settings for one logical database.

    Subclasses only differ by their environment prefix, so each pool can be
    pointed at a different server. ``url`` wins over the individual parts
    when set (used for SQLite in tests and for odd drivers).
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    db: str = "postgres"
    url: str | None = None

    @property
    def async_url(self) -> str:
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"

    @property
    def masked_url(self) -> str:
        if self.url:
            # keep scheme and host part, hide anything between ':' and '@'
            head, sep, tail = self.url.partition("@")
            if not sep:
                return self.url
            scheme, _, creds = head.partition("://")
            user = creds.split(":", 1)[0]
            return f"{scheme}://{user}:***@{tail}"
        return f"postgresql+asyncpg://{self.user}:***@{self.host}:{self.port}/{self.db}"

    @property
    def is_sqlite(self) -> bool:
        return self.async_url.startswith("sqlite")


class NewsDatabaseSettings(DatabaseSettings):
    model_config = SettingsConfigDict(env_prefix="POSTGRES_", env_file=".env", extra="ignore")


class PriceDatabaseSettings(DatabaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOCK_", env_file=".env", extra="ignore")

    port: int = 5433


class SentimentDatabaseSettings(DatabaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOCKANALYZE_", env_file=".env", extra="ignore")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    news_db: NewsDatabaseSettings = Field(default_factory=NewsDatabaseSettings)
    price_db: PriceDatabaseSettings = Field(default_factory=PriceDatabaseSettings)
    sentiment_db: SentimentDatabaseSettings = Field(default_factory=SentimentDatabaseSettings)

    # Pool sizing, shared by the three server pools
    pool_size: int = Field(5, alias="DB_POOL_SIZE")
    max_overflow: int = Field(5, alias="DB_MAX_OVERFLOW")
    pool_timeout: int = Field(30, alias="DB_POOL_TIMEOUT")
    pool_recycle: int = Field(1800, alias="DB_POOL_RECYCLE")
    # seconds, passed to asyncpg.connect
    connect_timeout: float = Field(10, alias="DB_CONNECT_TIMEOUT")

    host: str = Field("0.0.0.0", alias="BACKEND_HOST")
    port: int = Field(4000, validation_alias=AliasChoices("BACKEND_PORT", "PORT"))

    frontend_url: str = Field(DEFAULT_FRONTEND_URL, alias="FRONTEND_URL")
    extra_allowed_origins: str = Field("", alias="EXTRA_ALLOWED_ORIGINS")

    max_page_size: int = Field(100, alias="MAX_PAGE_SIZE")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @property
    def allowed_origins(self) -> List[str]:
        origins = [self.frontend_url, *STATIC_ALLOWED_ORIGINS]
        origins += [o.strip() for o in self.extra_allowed_origins.split(",") if o.strip()]
        # de-dup, keep order
        return list(dict.fromkeys(origins))


@lru_cache
def get_settings() -> Settings:
    return Settings()
