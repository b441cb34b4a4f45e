from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = Field(..., alias="DATABASE_URL")
    db_schema: str | None = Field(default="registry", alias="DB_SCHEMA")
    cors_origins_raw: str | list[str] = Field(default_factory=list, alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    web_base_url: str = Field(default="http://localhost:3000", alias="WEB_BASE_URL")

    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    # Transactional mail API (Resend-compatible)
    mail_api_url: str = Field(default="https://api.resend.com", alias="MAIL_API_URL")
    mail_api_key: str | None = Field(default=None, alias="MAIL_API_KEY")
    mail_from: str | None = Field(default=None, alias="MAIL_FROM")
    mail_reply_to: str | None = Field(default=None, alias="MAIL_REPLY_TO")
    mail_timeout_seconds: float = Field(default=10, alias="MAIL_TIMEOUT_SECONDS")

    # Database pool settings (PostgreSQL only)
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    db_pool_max_overflow: int = Field(default=20, alias="DB_POOL_MAX_OVERFLOW")
    db_pool_recycle: int = Field(default=3600, alias="DB_POOL_RECYCLE")
    db_pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")

    @field_validator("cors_origins_raw", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, list):
            parsed = [str(item).rstrip('/') for item in value]
        elif isinstance(value, str):
            parsed = [origin.strip().rstrip('/') for origin in value.split(",") if origin.strip()]
        else:
            parsed = []

        expanded: set[str] = set(parsed)
        for origin in parsed:
            if origin.startswith("http://localhost"):
                expanded.add(origin.replace("localhost", "127.0.0.1", 1))
        return sorted(expanded)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("web_base_url", "mail_api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return str(value).rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        return self.cors_origins_raw  # type: ignore[return-value]

    @property
    def mail_enabled(self) -> bool:
        return bool(self.mail_api_key and self.mail_from)


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]
