from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "production", "staging", "test"]


def _resolve_env_files() -> tuple[str, ...]:
    env = os.getenv("NEWSDASH_ENVIRONMENT", "development").lower()
    if env in {"prod", "production"}:
        return (".env", ".env.prod")
    if env in {"dev", "development"}:
        return (".env", ".env.dev")
    if env in {"test", "testing"}:
        return (".env", ".env.test")
    return (".env",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NEWSDASH_",
        env_file=_resolve_env_files(),
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    news_api_key: str = Field(
        min_length=1,
        validation_alias=AliasChoices("news_api_key", "NEWSDASH_NEWS_API_KEY", "NEWS_API_KEY"),
    )
    news_api_base_url: str = "https://newsapi.org/v2"
    request_timeout: float = 10.0
    page_size: int = Field(default=20, ge=1, le=100)

    environment: Environment = "development"
    project_name: str = "NewsAPI Dashboard Backend"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    log_json: bool = False
    rate_limit: str = "60/minute"
    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = []
    enable_docs: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
