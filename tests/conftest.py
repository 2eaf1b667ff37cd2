"""Shared fixtures for backend and dashboard tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from services.newsapi_client import NewsAPIClient

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def settings() -> Settings:
    return Settings(news_api_key="test-key", environment="test", _env_file=None)


@pytest.fixture
def sample_articles() -> list[dict]:
    return [
        {
            "source": {"id": "bbc-news", "name": "BBC News"},
            "author": "Jane Doe",
            "title": "Chip makers rally",
            "description": "Semiconductor stocks climbed on Tuesday.",
            "url": "https://example.com/chips",
            "urlToImage": "https://example.com/chips.jpg",
            "publishedAt": "2026-03-10T12:00:00Z",
            "content": "Semiconductor stocks climbed...",
        },
        {
            "source": {"id": None, "name": "Example Wire"},
            "title": "Quantum networking milestone",
            "url": "https://example.com/quantum",
            "publishedAt": "2026-03-09T08:00:00Z",
        },
    ]


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., TestClient]:
    """Build a TestClient whose upstream NewsAPI calls go to ``handler``."""

    def factory(handler: Handler, raise_server_exceptions: bool = True) -> TestClient:
        app: FastAPI = create_app(settings)
        app.state.news_client = NewsAPIClient(
            api_key=settings.news_api_key,
            base_url=settings.news_api_base_url,
            transport=httpx.MockTransport(handler),
        )
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return factory
