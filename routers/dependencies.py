from __future__ import annotations

from fastapi import Request

from services.newsapi_client import NewsAPIClient


def get_news_client(request: Request) -> NewsAPIClient:
    return request.app.state.news_client
