from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from routers.dependencies import get_news_client
from schemas.news import ErrorResponse, NewsResponse
from services.newsapi_client import EverythingQuery, NewsAPIClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["news"], responses={"default": {"model": ErrorResponse}})


@router.get("/news", response_model=NewsResponse)
async def search_news(
    q: str | None = Query(default=None),
    language: str | None = Query(default=None),
    from_date: str | None = Query(default=None, alias="from"),
    sources: str | None = Query(default=None),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    page_size: int | None = Query(default=None, alias="pageSize", ge=1, le=100),
    client: NewsAPIClient = Depends(get_news_client),
) -> NewsResponse:
    query = EverythingQuery(
        q=q,
        language=language,
        from_date=from_date,
        sources=sources,
        sort_by=sort_by,
        page_size=page_size,
    )
    logger.info(
        "News request q=%r language=%s from=%s sources=%s sortBy=%s",
        q,
        language,
        from_date,
        sources,
        sort_by,
    )
    page = await client.everything(query)
    logger.info("Fetched %s articles", len(page.articles))
    return NewsResponse(totalResults=page.total_results, articles=page.articles)


@router.get("/top-headlines", response_model=NewsResponse)
async def top_headlines(
    country: str | None = Query(default=None),
    category: str | None = Query(default=None),
    q: str | None = Query(default=None),
    client: NewsAPIClient = Depends(get_news_client),
) -> NewsResponse:
    logger.info("Top headlines request country=%s category=%s q=%r", country, category, q)
    page = await client.top_headlines(country=country, category=category, q=q)
    logger.info("Fetched %s top headlines", len(page.articles))
    return NewsResponse(totalResults=page.total_results, articles=page.articles)
