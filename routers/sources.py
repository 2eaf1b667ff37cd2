from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from routers.dependencies import get_news_client
from schemas.news import ErrorResponse
from schemas.sources import SourcesResponse
from services.newsapi_client import NewsAPIClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sources"], responses={"default": {"model": ErrorResponse}})


@router.get("/sources", response_model=SourcesResponse)
async def list_sources(
    language: str | None = Query(default=None),
    client: NewsAPIClient = Depends(get_news_client),
) -> SourcesResponse:
    sources = await client.sources(language=language)
    logger.info("Fetched %s sources", len(sources))
    return SourcesResponse(sources=sources)
