from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ArticleSource(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None


class Article(BaseModel):
    model_config = ConfigDict(extra="allow")

    source: ArticleSource | None = None
    author: str | None = None
    title: str | None = None
    description: str | None = None
    url: str | None = None
    urlToImage: str | None = None
    publishedAt: str | None = None
    content: str | None = None


class NewsResponse(BaseModel):
    status: Literal["success"] = "success"
    totalResults: int = Field(ge=0)
    articles: list[Article]


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    error: str
    code: str


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: datetime
