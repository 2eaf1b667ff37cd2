from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from schemas.errors import ErrorKind
from schemas.news import Article
from schemas.sources import Source

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_SORT_BY = "publishedAt"
DEFAULT_SOURCES_LANGUAGE = "en"
ALL = "all"

NETWORK_ERROR_MESSAGE = "Unable to connect to NewsAPI. Check your internet connection."

_ARTICLES = TypeAdapter(list[Article])
_SOURCES = TypeAdapter(list[Source])

STATUS_ERRORS: dict[int, tuple[ErrorKind, str]] = {
    401: (ErrorKind.invalid_credential, "Invalid API key. Please check your NewsAPI key."),
    429: (
        ErrorKind.quota_exceeded,
        "API rate limit exceeded. The daily request limit has been reached.",
    ),
    426: (ErrorKind.plan_required, "This request requires a paid NewsAPI plan."),
    500: (ErrorKind.upstream_unavailable, "NewsAPI server error. Please try again later."),
}


class NewsAPIError(RuntimeError):
    """Raised when NewsAPI cannot serve a request, already classified."""

    def __init__(self, kind: ErrorKind, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


def classify_status(status_code: int, upstream_message: str | None) -> NewsAPIError:
    known = STATUS_ERRORS.get(status_code)
    if known is not None:
        kind, message = known
        return NewsAPIError(kind, message, status_code)
    return NewsAPIError(ErrorKind.upstream_error, upstream_message or "Unknown error", status_code)


def _is_set(value: str | None) -> bool:
    return bool(value) and value != ALL


@dataclass(frozen=True)
class EverythingQuery:
    q: str | None = None
    language: str | None = None
    from_date: str | None = None
    sources: str | None = None
    sort_by: str | None = None
    page_size: int | None = None


@dataclass(frozen=True)
class NewsPage:
    total_results: int
    articles: list[Article]


def build_everything_params(
    api_key: str, query: EverythingQuery, default_page_size: int = DEFAULT_PAGE_SIZE
) -> dict[str, Any]:
    page_size = query.page_size or default_page_size
    params: dict[str, Any] = {
        "apiKey": api_key,
        "pageSize": max(1, min(page_size, MAX_PAGE_SIZE)),
    }
    if query.q:
        params["q"] = query.q
    if _is_set(query.language):
        params["language"] = query.language
    if query.from_date:
        params["from"] = query.from_date
    if _is_set(query.sources):
        params["sources"] = query.sources
    params["sortBy"] = query.sort_by or DEFAULT_SORT_BY
    return params


def build_headline_params(
    api_key: str,
    country: str | None = None,
    category: str | None = None,
    q: str | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> dict[str, Any]:
    params: dict[str, Any] = {"apiKey": api_key, "pageSize": page_size}
    if country:
        params["country"] = country
    if category:
        params["category"] = category
    if q:
        params["q"] = q
    return params


def build_sources_params(api_key: str, language: str | None = None) -> dict[str, Any]:
    return {"apiKey": api_key, "language": language or DEFAULT_SOURCES_LANGUAGE}


class NewsAPIClient:
    """Forward dashboard queries to NewsAPI and classify every failure."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://newsapi.org/v2",
        timeout: float = 10.0,
        page_size: int = DEFAULT_PAGE_SIZE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("NewsAPI %s unreachable: %s", path, exc.__class__.__name__)
            raise NewsAPIError(ErrorKind.network_unreachable, NETWORK_ERROR_MESSAGE) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            upstream_message = payload.get("message") if isinstance(payload, dict) else None
            raise classify_status(response.status_code, upstream_message)

        if not isinstance(payload, dict):
            logger.warning("NewsAPI %s returned a malformed body", path)
            raise NewsAPIError(ErrorKind.network_unreachable, NETWORK_ERROR_MESSAGE)

        if payload.get("status", "ok") != "ok":
            raise NewsAPIError(
                ErrorKind.upstream_error,
                payload.get("message") or "Unknown error",
            )
        return payload

    @staticmethod
    def _items(payload: dict[str, Any], key: str, adapter: TypeAdapter[Any]) -> list[Any]:
        items = payload.get(key)
        if items is None:
            return []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            logger.warning("NewsAPI returned malformed %s", key)
            raise NewsAPIError(ErrorKind.network_unreachable, NETWORK_ERROR_MESSAGE)
        try:
            return adapter.validate_python(items)
        except ValidationError as exc:
            logger.warning("NewsAPI returned %s invalid %s fields", exc.error_count(), key)
            raise NewsAPIError(ErrorKind.network_unreachable, NETWORK_ERROR_MESSAGE) from exc

    def _page(self, payload: dict[str, Any]) -> NewsPage:
        articles = self._items(payload, "articles", _ARTICLES)
        total = payload.get("totalResults")
        if not isinstance(total, int) or isinstance(total, bool) or total < 0:
            total = len(articles)
        return NewsPage(total_results=total, articles=articles)

    async def everything(self, query: EverythingQuery) -> NewsPage:
        params = build_everything_params(self._api_key, query, self._page_size)
        return self._page(await self._get("/everything", params))

    async def top_headlines(
        self,
        country: str | None = None,
        category: str | None = None,
        q: str | None = None,
    ) -> NewsPage:
        params = build_headline_params(self._api_key, country, category, q, self._page_size)
        return self._page(await self._get("/top-headlines", params))

    async def sources(self, language: str | None = None) -> list[Source]:
        payload = await self._get("/sources", build_sources_params(self._api_key, language))
        return self._items(payload, "sources", _SOURCES)
