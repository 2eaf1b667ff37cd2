"""View-models for the dashboard: what the cards and result panel display."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from dashboard.models import Failure, Idle, Loading, Notice, RequestResult, Success

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 150
UNKNOWN_SOURCE = "Unknown source"


def truncate_text(text: str | None, max_length: int) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_date(value: str) -> str:
    parsed = _parse_timestamp(value)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def time_ago(value: str, now: datetime | None = None) -> str:
    published = _parse_timestamp(value)
    now = now or datetime.now(timezone.utc)
    # Clock skew can put publishedAt slightly ahead of now.
    seconds = max((now - published).total_seconds(), 0.0)
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 60:
        return f"{_plural(minutes, 'minute')} ago"
    if hours < 24:
        return f"{_plural(hours, 'hour')} ago"
    if days < 7:
        return f"{_plural(days, 'day')} ago"
    return format_date(value)


@dataclass(frozen=True)
class ArticleCard:
    title: str
    description: str
    url: str | None
    image_url: str | None
    source_name: str
    author: str | None
    published: str


def build_card(article: dict[str, Any], now: datetime | None = None) -> ArticleCard:
    source = article.get("source")
    source_name = source.get("name") if isinstance(source, dict) else None

    published = ""
    published_at = article.get("publishedAt")
    if published_at:
        try:
            published = time_ago(published_at, now)
        except (TypeError, ValueError):
            logger.debug("Unable to parse publishedAt: %s", published_at)

    return ArticleCard(
        title=truncate_text(article.get("title"), TITLE_MAX_LENGTH),
        description=truncate_text(article.get("description"), DESCRIPTION_MAX_LENGTH),
        url=article.get("url"),
        image_url=article.get("urlToImage") or None,
        source_name=source_name or UNKNOWN_SOURCE,
        author=article.get("author") or None,
        published=published,
    )


@dataclass(frozen=True)
class DashboardView:
    show_spinner: bool = False
    error: str | None = None
    info: str | None = None
    show_welcome: bool = False
    results_label: str | None = None
    cards: list[ArticleCard] = field(default_factory=list)


def render(
    result: RequestResult,
    notice: Notice | None,
    query: str,
    now: datetime | None = None,
) -> DashboardView:
    if isinstance(result, Loading):
        return DashboardView(show_spinner=True)
    if isinstance(result, Failure):
        return DashboardView(error=result.message)
    if isinstance(result, Success) and result.articles:
        cards = [build_card(article, now) for article in result.articles]
        return DashboardView(
            results_label=f"Found {_plural(len(cards), 'article')}",
            cards=cards,
        )
    if notice is not None:
        return DashboardView(info=notice.message)
    return DashboardView(show_welcome=isinstance(result, Idle) and not query.strip())
