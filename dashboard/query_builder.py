"""Translate dashboard search state into parameters for the news endpoint."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from dashboard.models import ALL_SOURCES, DateRange, FilterState

PAGE_SIZE = 20
SORT_BY = "publishedAt"
ALL_LANGUAGES = "all"

DATE_RANGE_DAYS: dict[str, int] = {
    DateRange.today.value: 1,
    DateRange.week.value: 7,
    DateRange.month.value: 30,
}
DEFAULT_RANGE_DAYS = DATE_RANGE_DAYS[DateRange.week.value]


def range_days(date_range: str) -> int:
    return DATE_RANGE_DAYS.get(date_range, DEFAULT_RANGE_DAYS)


def date_from(date_range: str, now: datetime | None = None) -> str:
    """Return the ``YYYY-MM-DD`` start date for a date range filter.

    ``now`` is normalized to UTC before subtracting, so the result only depends
    on the UTC calendar day. Naive datetimes are taken to be UTC already.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return (now - timedelta(days=range_days(date_range))).date().isoformat()


def build_search_params(
    query: str, filters: FilterState, now: datetime | None = None
) -> dict[str, str | int]:
    params: dict[str, str | int] = {}
    trimmed = query.strip()
    if trimmed:
        params["q"] = trimmed
    if filters.language and filters.language != ALL_LANGUAGES:
        params["language"] = filters.language
    params["from"] = date_from(filters.date_range, now)
    if filters.source != ALL_SOURCES:
        params["sources"] = filters.source
    params["sortBy"] = SORT_BY
    params["pageSize"] = PAGE_SIZE
    return params
