from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from schemas.errors import ErrorKind

ALL_SOURCES = "all"


class DateRange(str, Enum):
    today = "today"
    week = "week"
    month = "month"


@dataclass(frozen=True)
class FilterState:
    language: str = "en"
    date_range: str = DateRange.week.value
    source: str = ALL_SOURCES


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    filters: FilterState = field(default_factory=FilterState)

    @property
    def has_query(self) -> bool:
        return bool(self.query.strip())


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success:
    articles: list[dict[str, Any]]
    total_results: int


@dataclass(frozen=True)
class Failure:
    message: str
    code: ErrorKind


RequestResult = Union[Idle, Loading, Success, Failure]


@dataclass(frozen=True)
class Notice:
    """Informational message shown alongside a successful result."""

    message: str
    code: ErrorKind = ErrorKind.no_results
