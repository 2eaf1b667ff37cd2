from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from dashboard.backend_client import BackendUnavailableError, DashboardBackendClient
from dashboard.models import (
    Failure,
    FilterState,
    Idle,
    Loading,
    Notice,
    RequestResult,
    SearchState,
    Success,
)
from dashboard.query_builder import build_search_params
from schemas.errors import ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "technology"
SOURCES_LANGUAGE = "en"
CONNECTION_FAILED_MESSAGE = (
    "Failed to connect to the server. Make sure the dashboard backend is running."
)
FETCH_FAILED_MESSAGE = "Failed to fetch news"
NO_RESULTS_MESSAGE = "No articles found. Try different search terms or filters."

ResultListener = Callable[[RequestResult, Optional[Notice]], None]


def normalize_news_payload(payload: dict[str, Any]) -> tuple[RequestResult, Notice | None]:
    """Map a backend news body onto the request result and optional notice."""
    if payload.get("status") == "success":
        articles = list(payload.get("articles") or [])
        total = payload.get("totalResults")
        result = Success(
            articles=articles,
            total_results=total if isinstance(total, int) else len(articles),
        )
        if not articles:
            return result, Notice(NO_RESULTS_MESSAGE)
        return result, None

    message = payload.get("error") or payload.get("detail") or FETCH_FAILED_MESSAGE
    return Failure(message=str(message), code=ErrorKind.from_code(payload.get("code"))), None


def _trigger_key(state: SearchState) -> tuple[str, FilterState]:
    return state.query.strip(), state.filters


class SearchOrchestrator:
    """Own the search fetch lifecycle and publish its results.

    Every commit to the query or filters that needs a fetch takes a new request
    token. A response is applied only while its token is still the latest, so a
    slow earlier request can never overwrite a newer one. Commits schedule the
    fetch as a task on the running event loop and return it.
    """

    def __init__(
        self,
        backend: DashboardBackendClient,
        initial: SearchState | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._search = initial if initial is not None else SearchState(query=DEFAULT_QUERY)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._result: RequestResult = Idle()
        self._notice: Notice | None = None
        self._token = 0
        self._last_key: tuple[str, FilterState] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[ResultListener] = []
        self._sources: list[dict[str, Any]] = []

    @property
    def search(self) -> SearchState:
        return self._search

    @property
    def result(self) -> RequestResult:
        return self._result

    @property
    def notice(self) -> Notice | None:
        return self._notice

    @property
    def sources(self) -> list[dict[str, Any]]:
        return list(self._sources)

    def subscribe(self, listener: ResultListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> asyncio.Task[None] | None:
        return self._commit(self._search)

    def set_query(self, query: str) -> asyncio.Task[None] | None:
        return self._commit(replace(self._search, query=query))

    def set_filters(self, filters: FilterState) -> asyncio.Task[None] | None:
        return self._commit(replace(self._search, filters=filters))

    def set_filter(self, name: str, value: str) -> asyncio.Task[None] | None:
        return self.set_filters(replace(self._search.filters, **{name: value}))

    def refresh(self) -> asyncio.Task[None] | None:
        return self._commit(self._search, force=True)

    async def wait(self) -> RequestResult:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        return self._result

    async def load_sources(self, language: str = SOURCES_LANGUAGE) -> list[dict[str, Any]]:
        try:
            payload = await self._backend.list_sources(language)
        except BackendUnavailableError as exc:
            logger.warning("Failed to fetch sources: %s", exc)
            return self.sources

        if payload.get("status") == "success":
            self._sources = list(payload.get("sources") or [])
        else:
            logger.warning("Sources request failed: %s", payload.get("error"))
        return self.sources

    def _publish(self, result: RequestResult, notice: Notice | None) -> None:
        self._result = result
        self._notice = notice
        for listener in list(self._listeners):
            listener(result, notice)

    def _commit(self, state: SearchState, force: bool = False) -> asyncio.Task[None] | None:
        self._search = state
        if not state.has_query:
            # Supersede anything in flight; an empty query never reaches the network.
            self._token += 1
            self._last_key = None
            if not isinstance(self._result, Idle) or self._notice is not None:
                self._publish(Idle(), None)
            return None

        key = _trigger_key(state)
        if not force and key == self._last_key:
            return None

        self._token += 1
        self._last_key = key
        params = build_search_params(state.query, state.filters, self._clock())
        self._publish(Loading(), None)

        task = asyncio.get_running_loop().create_task(self._fetch(self._token, params))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fetch(self, token: int, params: dict[str, str | int]) -> None:
        try:
            payload = await self._backend.search_news(params)
        except BackendUnavailableError as exc:
            logger.warning("News request failed: %s", exc)
            result: RequestResult = Failure(
                message=CONNECTION_FAILED_MESSAGE, code=ErrorKind.network_unreachable
            )
            notice = None
        else:
            result, notice = normalize_news_payload(payload)

        if token != self._token:
            logger.debug("Discarding stale response for request %s", token)
            return
        self._publish(result, notice)
