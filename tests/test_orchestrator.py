"""Tests for the dashboard search lifecycle."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from dashboard.backend_client import BackendUnavailableError, DashboardBackendClient
from dashboard.models import Failure, FilterState, Idle, Loading, SearchState, Success
from dashboard.orchestrator import (
    CONNECTION_FAILED_MESSAGE,
    NO_RESULTS_MESSAGE,
    SearchOrchestrator,
    normalize_news_payload,
)
from dashboard.presentation import render
from schemas.errors import ErrorKind

NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def _success(articles: list[dict]) -> dict:
    return {"status": "success", "totalResults": len(articles), "articles": articles}


@pytest.fixture
def backend() -> MagicMock:
    mock = MagicMock()
    mock.search_news = AsyncMock(return_value=_success([{"title": "a", "url": "u"}]))
    mock.list_sources = AsyncMock(
        return_value={"status": "success", "sources": [{"id": "bbc-news", "name": "BBC News"}]}
    )
    return mock


def _orchestrator(backend, query: str = "technology") -> SearchOrchestrator:
    return SearchOrchestrator(backend, initial=SearchState(query=query), clock=lambda: NOW)


class TestNormalizeNewsPayload:
    def test_success(self) -> None:
        result, notice = normalize_news_payload(_success([{"title": "a"}]))
        assert result == Success(articles=[{"title": "a"}], total_results=1)
        assert notice is None

    def test_empty_success_adds_notice(self) -> None:
        result, notice = normalize_news_payload(_success([]))
        assert isinstance(result, Success)
        assert result.articles == []
        assert notice is not None
        assert notice.code == ErrorKind.no_results
        assert notice.message == NO_RESULTS_MESSAGE

    def test_error_body(self) -> None:
        result, notice = normalize_news_payload(
            {"status": "error", "error": "API rate limit exceeded.", "code": "RATE_LIMIT_EXCEEDED"}
        )
        assert result == Failure(message="API rate limit exceeded.", code=ErrorKind.quota_exceeded)
        assert notice is None

    def test_unknown_error_code(self) -> None:
        result, _ = normalize_news_payload({"status": "error", "code": "SOMETHING_NEW"})
        assert isinstance(result, Failure)
        assert result.code == ErrorKind.upstream_error
        assert result.message == "Failed to fetch news"


class TestSearchOrchestrator:
    async def test_starts_idle(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        assert isinstance(orchestrator.result, Idle)
        backend.search_news.assert_not_called()

    async def test_start_fetches_default_search(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        states: list[object] = []
        orchestrator.subscribe(lambda result, notice: states.append(result))

        task = orchestrator.start()
        assert task is not None
        assert isinstance(orchestrator.result, Loading)

        result = await orchestrator.wait()

        assert isinstance(result, Success)
        assert [type(state) for state in states] == [Loading, Success]
        backend.search_news.assert_awaited_once_with(
            {
                "q": "technology",
                "language": "en",
                "from": "2026-03-03",
                "sortBy": "publishedAt",
                "pageSize": 20,
            }
        )

    @pytest.mark.parametrize("query", ["", "   ", "\n"])
    async def test_blank_query_never_calls_network(self, backend: MagicMock, query: str) -> None:
        orchestrator = _orchestrator(backend, query=query)

        assert orchestrator.start() is None
        assert orchestrator.set_filter("date_range", "month") is None

        assert isinstance(orchestrator.result, Idle)
        backend.search_news.assert_not_called()

    async def test_clearing_query_returns_to_idle(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        await orchestrator.wait()

        assert orchestrator.set_query("  ") is None
        assert isinstance(orchestrator.result, Idle)
        assert backend.search_news.await_count == 1

    async def test_unchanged_commit_does_not_refetch(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        await orchestrator.wait()

        assert orchestrator.set_query("technology ") is None
        assert orchestrator.set_filters(FilterState()) is None
        assert backend.search_news.await_count == 1

    async def test_refresh_forces_fetch(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        await orchestrator.wait()

        assert orchestrator.refresh() is not None
        await orchestrator.wait()
        assert backend.search_news.await_count == 2

    async def test_filter_change_triggers_fetch(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        await orchestrator.wait()

        orchestrator.set_filter("source", "bbc-news")
        await orchestrator.wait()

        params = backend.search_news.await_args.args[0]
        assert params["sources"] == "bbc-news"
        assert orchestrator.search.filters.source == "bbc-news"

    async def test_quota_failure(self, backend: MagicMock) -> None:
        backend.search_news.return_value = {
            "status": "error",
            "error": "API rate limit exceeded. The daily request limit has been reached.",
            "code": "RATE_LIMIT_EXCEEDED",
        }
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        result = await orchestrator.wait()

        assert isinstance(result, Failure)
        assert result.code == ErrorKind.quota_exceeded
        view = render(orchestrator.result, orchestrator.notice, orchestrator.search.query)
        assert view.show_spinner is False
        assert view.error is not None
        assert "rate limit" in view.error

    async def test_empty_results_are_informational(self, backend: MagicMock) -> None:
        backend.search_news.return_value = _success([])
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        result = await orchestrator.wait()

        assert isinstance(result, Success)
        assert orchestrator.notice is not None
        view = render(orchestrator.result, orchestrator.notice, orchestrator.search.query)
        assert view.error is None
        assert view.info == NO_RESULTS_MESSAGE

    async def test_connection_failure(self, backend: MagicMock) -> None:
        backend.search_news.side_effect = BackendUnavailableError("down")
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        result = await orchestrator.wait()

        assert result == Failure(
            message=CONNECTION_FAILED_MESSAGE, code=ErrorKind.network_unreachable
        )

    async def test_new_trigger_clears_failure(self, backend: MagicMock) -> None:
        backend.search_news.side_effect = BackendUnavailableError("down")
        orchestrator = _orchestrator(backend)
        orchestrator.start()
        await orchestrator.wait()

        backend.search_news.side_effect = None
        orchestrator.set_query("space")
        assert isinstance(orchestrator.result, Loading)
        assert isinstance(await orchestrator.wait(), Success)

    async def test_latest_trigger_wins_when_responses_arrive_out_of_order(self) -> None:
        release_first = asyncio.Event()

        async def search_news(params: dict) -> dict:
            if params.get("sources") == "first-source":
                await release_first.wait()
                return _success([{"title": "stale"}])
            return _success([{"title": "fresh"}])

        backend = MagicMock()
        backend.search_news = AsyncMock(side_effect=search_news)
        orchestrator = _orchestrator(backend)
        shown: list[object] = []
        orchestrator.subscribe(lambda result, notice: shown.append(result))

        first = orchestrator.set_filter("source", "first-source")
        second = orchestrator.set_filter("source", "second-source")
        await second
        release_first.set()
        await first

        result = orchestrator.result
        assert isinstance(result, Success)
        assert result.articles == [{"title": "fresh"}]
        assert all(
            not (isinstance(state, Success) and state.articles == [{"title": "stale"}])
            for state in shown
        )

    async def test_blank_query_supersedes_in_flight_request(self) -> None:
        release = asyncio.Event()

        async def search_news(params: dict) -> dict:
            await release.wait()
            return _success([{"title": "late"}])

        backend = MagicMock()
        backend.search_news = AsyncMock(side_effect=search_news)
        orchestrator = _orchestrator(backend)

        task = orchestrator.start()
        orchestrator.set_query("")
        release.set()
        await task

        assert isinstance(orchestrator.result, Idle)

    async def test_unsubscribe(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        calls: list[object] = []
        unsubscribe = orchestrator.subscribe(lambda result, notice: calls.append(result))
        unsubscribe()

        orchestrator.start()
        await orchestrator.wait()
        assert calls == []


class TestLoadSources:
    async def test_loads_sources_once_in_english(self, backend: MagicMock) -> None:
        orchestrator = _orchestrator(backend)
        sources = await orchestrator.load_sources()

        assert sources == [{"id": "bbc-news", "name": "BBC News"}]
        backend.list_sources.assert_awaited_once_with("en")

    async def test_failure_degrades_to_empty(self, backend: MagicMock) -> None:
        backend.list_sources.side_effect = BackendUnavailableError("down")
        orchestrator = _orchestrator(backend)

        assert await orchestrator.load_sources() == []
        assert isinstance(orchestrator.result, Idle)

    async def test_error_body_degrades_to_empty(self, backend: MagicMock) -> None:
        backend.list_sources.return_value = {"status": "error", "error": "nope", "code": "API_ERROR"}
        orchestrator = _orchestrator(backend)
        assert await orchestrator.load_sources() == []


class TestDashboardBackendClient:
    async def test_returns_error_bodies_without_raising(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/news"
            return httpx.Response(
                429, json={"status": "error", "error": "limit", "code": "RATE_LIMIT_EXCEEDED"}
            )

        client = DashboardBackendClient(transport=httpx.MockTransport(handler))
        payload = await client.search_news({"q": "x"})
        assert payload["code"] == "RATE_LIMIT_EXCEEDED"

    async def test_unreachable_backend(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        client = DashboardBackendClient(transport=httpx.MockTransport(handler))
        with pytest.raises(BackendUnavailableError):
            await client.search_news({"q": "x"})

    async def test_non_json_body(self) -> None:
        client = DashboardBackendClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway"))
        )
        with pytest.raises(BackendUnavailableError):
            await client.list_sources()

    async def test_orchestrator_end_to_end_through_transport(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["q"] == "technology"
            return httpx.Response(200, json=_success([{"title": "ok"}]))

        client = DashboardBackendClient(transport=httpx.MockTransport(handler))
        orchestrator = _orchestrator(client)
        orchestrator.start()

        result = await orchestrator.wait()
        assert isinstance(result, Success)
        assert result.total_results == 1
