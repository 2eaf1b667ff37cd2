from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.responses import JSONResponse, Response

from app.core.config import Settings, get_settings
from app.core.logging_config import configure_logging
from routers import health, news, sources
from services.newsapi_client import NewsAPIClient, NewsAPIError

logger = logging.getLogger(__name__)

ENDPOINTS = ("/health", "/news", "/top-headlines", "/sources")


def available_endpoints(settings: Settings) -> list[str]:
    return [f"GET {settings.api_prefix}{path}" for path in ENDPOINTS]


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    docs_url = "/docs" if settings.enable_docs else None
    redoc_url = "/redoc" if settings.enable_docs else None
    openapi_url = "/openapi.json" if settings.enable_docs else None
    app = FastAPI(
        title=settings.project_name,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
    )
    app.state.settings = settings
    app.state.news_client = NewsAPIClient(
        api_key=settings.news_api_key,
        base_url=settings.news_api_base_url,
        timeout=settings.request_timeout,
        page_size=settings.page_size,
    )

    if settings.environment == "production":
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(_: Request, exc: RateLimitExceeded) -> JSONResponse:
        return JSONResponse(status_code=429, content={"detail": str(exc)})

    @app.exception_handler(NewsAPIError)
    async def news_api_error_handler(request: Request, exc: NewsAPIError) -> JSONResponse:
        logger.warning(
            "Upstream request for %s failed: %s (%s)", request.url.path, exc.message, exc.kind.value
        )
        return JSONResponse(
            status_code=exc.status_code or 502,
            content={"status": "error", "error": exc.message, "code": exc.kind.value},
        )

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code != 404:
            return await http_exception_handler(request, exc)
        return JSONResponse(
            status_code=404,
            content={
                "status": "error",
                "error": "Endpoint not found",
                "availableEndpoints": available_endpoints(settings),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # ServerErrorMiddleware re-raises after this, so the server logs the traceback.
        logger.error("Unhandled error on %s: %r", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": "Internal server error", "message": str(exc)},
        )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore[no-untyped-def]
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["X-XSS-Protection"] = "0"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(news.router, prefix=settings.api_prefix)
    app.include_router(sources.router, prefix=settings.api_prefix)
    return app


API_KEY_FIELDS = {"news_api_key", "newsdash_news_api_key"}


def _missing_api_key(exc: ValidationError) -> bool:
    return any(
        error["loc"] and str(error["loc"][0]).lower() in API_KEY_FIELDS for error in exc.errors()
    )


def run() -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        logging.basicConfig(level=logging.ERROR)
        if _missing_api_key(exc):
            logger.error("NEWS_API_KEY is not defined; set it in the environment or .env file")
        else:
            logger.error("Invalid configuration: %s", exc)
        raise SystemExit(1) from None

    app = create_app(settings)
    logger.info("Starting %s on http://%s:%s", settings.project_name, settings.host, settings.port)
    logger.info("API endpoints: %s", ", ".join(available_endpoints(settings)))
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
