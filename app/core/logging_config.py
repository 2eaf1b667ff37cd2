from __future__ import annotations

import logging
from logging.config import dictConfig

from app.core.config import Settings

PLAIN_FORMAT = "%(levelname)s %(asctime)s %(name)s %(message)s"
JSON_FORMAT = (
    '{"level":"%(levelname)s","time":"%(asctime)s","logger":"%(name)s","message":"%(message)s"}'
)
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(settings: Settings) -> None:
    formatters: dict[str, dict[str, object]] = {
        "standard": {
            "format": JSON_FORMAT if settings.log_json else PLAIN_FORMAT,
        }
    }

    handlers: dict[str, dict[str, object]] = {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    }

    # httpx logs full request URLs, which carry the apiKey parameter.
    loggers: dict[str, dict[str, object]] = {
        name: {"level": "WARNING"} for name in QUIET_LOGGERS
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "root": {
                "level": settings.log_level,
                "handlers": ["default"],
            },
            "loggers": loggers,
        }
    )

    logging.getLogger("uvicorn.error").setLevel(settings.log_level)
