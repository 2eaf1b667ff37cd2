from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    invalid_credential = "INVALID_API_KEY"
    quota_exceeded = "RATE_LIMIT_EXCEEDED"
    plan_required = "UPGRADE_REQUIRED"
    upstream_unavailable = "SERVER_ERROR"
    upstream_error = "API_ERROR"
    network_unreachable = "NETWORK_ERROR"
    no_results = "NO_RESULTS"

    @classmethod
    def from_code(cls, code: object) -> ErrorKind:
        try:
            return cls(code)
        except ValueError:
            return cls.upstream_error
