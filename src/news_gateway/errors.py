"""Error taxonomy for the news gateway.

Every failure the gateway surfaces carries a stable machine-readable
``code`` and the HTTP status the API layer should answer with.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    code = "SYS_INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationFailed(GatewayError):
    code = "VAL_INVALID_FORMAT"
    status_code = 400


class AuthenticationError(GatewayError):
    code = "AUTH_UNAUTHORIZED"
    status_code = 401


class AuthorizationError(GatewayError):
    code = "AUTH_FORBIDDEN"
    status_code = 403


class ArticleNotFound(GatewayError):
    code = "NEWS_ARTICLE_NOT_FOUND"
    status_code = 404


class RateLimitExceeded(GatewayError):
    code = "NEWS_RATE_LIMIT_EXCEEDED"
    status_code = 429


class UpstreamError(GatewayError):
    """The upstream call happened but produced no usable data."""

    code = "NEWS_UPSTREAM_ERROR"
    status_code = 502

    def __init__(self, message: str, *, reason: str = "http_error", upstream_status: Optional[int] = None) -> None:
        super().__init__(message, details={"reason": reason, "upstream_status": upstream_status})
        self.reason = reason
        self.upstream_status = upstream_status
        if reason == "timeout":
            self.status_code = 504
