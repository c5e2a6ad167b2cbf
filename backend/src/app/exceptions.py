"""Custom exception classes for the application.

This module provides domain-specific exception classes that carry
appropriate HTTP status codes and structured error information.
Every failure the static IP function can hit is mapped onto one of
these before it reaches the response builders.
"""

from __future__ import annotations

from typing import Any
from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    All application-specific exceptions should inherit from this class.
    Each exception carries an HTTP status code and optional details.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code (default 500).
        detail: Optional additional context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response body."""
        result: dict[str, Any] = {"error": self.message}
        if self.detail:
            result["detail"] = self.detail
        return result


class ConfigurationError(AppError):
    """Raised when required configuration is missing.

    Use when environment variables or settings are not properly configured.
    """

    def __init__(self, config_name: str, detail: Optional[str] = None):
        super().__init__(
            f"{config_name} environment variable not set",
            status_code=500,
            detail=detail
            or f"Please set {config_name} in your environment variables",
        )
        self.config_name = config_name

    def to_dict(self) -> dict[str, Any]:
        """Convert to the ``{error, message}`` body callers expect."""
        return {"error": self.message, "message": self.detail}


class ProxyConfigurationError(ConfigurationError):
    """Raised when the proxy URL cannot be loaded from its secret."""

    def __init__(self, config_name: str, reason: str):
        super().__init__(config_name, detail=reason)
        self.message = f"Failed to load {config_name}"
        self.reason = reason


class ProxyUrlError(AppError):
    """Raised when the proxy connection string is not a usable URL."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid proxy URL: {reason}", status_code=500)
        self.reason = reason


class UpstreamRequestError(AppError):
    """Base class for failures of the proxied outbound request.

    Attributes:
        response_status: Upstream HTTP status, if a response was received.
        response_data: Decoded upstream body, if a response was received.
    """

    def __init__(
        self,
        message: str,
        response_status: Optional[int] = None,
        response_data: Any = None,
    ):
        super().__init__(message, status_code=500)
        self.response_status = response_status
        self.response_data = response_data

    @property
    def has_response(self) -> bool:
        return self.response_status is not None


class UpstreamHTTPError(UpstreamRequestError):
    """Raised when the target or the proxy answers with a non-2xx status."""

    def __init__(self, status: int, data: Any = None):
        super().__init__(
            f"Request failed with status code {status}",
            response_status=status,
            response_data=data,
        )


class UpstreamTransportError(UpstreamRequestError):
    """Raised when no upstream response was received.

    Covers timeouts, DNS failures, refused connections and failed
    proxy tunnels.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
