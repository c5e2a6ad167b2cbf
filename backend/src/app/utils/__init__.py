"""Utility modules for the backend application."""

from app.utils.parsers import (
    parse_int,
    parse_port,
)
from app.utils.responses import (
    app_error_response,
    error_response,
    json_response,
)
from app.utils.logging import (
    configure_logging,
    get_logger,
    mask_pii,
    mask_proxy_url,
    set_request_context,
    clear_request_context,
)

__all__ = [
    "app_error_response",
    "clear_request_context",
    "configure_logging",
    "error_response",
    "get_logger",
    "json_response",
    "mask_pii",
    "mask_proxy_url",
    "parse_int",
    "parse_port",
    "set_request_context",
]
