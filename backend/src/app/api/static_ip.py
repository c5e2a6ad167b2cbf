"""Static egress IP check through the Fixie forward proxy.

Makes one GET request to an IP echo service through the proxy and
reports the origin IP the service saw, which is the proxy's static IP.
"""

from __future__ import annotations

import time
import urllib.request
from typing import Any
from typing import ClassVar
from typing import Optional
from typing import Union

from pydantic import BaseModel

from app.exceptions import AppError
from app.exceptions import ConfigurationError
from app.exceptions import ProxyUrlError
from app.exceptions import UpstreamHTTPError
from app.exceptions import UpstreamRequestError
from app.services.egress_proxy import build_proxy_opener
from app.services.egress_proxy import proxied_get_json
from app.services.proxy_config import PROXY_URL_ENV_VAR
from app.services.proxy_config import get_proxy_url
from app.services.proxy_config import parse_proxy_url
from app.utils.logging import clear_request_context
from app.utils.logging import get_logger
from app.utils.logging import log_lambda_event
from app.utils.logging import log_response
from app.utils.logging import set_request_context
from app.utils.responses import app_error_response
from app.utils.responses import error_response
from app.utils.responses import json_response

logger = get_logger(__name__)

TARGET_URL = "https://httpbin.org/ip"
REQUEST_TIMEOUT_SECONDS = 10
PROXY_NAME = "Fixie"
NO_RESPONSE_DATA = "No response data"
BODY_INDENT = 2


class UpstreamErrorDetails(BaseModel):
    """The upstream response attached to a failed request."""

    status: int
    data: Any = None


class StaticIpSuccess(BaseModel):
    """Body returned when the proxied request succeeds."""

    status_code: ClassVar[int] = 200

    message: str = f"Request successful via {PROXY_NAME} static IP"
    static_ip: Any = None
    proxied_through: str = PROXY_NAME
    note: str = f"The IP address shown is your {PROXY_NAME} static IP"
    full_response: Any = None


class StaticIpFailure(BaseModel):
    """Body returned when the proxy URL or the request fails."""

    status_code: ClassVar[int] = 500

    error: str
    message: str
    details: Union[UpstreamErrorDetails, str] = NO_RESPONSE_DATA


InvocationResult = Union[StaticIpSuccess, StaticIpFailure]


def fetch_static_ip(
    proxy_url: str,
    opener: Optional[urllib.request.OpenerDirector] = None,
    target_url: str = TARGET_URL,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> InvocationResult:
    """Request the IP echo service through the proxy.

    Never raises: every failure is returned as a StaticIpFailure.

    Args:
        proxy_url: Proxy connection string.
        opener: Optional pre-built opener; one is built from the parsed
            proxy configuration when omitted.
        target_url: IP echo endpoint.
        timeout: Request timeout in seconds.

    Returns:
        StaticIpSuccess or StaticIpFailure.
    """
    try:
        config = parse_proxy_url(proxy_url)
    except ProxyUrlError as exc:
        logger.error(f"Invalid {PROXY_URL_ENV_VAR}: {exc.reason}")
        return StaticIpFailure(
            error=f"Invalid {PROXY_URL_ENV_VAR}",
            message=exc.message,
        )

    logger.info(
        f"Using {PROXY_NAME} proxy: {config.display()}",
        extra={"proxy": {"host": config.host, "port": config.port}},
    )

    try:
        if opener is None:
            opener = build_proxy_opener(config)
        logger.info(f"Making request to: {target_url}")
        response = proxied_get_json(target_url, opener, timeout)
    except UpstreamHTTPError as exc:
        logger.error(
            f"Error making request: {exc.message}",
            extra={"upstream": {"status": exc.response_status}},
        )
        return StaticIpFailure(
            error="Failed to make request",
            message=exc.message,
            details=UpstreamErrorDetails(
                status=exc.response_status,
                data=exc.response_data,
            ),
        )
    except UpstreamRequestError as exc:
        logger.error(f"Error making request: {exc.message}")
        return StaticIpFailure(error="Failed to make request", message=exc.message)
    except Exception as exc:
        logger.exception(f"Unexpected error making request: {exc}")
        return StaticIpFailure(
            error="Failed to make request",
            message=str(exc) or type(exc).__name__,
        )

    logger.info("Request successful", extra={"upstream": {"status": response.status}})

    data = response.data
    origin = data.get("origin") if isinstance(data, dict) else None
    return StaticIpSuccess(
        static_ip=origin,
        full_response=data,
    )


def result_response(result: InvocationResult) -> dict[str, Any]:
    """Serialize an invocation result into the Lambda response."""
    if isinstance(result, StaticIpSuccess):
        return json_response(result.status_code, result, indent=BODY_INDENT)
    return error_response(result.status_code, result, indent=BODY_INDENT)


def handle_static_ip_request(
    event: Any,
    proxy_url: Optional[str],
    opener: Optional[urllib.request.OpenerDirector] = None,
) -> dict[str, Any]:
    """Handle one invocation with an explicit proxy configuration.

    Args:
        event: Invocation event; logged only.
        proxy_url: Proxy connection string, or None when unset.
        opener: Optional pre-built opener (tests).

    Returns:
        Lambda response with ``statusCode`` and a JSON ``body``.
    """
    log_lambda_event(logger, event)

    if not proxy_url:
        error = ConfigurationError(PROXY_URL_ENV_VAR)
        logger.error(error.message)
        return app_error_response(error)

    return result_response(fetch_static_ip(proxy_url, opener=opener))


def lambda_handler(event: Any, context: Any) -> dict[str, Any]:
    """Lambda handler for the static IP check.

    Args:
        event: Invocation event.
        context: Lambda context.

    Returns:
        Lambda response with the proxied request outcome.
    """
    start_time = time.perf_counter()
    set_request_context(req_id=getattr(context, "aws_request_id", None))
    try:
        try:
            proxy_url = get_proxy_url()
        except AppError as exc:
            logger.error(exc.message)
            log_lambda_event(logger, event)
            response = app_error_response(exc)
        else:
            response = handle_static_ip_request(event, proxy_url)

        log_response(
            logger,
            response["statusCode"],
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return response
    finally:
        clear_request_context()
