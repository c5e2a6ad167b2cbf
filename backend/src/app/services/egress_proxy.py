"""Outbound HTTP through the static-IP forward proxy.

Requests are made with ``urllib.request``. Both ``http`` and ``https``
targets go to the proxy over plain HTTP with the proxy credentials in
``Proxy-Authorization``. HTTPS targets are forwarded in absolute form
(``GET https://host/path``) rather than tunnelled with ``CONNECT``, so an
error status from the proxy itself (e.g. 407) arrives as a regular
response with its body.
"""

from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any

from app.exceptions import UpstreamHTTPError, UpstreamTransportError
from app.services.proxy_config import ProxyConfig

# http.client's message when a CONNECT tunnel is refused
_TUNNEL_FAILURE_RE = re.compile(r"Tunnel connection failed: (\d{3})\s*(.*)")


@dataclass(frozen=True)
class ProxiedResponse:
    """A successful upstream response."""

    status: int
    data: Any


class ForwardHttpsHandler(urllib.request.BaseHandler):
    """Send ``https`` requests to the HTTP proxy without a tunnel.

    The request is re-typed as ``http`` and re-opened, which hands it to
    the ``http`` entry of the ``ProxyHandler``; that handler keeps the
    absolute ``https://`` URL as the request target.
    """

    handler_order = 100

    def https_open(self, req: urllib.request.Request) -> Any:
        req.type = "http"
        return self.parent.open(req, timeout=req.timeout)


def build_proxy_opener(config: ProxyConfig) -> urllib.request.OpenerDirector:
    """Build an opener that sends every request through the proxy."""
    return urllib.request.build_opener(
        ForwardHttpsHandler(),
        urllib.request.ProxyHandler({"http": config.proxy_url()}),
    )


def _decode_body(raw: bytes) -> Any:
    """Decode a response body as JSON, falling back to text."""
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


def _tunnel_failure(exc: BaseException) -> UpstreamHTTPError | None:
    """Recover the proxy status from a refused ``CONNECT`` tunnel.

    http.client discards the proxy's response body in that case, so the
    status line's reason phrase stands in for the data.
    """
    reason = exc.reason if isinstance(exc, urllib.error.URLError) else exc
    match = _TUNNEL_FAILURE_RE.search(str(reason))
    if match is None:
        return None
    return UpstreamHTTPError(int(match.group(1)), match.group(2).strip() or None)


def proxied_get_json(
    url: str,
    opener: urllib.request.OpenerDirector,
    timeout: float,
) -> ProxiedResponse:
    """Issue a single GET request through ``opener``.

    Args:
        url: Target URL.
        opener: Opener from ``build_proxy_opener``.
        timeout: Socket timeout in seconds.

    Returns:
        The upstream status and decoded body.

    Raises:
        UpstreamHTTPError: The target or the proxy answered with a
            non-2xx status.
        UpstreamTransportError: No response was received.
    """
    req = urllib.request.Request(
        url,
        headers={"Accept": "application/json"},
        method="GET",
    )

    try:
        with opener.open(req, timeout=timeout) as resp:
            return ProxiedResponse(status=resp.status, data=_decode_body(resp.read()))
    except urllib.error.HTTPError as exc:
        try:
            data = _decode_body(exc.read())
        except OSError:
            data = None
        raise UpstreamHTTPError(exc.code, data) from exc
    except TimeoutError as exc:
        raise UpstreamTransportError(
            f"timeout of {int(timeout * 1000)}ms exceeded"
        ) from exc
    except OSError as exc:
        http_error = _tunnel_failure(exc)
        if http_error is not None:
            raise http_error from exc
        if isinstance(exc, urllib.error.URLError):
            raise UpstreamTransportError(str(exc.reason)) from exc
        raise UpstreamTransportError(str(exc) or type(exc).__name__) from exc
