"""Lambda entrypoint for the static egress IP check.

Runs with FIXIE_URL set so that outbound requests leave through the
Fixie proxy's static IP addresses.
"""

from __future__ import annotations

from typing import Any

from app.api.static_ip import lambda_handler as _handler
from app.utils.logging import configure_logging

configure_logging()


def lambda_handler(event: Any, context: Any) -> dict[str, Any]:
    """Delegate to the static IP handler."""
    return _handler(event, context)
