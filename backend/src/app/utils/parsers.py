"""Shared parsing utilities for configuration values."""

from __future__ import annotations

from typing import Optional


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer from a string.

    Args:
        value: The string value to parse, or None.

    Returns:
        The parsed integer, or None if input is None or empty.

    Raises:
        ValueError: If the string cannot be converted to an integer.
    """
    if value is None or value == "":
        return None
    return int(value)


def parse_port(value: Optional[str], default: int) -> int:
    """Parse a TCP port, falling back to ``default``.

    Missing, non-numeric, zero, negative and out-of-range values all
    resolve to the default so the result is always a usable port.

    Args:
        value: The raw port string, or None.
        default: Port to use when ``value`` is not a valid port.

    Returns:
        A port number between 1 and 65535.
    """
    try:
        port = parse_int(value.strip() if value else value)
    except ValueError:
        return default
    if port is None or not 0 < port <= 65535:
        return default
    return port
