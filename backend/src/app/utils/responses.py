"""Shared response utilities for Lambda handlers."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any
from typing import Optional

from pydantic import BaseModel

from app.exceptions import AppError


def json_response(
    status_code: int,
    body: Any,
    indent: Optional[int] = None,
) -> dict[str, Any]:
    """Create a JSON API Gateway response.

    Args:
        status_code: HTTP status code.
        body: Response body (dict, Pydantic model, or dataclass).
        indent: Optional JSON indentation for the serialized body.

    Returns:
        API Gateway response dictionary.
    """
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": _dump_body(body, indent),
    }


def error_response(
    status_code: int,
    body: Any,
    indent: Optional[int] = None,
) -> dict[str, Any]:
    """Create an error response.

    Error responses carry only a status code and a JSON body; the
    invocation contract does not attach headers to failures.

    Args:
        status_code: HTTP status code.
        body: Response body (dict, Pydantic model, or dataclass).
        indent: Optional JSON indentation for the serialized body.

    Returns:
        Lambda response dictionary.
    """
    return {
        "statusCode": status_code,
        "body": _dump_body(body, indent),
    }


def app_error_response(error: AppError) -> dict[str, Any]:
    """Create an error response from an application exception."""
    return error_response(error.status_code, error.to_dict())


def _dump_body(body: Any, indent: Optional[int]) -> str:
    return json.dumps(_serialize_body(body), default=str, indent=indent)


def _serialize_body(body: Any) -> Any:
    """Serialize response body to JSON-compatible format.

    Args:
        body: The body to serialize.

    Returns:
        JSON-serializable representation of the body.
    """
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json")

    if hasattr(body, "__dataclass_fields__"):
        return asdict(body)

    return body
