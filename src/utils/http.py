"""Helpers for API Gateway HTTP API (payload v2) events."""

import base64
import binascii
import json
from typing import Any, Dict, Optional

from utils.error_handling import ValidationError


def json_response(status: int, body: Any) -> Dict[str, Any]:
    """Format a JSON response; body may be pre-serialised JSON text."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": body if isinstance(body, str) else json.dumps(body),
    }


def body_bytes(event: Dict[str, Any]) -> bytes:
    """Request body as bytes, undoing API Gateway's base64 wrapping.

    Raises:
        ValidationError: If a base64-flagged body is not valid base64.
    """
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("Request body is not valid base64") from exc
    return body.encode("utf-8")


def raw_body(event: Dict[str, Any]) -> str:
    try:
        return body_bytes(event).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("Request body must be UTF-8 text") from exc


def json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Parse the request body as a JSON object."""
    try:
        data = json.loads(raw_body(event) or "{}")
    except ValueError as exc:
        raise ValidationError("Request body must be JSON") from exc
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def path_param(event: Dict[str, Any], name: str) -> Optional[str]:
    return (event.get("pathParameters") or {}).get(name)


def query_param(event: Dict[str, Any], name: str) -> Optional[str]:
    return (event.get("queryStringParameters") or {}).get(name)
