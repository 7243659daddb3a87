"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

Why one Lambda?
- Gate scanners hit /checkin/* in bursts; one warm function keeps the store
  client and its connection pool alive across routes.
- Simpler to deploy while still keeping code organized by delegating to modules.
"""

import json
import re
from typing import Callable, Dict, Pattern, Tuple

from . import checkin, dashboard, events, health_check, tickets
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _response(status: int, body: Dict) -> Dict:
    """Format a JSON API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _compile(template: str) -> Pattern:
    """Turn "/events/{id}/registrations" into a regex with named groups."""
    return re.compile(re.sub(r"\{(\w+)\}", r"(?P<\1>[^/]+)", template.rstrip("/")) + "/?")


# (method, path template, handler name on module). Looked up at call time so
# tests can monkeypatch module attributes.
ROUTES: Tuple[Tuple[str, str, object, str], ...] = (
    ("GET", "/health", health_check, "lambda_handler"),
    ("POST", "/checkin/scan", checkin, "scan_handler"),
    ("POST", "/checkin/manual", checkin, "manual_handler"),
    ("GET", "/events", events, "list_handler"),
    ("POST", "/events", events, "create_handler"),
    ("GET", "/events/{id}", events, "detail_handler"),
    ("PATCH", "/events/{id}", events, "update_handler"),
    ("POST", "/events/{id}/registrations", tickets, "register_handler"),
    ("GET", "/events/{id}/chat-access", tickets, "chat_access_handler"),
    ("GET", "/users/{id}/tickets", tickets, "list_handler"),
    ("GET", "/organizers/{id}/dashboard", dashboard, "lambda_handler"),
)

_COMPILED = tuple((method, _compile(path), module, name) for method, path, module, name in ROUTES)


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    Path parameters are filled in from the matched template when the
    integration did not supply them (local invocations, tests).
    """
    method = event.get("requestContext", {}).get("http", {}).get("method", "").upper()
    path = event.get("requestContext", {}).get("http", {}).get("path", "")
    route_key = f"{method} {path}"

    for route_method, pattern, module, name in _COMPILED:
        if route_method != method:
            continue
        match = pattern.fullmatch(path)
        if match:
            if match.groupdict() and not event.get("pathParameters"):
                event = {**event, "pathParameters": match.groupdict()}
            handler: Callable = getattr(module, name)
            return handler(event, context)

    logger.info("Route not found", extra={"route": route_key})
    return _response(404, {"message": "Route not found", "route": route_key})
