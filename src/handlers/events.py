"""Event catalog handlers (organizer create/edit, public listing)."""

from __future__ import annotations

import json
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from models.event import EventCreate, EventUpdate
from utils.error_handling import AppError, PermissionDeniedError, to_response
from utils.http import json_body, json_response, path_param, query_param
from utils.logging_config import get_logger

logger = get_logger(__name__)

_event_service: Optional["EventService"] = None


def _get_event_service():
    """Lazy-load EventService."""
    global _event_service
    if _event_service is None:
        from repositories.factory import build_store
        from services.event_service import EventService
        from utils.settings import RuntimeSettings

        _event_service = EventService(build_store(RuntimeSettings.from_environment()))
    return _event_service


def _invalid(exc: PydanticValidationError):
    fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
    return json_response(422, {"message": "Invalid request", "fields": fields})


def list_handler(event, context):
    """Handle GET /events: active and history lists."""
    try:
        listing = _get_event_service().list_events()
    except AppError as exc:
        return to_response(exc)
    return json_response(200, listing.model_dump_json())


def create_handler(event, context):
    """Handle POST /events."""
    try:
        data = EventCreate.model_validate(json_body(event))
        created = _get_event_service().create_event(data)
    except PydanticValidationError as exc:
        return _invalid(exc)
    except AppError as exc:
        return to_response(exc)
    return json_response(201, created.model_dump_json())


def detail_handler(event, context):
    """Handle GET /events/{id}; includes the add-to-calendar link."""
    service = _get_event_service()
    try:
        found = service.get_event(path_param(event, "id"))
        calendar_url = service.calendar_url(found)
    except AppError as exc:
        return to_response(exc)
    body = json.loads(found.model_dump_json())
    body["calendar_url"] = calendar_url
    return json_response(200, body)


def update_handler(event, context):
    """Handle PATCH /events/{id}; editor_id comes from the ?editor_id= query."""
    try:
        editor_id = query_param(event, "editor_id")
        if not editor_id:
            raise PermissionDeniedError("editor_id is required")
        changes = EventUpdate.model_validate(json_body(event))
        updated = _get_event_service().update_event(path_param(event, "id"), editor_id, changes)
    except PydanticValidationError as exc:
        return _invalid(exc)
    except AppError as exc:
        return to_response(exc)
    return json_response(200, updated.model_dump_json())
