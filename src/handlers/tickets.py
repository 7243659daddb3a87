"""Registration and ticket handlers."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from models.registration import RegistrationRequest
from utils.error_handling import AppError, ValidationError, to_response
from utils.http import json_body, json_response, path_param, query_param
from utils.logging_config import get_logger

logger = get_logger(__name__)

_ticket_service: Optional["TicketService"] = None


def _get_ticket_service():
    """Lazy-load TicketService."""
    global _ticket_service
    if _ticket_service is None:
        from repositories.factory import build_store
        from services.ticket_service import TicketService
        from utils.settings import RuntimeSettings

        _ticket_service = TicketService(build_store(RuntimeSettings.from_environment()))
    return _ticket_service


def register_handler(event, context):
    """Handle POST /events/{id}/registrations (after checkout succeeded)."""
    try:
        request = RegistrationRequest.model_validate(json_body(event))
        registration = _get_ticket_service().register(path_param(event, "id"), request)
    except PydanticValidationError:
        return json_response(422, {"message": "user_id is required"})
    except AppError as exc:
        return to_response(exc)
    return json_response(201, registration.model_dump_json())


def list_handler(event, context):
    """Handle GET /users/{id}/tickets."""
    try:
        listing = _get_ticket_service().list_tickets(path_param(event, "id"))
    except AppError as exc:
        return to_response(exc)
    return json_response(200, listing.model_dump_json())


def chat_access_handler(event, context):
    """Handle GET /events/{id}/chat-access?user_id=..."""
    user_id = query_param(event, "user_id")
    if not user_id:
        return to_response(ValidationError("user_id is required"))
    event_id = path_param(event, "id")
    try:
        allowed = _get_ticket_service().can_access_chat(event_id, user_id)
    except AppError as exc:
        return to_response(exc)
    logger.info(
        "Chat access checked",
        extra={"event_id": event_id, "user_id": user_id, "allowed": allowed},
    )
    return json_response(200, {"event_id": event_id, "user_id": user_id, "allowed": allowed})
