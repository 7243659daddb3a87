"""
Check-in handlers for gate scanners.

POST /checkin/scan   body = the raw text read from the QR code
POST /checkin/manual body = {"code": "<registration id typed by staff>"}

Both answer 200 with a VerificationResult; a rejected ticket is a normal
outcome for the gate, not an HTTP error.
"""

from __future__ import annotations

import uuid
from typing import Optional

from models.verification import VerificationErrorKind, VerificationResult
from services.verification_service import INVALID_QR_MESSAGE
from utils.error_handling import AppError, ValidationError, to_response
from utils.http import body_bytes, json_body, json_response
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)

# Lazy-loaded verifier so the store client is created on first use.
_verifier: Optional["TicketVerifier"] = None


def _get_verifier():
    """Lazy-load TicketVerifier."""
    global _verifier
    if _verifier is None:
        from services.verification_service import build_verifier
        _verifier = build_verifier()
    return _verifier


def _result_response(result, correlation_id: str):
    logger.info(
        "Scan verified",
        extra={
            "correlation_id": correlation_id,
            "kind": result.kind.value,
            "registration_id": result.registration_id,
        },
    )
    return json_response(200, result.model_dump_json())


def scan_handler(event, context):
    """Handle POST /checkin/scan."""
    correlation_id = str(uuid.uuid4())
    try:
        raw = body_bytes(event)
    except ValidationError:
        result = VerificationResult.invalid(
            INVALID_QR_MESSAGE, VerificationErrorKind.MALFORMED_PAYLOAD
        )
        return _result_response(result, correlation_id)
    result = _get_verifier().verify(raw)
    return _result_response(result, correlation_id)


def manual_handler(event, context):
    """Handle POST /checkin/manual."""
    correlation_id = str(uuid.uuid4())
    try:
        code = json_body(event).get("code")
        ensure_present(code, "code")
        if not isinstance(code, str):
            code = str(code)
    except AppError as exc:
        logger.info("Manual entry rejected", extra={"correlation_id": correlation_id})
        return to_response(exc)

    result = _get_verifier().verify_manual(code)
    return _result_response(result, correlation_id)
