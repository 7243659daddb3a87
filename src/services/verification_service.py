"""
Ticket check-in verification.

A registration moves ISSUED (utilized = false) -> REDEEMED (utilized = true)
exactly once. The redeeming write is conditional on utilized still being
false, so two gates scanning the same ticket at the same moment cannot both
admit it: the loser sees a precondition failure and reports ALREADY_USED.

Camera scans and manually typed codes go through the same verify() call.
Each redeeming write stamps a per-call redemption_id, so a retry after a
timed-out write can tell its own redemption from another gate's.

Nothing raised below escapes verify(); every outcome is a VerificationResult.
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from models.verification import ScanPayload, VerificationErrorKind, VerificationResult
from repositories.interfaces import AbsentOr, DocumentStore
from utils.clock import Clock, system_clock
from utils.error_handling import PreconditionFailedError, StoreUnavailableError
from utils.logging_config import get_logger

logger = get_logger(__name__)

REGISTRATIONS = "registrations"

INVALID_QR_MESSAGE = "Invalid Ticket QR Code"
NOT_FOUND_MESSAGE = "Ticket not found in database"
UNAVAILABLE_MESSAGE = "Ticket service unavailable, please try again"

RawPayload = Union[str, bytes, Mapping[str, Any]]


class MalformedPayloadError(ValueError):
    """Scan data is not a ticket QR payload."""


def parse_scan_payload(raw: RawPayload) -> ScanPayload:
    """Decode scanner output into a ScanPayload.

    Raises:
        MalformedPayloadError: If the data is not JSON or lacks registrationId.
    """
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else dict(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError("payload is not JSON") from exc
    if not isinstance(data, dict):
        raise MalformedPayloadError("payload is not an object")
    try:
        return ScanPayload.model_validate(data)
    except PydanticValidationError as exc:
        raise MalformedPayloadError("registrationId missing") from exc


def manual_entry_payload(code: str) -> str:
    """Wrap an operator-typed ticket id in the QR payload envelope."""
    return json.dumps({"registrationId": code.strip()})


class TicketVerifier:
    """Verifies scanned tickets against the registrations collection."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = system_clock,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._store = store
        self._clock = clock
        self._retry_attempts = max(1, retry_attempts)
        self._retry_backoff_seconds = retry_backoff_seconds
        self._sleep = sleep

    def verify(self, raw: RawPayload) -> VerificationResult:
        """Check a ticket in, returning VALID, ALREADY_USED or INVALID."""
        try:
            payload = parse_scan_payload(raw)
        except MalformedPayloadError as exc:
            logger.info("Rejected scan payload", extra={"reason": str(exc)})
            return VerificationResult.invalid(
                INVALID_QR_MESSAGE, VerificationErrorKind.MALFORMED_PAYLOAD
            )

        registration_id = payload.registration_id
        redemption_id = str(uuid.uuid4())
        try:
            return self._with_retry(
                registration_id, lambda: self._redeem(registration_id, redemption_id)
            )
        except StoreUnavailableError:
            logger.error(
                "Store unavailable during verification",
                extra={"registration_id": registration_id},
            )
            return VerificationResult.invalid(
                UNAVAILABLE_MESSAGE, VerificationErrorKind.STORE_UNAVAILABLE, registration_id
            )
        except Exception:
            logger.exception(
                "Unexpected verification failure", extra={"registration_id": registration_id}
            )
            return VerificationResult.invalid(
                UNAVAILABLE_MESSAGE, VerificationErrorKind.STORE_UNAVAILABLE, registration_id
            )

    def verify_manual(self, code: str) -> VerificationResult:
        """Verify an operator-typed ticket id through the scan path."""
        return self.verify(manual_entry_payload(code))

    def _with_retry(self, registration_id: str, fn: Callable[[], VerificationResult]) -> VerificationResult:
        """Retry only StoreUnavailableError, with exponential backoff."""
        for attempt in range(1, self._retry_attempts + 1):
            try:
                return fn()
            except StoreUnavailableError:
                if attempt == self._retry_attempts:
                    raise
                delay = self._retry_backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Retrying verification",
                    extra={"registration_id": registration_id, "attempt": attempt, "delay": delay},
                )
                self._sleep(delay)
        raise StoreUnavailableError()

    def _redeem(self, registration_id: str, redemption_id: str) -> VerificationResult:
        record = self._store.get_by_id(REGISTRATIONS, registration_id)
        if record is None:
            logger.info("Ticket not found", extra={"registration_id": registration_id})
            return VerificationResult.invalid(
                NOT_FOUND_MESSAGE, VerificationErrorKind.NOT_FOUND, registration_id
            )

        if record.get("utilized"):
            if record.get("redemption_id") == redemption_id:
                logger.info(
                    "Check-in confirmed after retry", extra={"registration_id": registration_id}
                )
                return self._valid(record, registration_id)
            return self._already_used(record, registration_id)

        try:
            self._store.conditional_update(
                REGISTRATIONS,
                registration_id,
                patch={"utilized": True, "redemption_id": redemption_id},
                precondition={"utilized": AbsentOr(False)},
            )
        except PreconditionFailedError:
            return self._resolve_conflict(registration_id, redemption_id)

        logger.info("Ticket checked in", extra={"registration_id": registration_id})
        return self._valid(record, registration_id)

    def _resolve_conflict(self, registration_id: str, redemption_id: str) -> VerificationResult:
        """The redeeming write was rejected; usually another gate got there first.

        A client-level retry of our own applied write is rejected the same way,
        which the redemption_id tells apart.
        """
        logger.info("Check-in write conflict", extra={"registration_id": registration_id})
        record = self._store.get_by_id(REGISTRATIONS, registration_id)
        if record is None:
            return VerificationResult.invalid(
                NOT_FOUND_MESSAGE, VerificationErrorKind.NOT_FOUND, registration_id
            )
        if record.get("redemption_id") == redemption_id:
            return self._valid(record, registration_id)
        return self._already_used(record, registration_id)

    def _valid(self, record: Dict[str, Any], registration_id: str) -> VerificationResult:
        return VerificationResult.valid(
            _holder_name(record, "Attendee"), self._clock(), registration_id
        )

    def _already_used(self, record: Dict[str, Any], registration_id: str) -> VerificationResult:
        logger.info("Ticket already used", extra={"registration_id": registration_id})
        return VerificationResult.already_used(
            _holder_name(record, "Unknown"), self._clock(), registration_id
        )


def _holder_name(record: Mapping[str, Any], default: str) -> str:
    return record.get("user_name") or default


def build_verifier(store: Optional[DocumentStore] = None) -> TicketVerifier:
    """Verifier wired from runtime settings."""
    from repositories.factory import build_store
    from utils.settings import RuntimeSettings

    settings = RuntimeSettings.from_environment()
    return TicketVerifier(
        store or build_store(settings),
        retry_attempts=settings.verify_retry_attempts,
        retry_backoff_seconds=settings.verify_retry_backoff_seconds,
    )
