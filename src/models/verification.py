"""Check-in verification models.

VerificationResult is what the scanner UI renders; it is never persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VerificationKind(str, Enum):
    """Terminal outcome of one scan."""

    VALID = "VALID"
    ALREADY_USED = "ALREADY_USED"
    INVALID = "INVALID"


class VerificationErrorKind(str, Enum):
    """Why a scan did not produce a fresh check-in."""

    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_REDEEMED = "ALREADY_REDEEMED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    WRITE_CONFLICT = "WRITE_CONFLICT"


class ScanPayload(BaseModel):
    """Data carried by a ticket QR code (or typed in manually)."""

    model_config = ConfigDict(populate_by_name=True)

    registration_id: str = Field(alias="registrationId")
    event_id: Optional[str] = Field(default=None, alias="eventId")
    user_id: Optional[str] = Field(default=None, alias="userId")

    @field_validator("registration_id")
    @classmethod
    def validate_registration_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("registrationId must be provided")
        return cleaned


class VerificationResult(BaseModel):
    """Tagged scan outcome."""

    kind: VerificationKind
    holder_name: Optional[str] = None
    check_time: Optional[datetime] = None
    reason: Optional[str] = None
    error: Optional[VerificationErrorKind] = None
    registration_id: Optional[str] = None

    @classmethod
    def valid(cls, holder_name: str, check_time: datetime, registration_id: str) -> "VerificationResult":
        return cls(
            kind=VerificationKind.VALID,
            holder_name=holder_name,
            check_time=check_time,
            registration_id=registration_id,
        )

    @classmethod
    def already_used(
        cls, holder_name: str, check_time: datetime, registration_id: str
    ) -> "VerificationResult":
        return cls(
            kind=VerificationKind.ALREADY_USED,
            holder_name=holder_name,
            check_time=check_time,
            error=VerificationErrorKind.ALREADY_REDEEMED,
            registration_id=registration_id,
        )

    @classmethod
    def invalid(
        cls,
        reason: str,
        error: VerificationErrorKind,
        registration_id: Optional[str] = None,
    ) -> "VerificationResult":
        return cls(
            kind=VerificationKind.INVALID,
            reason=reason,
            error=error,
            registration_id=registration_id,
        )
