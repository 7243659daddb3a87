"""Pydantic models for API payloads and stored documents."""

from models.dashboard import DashboardSummary, EventStats  # noqa: F401
from models.event import Event, EventCreate, EventListing, EventUpdate  # noqa: F401
from models.registration import (  # noqa: F401
    FREE_PAYMENT_ID,
    PaymentStatus,
    Registration,
    RegistrationRequest,
    Ticket,
    TicketListing,
)
from models.verification import (  # noqa: F401
    ScanPayload,
    VerificationErrorKind,
    VerificationKind,
    VerificationResult,
)
