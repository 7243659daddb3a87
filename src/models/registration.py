"""Registration (ticket) models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from models.base import StoredModel

FREE_PAYMENT_ID = "FREE"


class PaymentStatus(str, Enum):
    """Payment state recorded on the ticket."""

    NOT_APPLICABLE = "N/A"
    COMPLETED = "COMPLETED"


class Registration(StoredModel):
    """A ticket linking a user to an event. utilized only goes false -> true."""

    id: str
    event_id: str
    user_id: str
    user_name: Optional[str] = None
    event_title: Optional[str] = None
    event_date: Optional[str] = None
    event_venue: Optional[str] = None
    event_image: Optional[str] = None
    ticket_price: Decimal = Decimal("0")
    payment_id: str
    payment_status: PaymentStatus
    utilized: bool = False
    redemption_id: Optional[str] = None
    created_at: datetime

    @property
    def short_code(self) -> str:
        """Human-readable fragment printed under the QR code."""
        return self.id[:8].upper()


class RegistrationRequest(BaseModel):
    """Registration after checkout; payment itself happens in the external SDK."""

    user_id: str = Field(min_length=1)
    user_name: Optional[str] = None
    payment_id: str = FREE_PAYMENT_ID


class Ticket(BaseModel):
    """A registration as shown to its holder, with the QR payload it encodes."""

    registration: Registration
    qr_payload: str
    short_code: str
    is_past: bool


class TicketListing(BaseModel):
    """A user's tickets split into upcoming and history."""

    active: List[Ticket] = Field(default_factory=list)
    history: List[Ticket] = Field(default_factory=list)
