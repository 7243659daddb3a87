"""Event models."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from models.base import StoredModel


class Event(StoredModel):
    """Event document as kept in the events collection."""

    id: str
    title: str
    description: str = ""
    date: str
    venue: str
    department: Optional[str] = None
    category: str = "social"
    price: Decimal = Decimal("0")
    capacity: Optional[int] = None
    image_url: Optional[str] = None
    created_by: str
    college_name: Optional[str] = None
    participants: List[str] = Field(default_factory=list)
    current_participants: int = 0
    created_at: datetime

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def is_unlimited(self) -> bool:
        return self.capacity is None


class EventCreate(BaseModel):
    """Organizer input for a new event."""

    title: str
    description: str = ""
    date: str
    venue: str
    department: Optional[str] = None
    category: str = "social"
    price: Decimal = Decimal("0")
    capacity: Optional[int] = Field(default=None, ge=1)
    image_url: Optional[str] = None
    created_by: str
    college_name: Optional[str] = None

    @field_validator("title", "date", "venue", "created_by")
    @classmethod
    def validate_required(cls, value: str) -> str:
        """Reject blank strings; organizers often submit half-filled forms."""
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("title, date, venue and created_by must be provided")
        return cleaned

    @field_validator("price")
    @classmethod
    def validate_price(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("price cannot be negative")
        return value


class EventUpdate(BaseModel):
    """Partial edit of an event; unset fields are left alone."""

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    venue: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)
    image_url: Optional[str] = None

    def to_patch(self) -> Dict[str, Any]:
        """Fields the caller actually supplied, stripped of surrounding whitespace."""
        patch = self.model_dump(exclude_unset=True, exclude_none=True)
        return {k: v.strip() if isinstance(v, str) else v for k, v in patch.items()}


class EventListing(BaseModel):
    """Events split by the date classifier."""

    active: List[Event] = Field(default_factory=list)
    history: List[Event] = Field(default_factory=list)
