"""Organizer dashboard models."""

from decimal import Decimal
from typing import List, Tuple

from pydantic import BaseModel, Field


class EventStats(BaseModel):
    """Per-event card on the dashboard."""

    event_id: str
    title: str
    date: str
    registrations: int
    checked_in: int
    fill_percent: int
    is_past: bool


class DashboardSummary(BaseModel):
    """Aggregates across all events an organizer owns."""

    organizer_id: str
    total_registrations: int = 0
    live_check_ins: int = 0
    ticket_revenue: Decimal = Decimal("0")
    active_events: int = 0
    past_events: int = 0
    events: List[EventStats] = Field(default_factory=list)
    category_insights: List[Tuple[str, int]] = Field(default_factory=list)
