"""Organizer dashboard aggregates."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from models.dashboard import DashboardSummary, EventStats
from models.event import Event
from models.registration import Registration
from repositories.interfaces import DocumentStore
from services.event_service import EventService
from services.ticket_service import TicketService
from utils.clock import Clock, system_clock
from utils.date_utils import is_event_past
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Events without a capacity are charted against this many seats.
DEFAULT_CHART_CAPACITY = 100


class DashboardService:
    """Builds the organizer's dashboard from their events and registrations."""

    def __init__(self, store: DocumentStore, clock: Clock = system_clock):
        self._clock = clock
        self._events = EventService(store, clock)
        self._tickets = TicketService(store, clock)

    def summary(self, organizer_id: str, now: Optional[datetime] = None) -> DashboardSummary:
        now = now or self._clock()
        events = self._events.list_events_by_organizer(organizer_id)
        by_event: Dict[str, List[Registration]] = {
            e.id: self._tickets.registrations_for_event(e.id) for e in events
        }
        registrations = [r for regs in by_event.values() for r in regs]

        stats = [self._event_stats(e, by_event[e.id], now) for e in events]
        summary = DashboardSummary(
            organizer_id=organizer_id,
            total_registrations=len(registrations),
            live_check_ins=sum(1 for r in registrations if r.utilized),
            ticket_revenue=sum((r.ticket_price for r in registrations), Decimal("0")),
            active_events=sum(1 for s in stats if not s.is_past),
            past_events=sum(1 for s in stats if s.is_past),
            events=stats,
            category_insights=self._category_insights(events, by_event),
        )
        logger.info(
            "Dashboard built",
            extra={"organizer_id": organizer_id, "events": len(events)},
        )
        return summary

    @staticmethod
    def _event_stats(event: Event, registrations: List[Registration], now: datetime) -> EventStats:
        capacity = event.capacity or DEFAULT_CHART_CAPACITY
        count = len(registrations)
        return EventStats(
            event_id=event.id,
            title=event.title,
            date=event.date,
            registrations=count,
            checked_in=sum(1 for r in registrations if r.utilized),
            fill_percent=min(round(count / capacity * 100), 100),
            is_past=is_event_past(event.date, now),
        )

    @staticmethod
    def _category_insights(events: List[Event], by_event: Dict[str, List[Registration]]):
        """Registrations per category, busiest first."""
        counts: Counter = Counter()
        for event in events:
            counts[event.category or "social"] += len(by_event[event.id])
        return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
