"""
Event catalog service.

Events are created and edited by organizers and never deleted. Listings are
split into active and history with the date classifier; unparseable dates
stay active.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from models.event import Event, EventCreate, EventListing, EventUpdate
from repositories.interfaces import DocumentStore
from utils.clock import Clock, system_clock
from utils.date_utils import google_calendar_url, partition_by_date
from utils.error_handling import NotFoundError, PermissionDeniedError, ValidationError
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)

EVENTS = "events"


class EventService:
    """Create, edit and list events."""

    def __init__(self, store: DocumentStore, clock: Clock = system_clock):
        self._store = store
        self._clock = clock

    def create_event(self, data: EventCreate) -> Event:
        """Publish a new event owned by data.created_by."""
        event = Event(
            id=str(uuid.uuid4()),
            created_at=self._clock(),
            **data.model_dump(),
        )
        self._store.put(EVENTS, event.to_item())
        logger.info(
            "Event created", extra={"event_id": event.id, "created_by": event.created_by}
        )
        return event

    def update_event(self, event_id: str, editor_id: str, changes: EventUpdate) -> Event:
        """Apply an organizer's edit.

        Raises:
            NotFoundError: If the event does not exist.
            PermissionDeniedError: If editor_id does not own the event.
            ValidationError: If a required field is blanked or nothing changes.
        """
        event = self.get_event(event_id)
        if event.created_by != editor_id:
            raise PermissionDeniedError("Only the organizer can edit this event")

        patch = changes.to_patch()
        if not patch:
            raise ValidationError("No changes supplied")
        for field in ("title", "date", "venue"):
            if field in patch:
                ensure_present(patch[field], field)
        if "capacity" in patch and patch["capacity"] < event.current_participants:
            raise ValidationError("capacity cannot be below current registrations")

        item = Event(**{**event.model_dump(), **patch}).to_item()
        updated = self._store.update(EVENTS, event_id, {k: item[k] for k in patch})
        logger.info("Event updated", extra={"event_id": event_id, "fields": sorted(patch)})
        return Event.model_validate(updated)

    def get_event(self, event_id: str) -> Event:
        """Return an event by id.

        Raises:
            NotFoundError: If the event does not exist.
        """
        record = self._store.get_by_id(EVENTS, event_id)
        if record is None:
            raise NotFoundError("Event not found")
        return Event.model_validate(record)

    def list_events(self, now: Optional[datetime] = None) -> EventListing:
        """All events, newest first, split into active and history."""
        events = self._sorted(self._store.list_all(EVENTS))
        active, history = partition_by_date(events, lambda e: e.date, now or self._clock())
        return EventListing(active=active, history=history)

    def list_events_by_organizer(self, organizer_id: str) -> List[Event]:
        return self._sorted(self._store.query(EVENTS, "created_by", organizer_id))

    def calendar_url(self, event: Event) -> Optional[str]:
        return google_calendar_url(event, self._clock())

    @staticmethod
    def _sorted(records) -> List[Event]:
        events = [Event.model_validate(r) for r in records]
        return sorted(events, key=lambda e: e.created_at, reverse=True)
