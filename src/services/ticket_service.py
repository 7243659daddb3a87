"""
Registration (ticket) service.

Payment happens in the external checkout SDK before register() is called;
this service only records the outcome. The event's participant count is
bumped with a compare-and-set so capacity holds under concurrent sign-ups.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import List, Optional

from models.event import Event
from models.registration import (
    FREE_PAYMENT_ID,
    PaymentStatus,
    Registration,
    RegistrationRequest,
    Ticket,
    TicketListing,
)
from repositories.interfaces import DocumentStore
from services.event_service import EVENTS, EventService
from services.verification_service import REGISTRATIONS
from utils.clock import Clock, system_clock
from utils.date_utils import is_event_past
from utils.error_handling import AppError, ConflictError, PreconditionFailedError
from utils.logging_config import get_logger

logger = get_logger(__name__)

SEAT_CLAIM_ATTEMPTS = 5


class TicketService:
    """Registers attendees and serves their tickets."""

    def __init__(self, store: DocumentStore, clock: Clock = system_clock):
        self._store = store
        self._clock = clock
        self._events = EventService(store, clock)

    def register(self, event_id: str, request: RegistrationRequest) -> Registration:
        """Record a paid (or free) registration.

        Raises:
            NotFoundError: If the event does not exist.
            ConflictError: If the user is already registered or the event is full.
            StoreUnavailableError: If the registration write fails; the seat is released.
        """
        event = self._events.get_event(event_id)
        if self.find_registration(event_id, request.user_id):
            raise ConflictError("Already registered for this event")

        event = self._claim_seat(event, request.user_id)

        registration = Registration(
            id=str(uuid.uuid4()),
            event_id=event.id,
            user_id=request.user_id,
            user_name=request.user_name or "Attendee",
            event_title=event.title,
            event_date=event.date,
            event_venue=event.venue,
            event_image=event.image_url,
            ticket_price=event.price,
            payment_id=request.payment_id,
            payment_status=(
                PaymentStatus.NOT_APPLICABLE
                if request.payment_id == FREE_PAYMENT_ID
                else PaymentStatus.COMPLETED
            ),
            utilized=False,
            created_at=self._clock(),
        )
        try:
            self._store.put(REGISTRATIONS, registration.to_item())
        except AppError:
            logger.error(
                "Registration write failed, releasing seat",
                extra={"event_id": event.id, "user_id": request.user_id},
            )
            self._release_seat(event.id, request.user_id)
            raise
        logger.info(
            "Registration created",
            extra={"registration_id": registration.id, "event_id": event.id},
        )
        return registration

    def _claim_seat(self, event: Event, user_id: str) -> Event:
        """Increment current_participants, guarded by the count we last read."""
        for _ in range(SEAT_CLAIM_ATTEMPTS):
            if event.capacity is not None and event.current_participants >= event.capacity:
                raise ConflictError("Event is full")
            try:
                updated = self._store.conditional_update(
                    EVENTS,
                    event.id,
                    patch={
                        "current_participants": event.current_participants + 1,
                        "participants": [*event.participants, user_id],
                    },
                    precondition={"current_participants": event.current_participants},
                )
                return Event.model_validate(updated)
            except PreconditionFailedError:
                logger.info("Seat claim raced, re-reading event", extra={"event_id": event.id})
                event = self._events.get_event(event.id)
        raise ConflictError("Event is busy, please retry")

    def _release_seat(self, event_id: str, user_id: str) -> None:
        """Undo a seat claim whose registration was never written."""
        try:
            for _ in range(SEAT_CLAIM_ATTEMPTS):
                event = self._events.get_event(event_id)
                participants = list(event.participants)
                if user_id in participants:
                    participants.remove(user_id)
                try:
                    self._store.conditional_update(
                        EVENTS,
                        event_id,
                        patch={
                            "current_participants": max(0, event.current_participants - 1),
                            "participants": participants,
                        },
                        precondition={"current_participants": event.current_participants},
                    )
                    return
                except PreconditionFailedError:
                    continue
        except AppError:
            logger.exception("Seat release failed", extra={"event_id": event_id, "user_id": user_id})
            return
        logger.error("Seat release kept racing", extra={"event_id": event_id, "user_id": user_id})

    def find_registration(self, event_id: str, user_id: str) -> Optional[Registration]:
        for record in self._store.query(REGISTRATIONS, "user_id", user_id):
            if record.get("event_id") == event_id:
                return Registration.model_validate(record)
        return None

    def registrations_for_event(self, event_id: str) -> List[Registration]:
        return [
            Registration.model_validate(r)
            for r in self._store.query(REGISTRATIONS, "event_id", event_id)
        ]

    def list_tickets(self, user_id: str, now: Optional[datetime] = None) -> TicketListing:
        """A user's tickets, newest first, split into upcoming and history."""
        now = now or self._clock()
        registrations = sorted(
            (Registration.model_validate(r) for r in self._store.query(REGISTRATIONS, "user_id", user_id)),
            key=lambda r: r.created_at,
            reverse=True,
        )
        listing = TicketListing()
        for registration in registrations:
            ticket = self._to_ticket(registration, now)
            (listing.history if ticket.is_past else listing.active).append(ticket)
        return listing

    def can_access_chat(self, event_id: str, user_id: str) -> bool:
        """Registered attendees and the organizer may join an event's chat.

        Date independent: past events keep their chat.
        """
        if self.find_registration(event_id, user_id):
            return True
        record = self._store.get_by_id(EVENTS, event_id)
        return bool(record and record.get("created_by") == user_id)

    @staticmethod
    def _to_ticket(registration: Registration, now: datetime) -> Ticket:
        qr_payload = json.dumps(
            {
                "registrationId": registration.id,
                "eventId": registration.event_id,
                "userId": registration.user_id,
            }
        )
        return Ticket(
            registration=registration,
            qr_payload=qr_payload,
            short_code=registration.short_code,
            is_past=is_event_past(registration.event_date, now),
        )
