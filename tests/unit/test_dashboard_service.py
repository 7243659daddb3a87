"""Organizer dashboard aggregation tests."""

from decimal import Decimal

from models.event import EventCreate
from models.registration import RegistrationRequest
from services.dashboard_service import DashboardService
from services.event_service import EventService
from services.ticket_service import TicketService
from services.verification_service import TicketVerifier


def test_summary_counts_registrations_checkins_and_revenue(store, clock, fixed_now):
    events = EventService(store, clock=clock)
    tickets = TicketService(store, clock=clock)

    fest = events.create_event(
        EventCreate(title="Fest", date="20 JUN 2025", venue="Hall", created_by="org-1",
                    category="tech", price=Decimal("100"), capacity=4)
    )
    talk = events.create_event(
        EventCreate(title="Talk", date="01 JAN 2024", venue="Room 2", created_by="org-1",
                    category="academic")
    )
    events.create_event(
        EventCreate(title="Not mine", date="20 JUN 2025", venue="Hall", created_by="org-2")
    )

    regs = [tickets.register(fest.id, RegistrationRequest(user_id=f"U{i}", payment_id=f"pay_{i}"))
            for i in range(3)]
    tickets.register(talk.id, RegistrationRequest(user_id="U9"))
    TicketVerifier(store, clock=clock).verify_manual(regs[0].id)

    summary = DashboardService(store, clock=clock).summary("org-1", now=fixed_now)

    assert summary.total_registrations == 4
    assert summary.live_check_ins == 1
    assert summary.ticket_revenue == Decimal("300")
    assert summary.active_events == 1
    assert summary.past_events == 1

    by_title = {s.title: s for s in summary.events}
    assert by_title["Fest"].registrations == 3
    assert by_title["Fest"].checked_in == 1
    assert by_title["Fest"].fill_percent == 75
    assert by_title["Fest"].is_past is False
    # No capacity: charted against 100 seats.
    assert by_title["Talk"].fill_percent == 1
    assert by_title["Talk"].is_past is True
    assert summary.category_insights == [("tech", 3), ("academic", 1)]


def test_summary_for_organizer_without_events(store, clock):
    summary = DashboardService(store, clock=clock).summary("nobody")
    assert summary.total_registrations == 0
    assert summary.events == []
    assert summary.ticket_revenue == Decimal("0")
