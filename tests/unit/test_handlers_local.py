"""
Local handler tests through the router, backed by the in-memory store.

Run with: pytest tests/unit/test_handlers_local.py -v
"""

import base64
import json

import pytest

from handlers import checkin, dashboard, events, main, tickets
from repositories import factory
from repositories.memory_repo import InMemoryDocumentStore
from services.event_service import EventService
from services.ticket_service import TicketService
from utils.error_handling import StoreUnavailableError


@pytest.fixture(autouse=True)
def fresh_services(monkeypatch):
    """Each test gets a new shared memory store and new handler singletons."""
    monkeypatch.setenv("STORE_BACKEND", "memory")
    factory.reset_memory_store()
    for module, attr in (
        (checkin, "_verifier"),
        (events, "_event_service"),
        (tickets, "_ticket_service"),
        (dashboard, "_dashboard_service"),
    ):
        monkeypatch.setattr(module, attr, None)
    yield
    factory.reset_memory_store()


def _call(method, path, body=None, query=None):
    event = {"requestContext": {"http": {"method": method, "path": path}}}
    if body is not None:
        event["body"] = body if isinstance(body, str) else json.dumps(body)
    if query:
        event["queryStringParameters"] = query
    resp = main.lambda_handler(event, None)
    return resp["statusCode"], json.loads(resp["body"])


def _create_event(**overrides):
    payload = {
        "title": "Tech Fest",
        "date": "31 DEC 2099",
        "venue": "Main Hall",
        "created_by": "org-1",
        **overrides,
    }
    status, body = _call("POST", "/events", payload)
    assert status == 201
    return body


class TestCheckinFlow:
    def test_register_then_scan_twice(self):
        event = _create_event()
        status, reg = _call(
            "POST", f"/events/{event['id']}/registrations", {"user_id": "U1", "user_name": "Asha"}
        )
        assert status == 201

        status, first = _call("POST", "/checkin/scan", json.dumps({"registrationId": reg["id"]}))
        assert status == 200
        assert first["kind"] == "VALID"
        assert first["holder_name"] == "Asha"

        status, second = _call("POST", "/checkin/manual", {"code": reg["id"]})
        assert status == 200
        assert second["kind"] == "ALREADY_USED"
        assert second["error"] == "ALREADY_REDEEMED"

    def test_scan_with_garbage_is_invalid_not_an_error(self):
        status, body = _call("POST", "/checkin/scan", "not json")
        assert status == 200
        assert body["kind"] == "INVALID"
        assert body["reason"] == "Invalid Ticket QR Code"

    @pytest.mark.parametrize(
        "body",
        [
            base64.b64encode(b"\xff\xfe\xfa").decode("ascii"),
            base64.b64encode(b"\xc3\x28").decode("ascii"),
            "%%% not base64 %%%",
        ],
    )
    def test_scan_with_undecodable_body_is_malformed(self, body):
        event = {
            "requestContext": {"http": {"method": "POST", "path": "/checkin/scan"}},
            "body": body,
            "isBase64Encoded": True,
        }
        resp = main.lambda_handler(event, None)
        payload = json.loads(resp["body"])
        assert resp["statusCode"] == 200
        assert payload["kind"] == "INVALID"
        assert payload["reason"] == "Invalid Ticket QR Code"
        assert payload["error"] == "MALFORMED_PAYLOAD"

    def test_scan_with_base64_json_body(self):
        event = {
            "requestContext": {"http": {"method": "POST", "path": "/checkin/scan"}},
            "body": base64.b64encode(json.dumps({"registrationId": "missing"}).encode()).decode(),
            "isBase64Encoded": True,
        }
        payload = json.loads(main.lambda_handler(event, None)["body"])
        assert payload["error"] == "NOT_FOUND"

    def test_scan_unknown_ticket(self):
        status, body = _call("POST", "/checkin/scan", {"registrationId": "does-not-exist"})
        assert status == 200
        assert body["reason"] == "Ticket not found in database"
        assert body["error"] == "NOT_FOUND"

    def test_manual_requires_code(self):
        status, body = _call("POST", "/checkin/manual", {"code": "  "})
        assert status == 422
        assert body["message"] == "code is required"


class TestEventRoutes:
    def test_create_validation_error(self):
        status, body = _call("POST", "/events", {"title": "", "date": "1 JAN", "venue": "V"})
        assert status == 422
        assert "created_by" in body["fields"]

    def test_detail_includes_calendar_url(self):
        event = _create_event()
        status, body = _call("GET", f"/events/{event['id']}")
        assert status == 200
        assert body["title"] == "Tech Fest"
        assert "dates=20991231T100000Z" in body["calendar_url"]

    def test_detail_not_found(self):
        status, body = _call("GET", "/events/missing")
        assert status == 404
        assert body["message"] == "Event not found"

    def test_list_splits_active_and_history(self):
        _create_event(title="Future")
        _create_event(title="Past", date="01 JAN 2020")
        status, body = _call("GET", "/events")
        assert status == 200
        assert [e["title"] for e in body["active"]] == ["Future"]
        assert [e["title"] for e in body["history"]] == ["Past"]

    def test_update_requires_owner(self):
        event = _create_event()
        status, _ = _call("PATCH", f"/events/{event['id']}", {"venue": "X"}, {"editor_id": "intruder"})
        assert status == 403
        status, body = _call("PATCH", f"/events/{event['id']}", {"venue": "X"}, {"editor_id": "org-1"})
        assert status == 200
        assert body["venue"] == "X"


class TestTicketRoutes:
    def test_duplicate_registration_conflict(self):
        event = _create_event()
        _call("POST", f"/events/{event['id']}/registrations", {"user_id": "U1"})
        status, body = _call("POST", f"/events/{event['id']}/registrations", {"user_id": "U1"})
        assert status == 409
        assert body["status"] == "error"

    def test_registration_requires_user(self):
        event = _create_event()
        status, _ = _call("POST", f"/events/{event['id']}/registrations", {})
        assert status == 422

    def test_user_tickets_and_chat_access(self):
        event = _create_event()
        _call("POST", f"/events/{event['id']}/registrations", {"user_id": "U1"})

        status, body = _call("GET", "/users/U1/tickets")
        assert status == 200
        assert len(body["active"]) == 1
        assert json.loads(body["active"][0]["qr_payload"])["userId"] == "U1"

        _, access = _call("GET", f"/events/{event['id']}/chat-access", query={"user_id": "U1"})
        assert access["allowed"] is True
        _, access = _call("GET", f"/events/{event['id']}/chat-access", query={"user_id": "U2"})
        assert access["allowed"] is False

    def test_chat_access_requires_user(self):
        status, _ = _call("GET", "/events/E1/chat-access")
        assert status == 422


def test_dashboard_route():
    event = _create_event(price=25)
    status, reg = _call("POST", f"/events/{event['id']}/registrations", {"user_id": "U1", "payment_id": "pay_1"})
    _call("POST", "/checkin/manual", {"code": reg["id"]})

    status, body = _call("GET", "/organizers/org-1/dashboard")
    assert status == 200
    assert body["total_registrations"] == 1
    assert body["live_check_ins"] == 1
    assert body["active_events"] == 1


class DownStore(InMemoryDocumentStore):
    """Every read times out."""

    def get_by_id(self, collection, doc_id):
        raise StoreUnavailableError("timeout")

    def query(self, collection, field, value):
        raise StoreUnavailableError("timeout")


class TestStoreOutage:
    def test_chat_access_returns_503(self, monkeypatch):
        monkeypatch.setattr(tickets, "_ticket_service", TicketService(DownStore()))
        status, body = _call("GET", "/events/E1/chat-access", query={"user_id": "U1"})
        assert status == 503
        assert body["status"] == "error"

    def test_event_detail_returns_503(self, monkeypatch):
        monkeypatch.setattr(events, "_event_service", EventService(DownStore()))
        status, _ = _call("GET", "/events/E1")
        assert status == 503
