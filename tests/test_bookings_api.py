"""
End-to-end tests for the booking session API running on the mock backend.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from practice_booking.domain.entities.scheduling import ProviderAssignment
from practice_booking.infrastructure.practice_api.mock_backend import MockPracticeBackend
from practice_booking.infrastructure.store.memory_store import MemoryBookingSessionStore
from practice_booking.main import app
from practice_booking.wiring.dependencies import get_practice_backend, get_session_store, practice_today

HEADERS = {"X-Client-Id": "client-api-1"}


def _client() -> TestClient:
    return TestClient(app)


def test_health():
    assert _client().get("/health").json() == {"status": "ok"}


def test_full_booking_over_api():
    client = _client()
    day = (practice_today() + timedelta(days=7)).isoformat()

    started = client.post("/api/v1/bookings", headers=HEADERS)
    assert started.status_code == 201
    session = started.json()
    session_id = session["session_id"]
    assert session["step"] == "provider_selection"
    assert session["notice"]

    assert client.post(f"/api/v1/bookings/{session_id}/next", headers=HEADERS).json()["step"] == "datetime_selection"

    blocked = client.post(f"/api/v1/bookings/{session_id}/next", headers=HEADERS)
    assert blocked.status_code == 409

    dated = client.put(f"/api/v1/bookings/{session_id}/date", json={"date": day}, headers=HEADERS).json()
    assert dated["draft"]["preferred_date"] == day
    assert "14:00" in [slot["time"] for slot in dated["slots"]]

    client.put(f"/api/v1/bookings/{session_id}/time", json={"time": "14:00"}, headers=HEADERS)
    assert client.post(f"/api/v1/bookings/{session_id}/next", headers=HEADERS).json()["step"] == "details"

    client.put(
        f"/api/v1/bookings/{session_id}/details",
        json={"therapy_type": "couple", "reason": "Anxiety management"},
        headers=HEADERS,
    )
    confirming = client.post(f"/api/v1/bookings/{session_id}/next", headers=HEADERS).json()
    assert confirming["step"] == "confirmation"
    assert confirming["summary"]["therapy_type"] == "Couple Therapy"

    submitted = client.post(f"/api/v1/bookings/{session_id}/submit", headers=HEADERS).json()
    assert submitted["step"] == "success"
    assert submitted["request_id"].startswith("mock_request_")

    again = client.put(f"/api/v1/bookings/{session_id}/details", json={"reason": "other"}, headers=HEADERS)
    assert again.status_code == 409


def test_calendar_endpoint():
    client = _client()
    session_id = client.post("/api/v1/bookings", headers=HEADERS).json()["session_id"]

    response = client.get(f"/api/v1/bookings/{session_id}/calendar", params={"year": 2030, "month": 9}, headers=HEADERS)

    body = response.json()
    assert (body["year"], body["month"]) == (2030, 9)
    # 1 September 2030 is a Sunday
    assert body["cells"][0]["day"] == 1
    assert len(body["cells"]) == 30
    assert client.get(f"/api/v1/bookings/{session_id}/calendar", params={"year": 2030}, headers=HEADERS).status_code == 400


def test_sessions_are_scoped_to_client_and_discarded():
    client = _client()
    session_id = client.post("/api/v1/bookings", headers=HEADERS).json()["session_id"]

    assert client.get(f"/api/v1/bookings/{session_id}", headers={"X-Client-Id": "someone-else"}).status_code == 404
    assert client.delete(f"/api/v1/bookings/{session_id}", headers=HEADERS).status_code == 204
    assert client.get(f"/api/v1/bookings/{session_id}", headers=HEADERS).status_code == 404


def test_client_header_is_required():
    assert _client().post("/api/v1/bookings").status_code == 422


def test_past_date_is_rejected():
    client = _client()
    session_id = client.post("/api/v1/bookings", headers=HEADERS).json()["session_id"]
    client.post(f"/api/v1/bookings/{session_id}/next", headers=HEADERS)

    yesterday = (practice_today() - timedelta(days=1)).isoformat()
    response = client.put(f"/api/v1/bookings/{session_id}/date", json={"date": yesterday}, headers=HEADERS)

    assert response.status_code == 409
    assert response.json()["detail"] == "Past dates cannot be selected"


ASSIGNED = ProviderAssignment(id="t-7", display_name="Joost Bakker", specializations=("trauma",))
OTHER = ProviderAssignment(id="t-9", display_name="Mila Jansen")


@pytest.fixture
def assigned_client():
    backend = MockPracticeBackend(assignments={"client-assigned": ASSIGNED, "client-other": OTHER})
    app.dependency_overrides[get_practice_backend] = lambda: backend
    store = MemoryBookingSessionStore()
    app.dependency_overrides[get_session_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_assigned_client_skips_provider_step(assigned_client):
    started = assigned_client.post("/api/v1/bookings", headers={"X-Client-Id": "client-assigned"}).json()

    assert started["step"] == "datetime_selection"
    assert started["notice"] is None
    assert started["provider"]["display_name"] == "Joost Bakker"
    assert started["draft"]["provider_id"] == "t-7"


def test_each_client_gets_their_own_provider(assigned_client):
    first = assigned_client.post("/api/v1/bookings", headers={"X-Client-Id": "client-assigned"}).json()
    second = assigned_client.post("/api/v1/bookings", headers={"X-Client-Id": "client-other"}).json()
    unassigned = assigned_client.post("/api/v1/bookings", headers={"X-Client-Id": "client-new"}).json()

    assert first["provider"]["id"] == "t-7"
    assert second["provider"]["id"] == "t-9"
    assert unassigned["provider"] is None
    assert unassigned["step"] == "provider_selection"


def test_foreign_session_cannot_be_changed(assigned_client):
    owner = {"X-Client-Id": "client-assigned"}
    session_id = assigned_client.post("/api/v1/bookings", headers=owner).json()["session_id"]
    intruder = {"X-Client-Id": "client-other"}
    day = (practice_today() + timedelta(days=3)).isoformat()

    assert assigned_client.put(f"/api/v1/bookings/{session_id}/date", json={"date": day}, headers=intruder).status_code == 404
    assert assigned_client.post(f"/api/v1/bookings/{session_id}/back", headers=intruder).status_code == 404
    assert assigned_client.delete(f"/api/v1/bookings/{session_id}", headers=intruder).status_code == 404
    assert assigned_client.get(f"/api/v1/bookings/{session_id}", headers=owner).json()["draft"]["preferred_date"] is None


def test_rejected_selections_answer_conflict(assigned_client):
    headers = {"X-Client-Id": "client-assigned"}
    session_id = assigned_client.post("/api/v1/bookings", headers=headers).json()["session_id"]
    base = f"/api/v1/bookings/{session_id}"

    early = assigned_client.put(f"{base}/time", json={"time": "10:00"}, headers=headers)
    assert early.status_code == 409
    assert early.json()["detail"] == "Select a preferred date first"

    day = practice_today() + timedelta(days=3)
    assigned_client.put(f"{base}/date", json={"date": day.isoformat()}, headers=headers)
    outside_hours = assigned_client.put(f"{base}/time", json={"time": "07:00"}, headers=headers)
    assert outside_hours.status_code == 409
    assert outside_hours.json()["detail"] == f"07:00 is not available on {day.isoformat()}"

    past = (practice_today() - timedelta(days=1)).isoformat()
    alternative = assigned_client.put(f"{base}/alternative", json={"date": past}, headers=headers)
    assert alternative.status_code == 409
    assert alternative.json()["detail"] == "Alternative date cannot be in the past"

    orphan_time = assigned_client.put(f"{base}/alternative", json={"time": "15:00"}, headers=headers)
    assert orphan_time.status_code == 409
