from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from conftest import MERCHANT_GUID

from reserve_api.config import settings
from reserve_api.database import get_db
from reserve_api.main import app
from reserve_api.models import Booking
from reserve_api.utils.hashing import sign_body

API_KEY = "test-partner-key"
NOON = f"{MERCHANT_GUID}:noon"
# Far enough ahead that no same-day cutoff can interfere with the wall clock
START = "2031-03-14T12:00:00+01:00"


@pytest.fixture
def client(db, restaurant, monkeypatch):
    monkeypatch.setattr(settings, "partner_api_key", API_KEY)
    monkeypatch.setattr(settings, "partner_hmac_secret", "")

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _headers(**extra) -> dict:
    return {"X-Api-Key": API_KEY, **extra}


# ── Auth ─────────────────────────────────────────────────────────────────


def test_health_is_public(client) -> None:
    res = client.get("/google/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_missing_or_wrong_api_key_is_rejected(client) -> None:
    body = {"merchant_id": MERCHANT_GUID, "service_id": NOON, "slots": [START]}

    assert client.post("/google/availability-lookup", json=body).status_code == 403
    wrong = client.post("/google/availability-lookup", json=body, headers={"X-Api-Key": "nope"})
    assert wrong.status_code == 403
    assert wrong.json() == {"detail": "Invalid API key"}


def test_unconfigured_key_closes_endpoints(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "partner_api_key", "")

    res = client.post("/google/availability-lookup", json={}, headers={"X-Api-Key": ""})

    assert res.status_code == 403


def test_hmac_signature_is_checked_when_configured(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "partner_hmac_secret", "s3cret")
    raw = json.dumps({"merchant_id": MERCHANT_GUID, "service_id": NOON, "slots": [START]}).encode()

    good = client.post(
        "/google/availability-lookup",
        content=raw,
        headers=_headers(**{"Content-Type": "application/json", "X-Signature": sign_body(raw, "s3cret")}),
    )
    bad = client.post(
        "/google/availability-lookup",
        content=raw,
        headers=_headers(**{"Content-Type": "application/json", "X-Signature": "sha256=deadbeef"}),
    )

    assert good.status_code == 200
    assert good.json() == {"results": [{"start": START, "capacity": 6}]}
    assert bad.status_code == 403
    assert bad.json() == {"detail": "Invalid signature"}


# ── Availability ─────────────────────────────────────────────────────────


def test_availability_lookup(client) -> None:
    body = {
        "merchant_id": MERCHANT_GUID,
        "service_id": NOON,
        "slots": ["2031-03-14T13:00:00+01:00", "garbage", START],
        "party_size": "4",
    }

    res = client.post("/google/availability-lookup", json=body, headers=_headers())

    assert res.status_code == 200
    assert res.json() == {
        "results": [
            {"start": START, "capacity": 6},
            {"start": "2031-03-14T13:00:00+01:00", "capacity": 6},
            {"start": "garbage", "capacity": 0},
        ]
    }


# ── Create / update ──────────────────────────────────────────────────────


def _create(client, idempotency_key: str | None = None, **overrides):
    body = {
        "merchant_id": MERCHANT_GUID,
        "service_id": NOON,
        "start": START,
        "party_size": 2,
        "customer": {"first_name": "Ada", "email": "ada@example.com", "phone": "0612345678"},
    }
    body.update(overrides)
    headers = _headers()
    if idempotency_key:
        headers["X-Idempotency-Key"] = idempotency_key
    return client.post("/google/create-booking", json=body, headers=headers)


def test_create_then_replay(client) -> None:
    first = _create(client, idempotency_key="abc")
    second = _create(client, idempotency_key="abc")

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json() == second.json()
    assert first.json() == {
        "booking_id": first.json()["booking_id"],
        "status": "CONFIRMED",
        "start": "2031-03-14T12:00:00+0100",
        "party_size": 2,
    }


def test_create_conflict_maps_to_409(client) -> None:
    res = _create(client, party_size=7)

    assert res.status_code == 409
    assert res.json() == {"error": "UNAVAILABLE", "message": "party exceeds capacity"}


def test_create_unknown_merchant_maps_to_404(client) -> None:
    res = _create(client, merchant_id="unknown")

    assert res.status_code == 404
    assert res.json() == {"error": "ERROR", "message": "merchant not found"}


def test_update_cancel_and_errors(client) -> None:
    booking_id = _create(client).json()["booking_id"]

    cancel = client.post(
        "/google/update-booking",
        json={"merchant_id": MERCHANT_GUID, "booking_id": booking_id, "action": "CANCEL"},
        headers=_headers(),
    )
    invalid = client.post(
        "/google/update-booking",
        json={"merchant_id": MERCHANT_GUID, "booking_id": booking_id, "action": "UPGRADE"},
        headers=_headers(),
    )

    assert cancel.status_code == 200
    assert cancel.json() == {"status": "OK", "booking_id": booking_id, "result": "CANCELLED"}
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "ERROR", "message": "invalid action"}


def test_update_modify(client) -> None:
    booking_id = _create(client).json()["booking_id"]

    res = client.post(
        "/google/update-booking",
        json={
            "merchant_id": MERCHANT_GUID,
            "booking_id": booking_id,
            "action": "MODIFY",
            "new_start": "2031-03-15T20:00:00+01:00",
            "new_party_size": 3,
        },
        headers=_headers(),
    )

    assert res.status_code == 200
    assert res.json() == {
        "status": "OK",
        "booking_id": booking_id,
        "start": "2031-03-15T20:00:00+0100",
        "party": 3,
        "result": "MODIFIED",
    }


# ── Loosely typed payloads reach the booking core ────────────────────────


def test_non_string_start_is_invalid_start_not_422(client) -> None:
    res = _create(client, start=20310314)

    assert res.status_code == 400
    assert res.json() == {"error": "ERROR", "message": "invalid start datetime"}


def test_numeric_phone_is_accepted(client, db) -> None:
    res = _create(client, customer={"first_name": "Ada", "phone": 612345678})

    assert res.status_code == 201
    row = db.query(Booking).filter(Booking.guid == res.json()["booking_id"]).one()
    assert row.phone_number == "612345678"


def test_non_string_new_start_is_invalid_new_start(client) -> None:
    booking_id = _create(client).json()["booking_id"]

    res = client.post(
        "/google/update-booking",
        json={"merchant_id": MERCHANT_GUID, "booking_id": booking_id, "action": "MODIFY", "new_start": 42},
        headers=_headers(),
    )

    assert res.status_code == 400
    assert res.json() == {"error": "ERROR", "message": "invalid new_start"}
