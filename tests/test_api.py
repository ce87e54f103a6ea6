"""
End-to-end checks through the FastAPI routers with a temporary database.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from homeservice.app import app


@pytest.fixture()
def service_id(repo):
    return repo.create_service("Plumbing", 1500, "Fix leaks").id


def _client() -> TestClient:
    return TestClient(app)


def _csrf(client: TestClient) -> str:
    resp = client.get("/login")
    assert resp.status_code == 200
    return client.cookies.get("csrf_token")


def _signed_in_client(name: str, email: str) -> tuple[TestClient, str]:
    client = _client()
    token = _csrf(client)
    resp = client.post(
        "/auth/signup",
        data={"name": name, "email": email, "password": "secret1", "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/bookings"
    assert client.cookies.get("session")
    return client, token


def _payload(service_id, **overrides) -> dict:
    body = {
        "service": service_id,
        "customerName": "Asha",
        "date": "2024-05-01",
        "contactMethod": "phone",
        "phone": "+91 9876543210",
        "timeSlot": "morning",
    }
    body.update(overrides)
    return body


def test_anonymous_booking_crud(db_env, service_id):
    client = _client()

    created = client.post("/api/bookings", json=_payload(service_id))
    assert created.status_code == 201
    body = created.json()
    assert body["service"]["name"] == "Plumbing"
    assert body["phone"] == "+91 9876543210"
    assert body["email"] is None
    assert body["user"] is None

    booking_id = body["id"]
    assert client.get(f"/api/bookings/{booking_id}").json()["customerName"] == "Asha"

    updated = client.put(
        f"/api/bookings/{booking_id}",
        json=_payload(None, contactMethod="email", email="Asha@Example.com", timeSlot="evening"),
    )
    assert updated.status_code == 200
    assert updated.json()["email"] == "asha@example.com"
    assert updated.json()["phone"] is None
    assert updated.json()["serviceId"] == service_id

    listed = client.get("/api/bookings", params={"customerName": "ASH", "serviceId": service_id})
    assert [b["id"] for b in listed.json()] == [booking_id]

    deleted = client.delete(f"/api/bookings/{booking_id}")
    assert deleted.json() == {"message": "Booking deleted successfully", "id": booking_id}
    again = client.delete(f"/api/bookings/{booking_id}")
    assert again.status_code == 404
    assert again.json()["code"] == "not_found"


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"customerName": None}, "missing_field"),
        ({"service": None}, "missing_field"),
        ({"customerName": 123}, "invalid_field"),
        ({"phone": "9\u0668\u0667\u0666\u0665\u0664\u0663\u0662\u0661\u0660"}, "invalid_contact"),
        ({"contactMethod": "email", "email": "not-an-email"}, "invalid_contact"),
        ({"service": "missing"}, "invalid_reference"),
        ({"timeSlot": "night"}, "invalid_field"),
    ],
)
def test_create_rejections_are_structured(db_env, service_id, overrides, code):
    resp = _client().post("/api/bookings", json=_payload(service_id, **overrides))
    assert resp.status_code == 400
    assert resp.json()["code"] == code
    assert resp.json()["error"]


def test_logged_in_requests_are_scoped_and_need_csrf(db_env, service_id):
    asha, asha_csrf = _signed_in_client("Asha", "asha@example.com")
    ravi, ravi_csrf = _signed_in_client("Ravi", "ravi@example.com")

    assert asha.post("/api/bookings", json=_payload(service_id)).status_code == 403

    created = asha.post("/api/bookings", json=_payload(service_id), headers={"x-csrf-token": asha_csrf})
    assert created.status_code == 201
    booking = created.json()
    assert booking["user"]

    assert [b["id"] for b in asha.get("/api/bookings").json()] == [booking["id"]]
    assert ravi.get("/api/bookings").json() == []
    assert ravi.get(f"/api/bookings/{booking['id']}").status_code == 403
    denied = ravi.delete(f"/api/bookings/{booking['id']}", headers={"x-csrf-token": ravi_csrf})
    assert denied.status_code == 403
    assert denied.json()["code"] == "unauthorized"

    public = _client().get("/api/bookings").json()
    assert [b["id"] for b in public] == [booking["id"]]


def test_services_api(db_env):
    client = _client()
    created = client.post("/api/services", json={"name": "Cleaning", "price": 2500})
    assert created.status_code == 201
    assert created.json()["description"] == ""

    bad = client.post("/api/services", json={"name": "Cleaning", "price": -5})
    assert bad.status_code == 400

    names = [s["name"] for s in client.get("/api/services").json()]
    assert names == ["Cleaning"]


def test_booking_form_flow(db_env, service_id):
    client = _client()
    form = client.get("/booking", params={"serviceId": service_id})
    assert form.status_code == 200
    assert "Book Plumbing" in form.text
    token = client.cookies.get("csrf_token")

    rejected = client.post(
        "/booking",
        data={
            "serviceId": service_id,
            "customerName": "Asha",
            "date": "2024-05-01",
            "contactMethod": "phone",
            "phone": "12345",
            "timeSlot": "afternoon",
            "csrf_token": token,
        },
    )
    assert rejected.status_code == 400
    assert "valid Indian phone number" in rejected.text
    assert 'value="Asha"' in rejected.text

    confirmed = client.post(
        "/booking",
        data={
            "serviceId": service_id,
            "customerName": "Asha",
            "date": "2024-05-01",
            "contactMethod": "phone",
            "phone": "9876543210",
            "timeSlot": "afternoon",
            "csrf_token": token,
        },
    )
    assert confirmed.status_code == 200
    assert "Booking confirmed" in confirmed.text

    listing = client.get("/bookings")
    assert "Plumbing" in listing.text
    assert "9876543210" in listing.text


def test_login_logout_cycle(db_env):
    client, token = _signed_in_client("Asha", "asha@example.com")
    assert "Hi, Asha" in client.get("/").text

    out = client.post("/auth/logout", data={"csrf_token": token}, follow_redirects=False)
    assert out.status_code == 303
    assert not client.cookies.get("session")

    bad = client.post(
        "/auth/login",
        data={"email": "asha@example.com", "password": "nope", "csrf_token": token},
        follow_redirects=False,
    )
    assert bad.headers["location"].startswith("/login?error=")

    good = client.post(
        "/auth/login",
        data={"email": "asha@example.com", "password": "secret1", "csrf_token": token},
        follow_redirects=False,
    )
    assert good.status_code == 303
    assert client.cookies.get("session")


def test_duplicate_signup_redirects_to_login(db_env):
    _signed_in_client("Asha", "asha@example.com")
    client = _client()
    token = _csrf(client)
    resp = client.post(
        "/auth/signup",
        data={"name": "Asha", "email": "ASHA@example.com", "password": "secret1", "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"].startswith("/login?error=")


def test_logged_in_service_creation_needs_csrf(db_env):
    client, token = _signed_in_client("Asha", "asha@example.com")
    denied = client.post("/api/services", json={"name": "Cleaning", "price": 2500})
    assert denied.status_code == 403
    allowed = client.post("/api/services", json={"name": "Cleaning", "price": 2500}, headers={"x-csrf-token": token})
    assert allowed.status_code == 201


def test_login_is_throttled_per_client(db_env):
    client = _client()
    token = _csrf(client)
    form = {"email": "nobody@example.com", "password": "wrong", "csrf_token": token}
    for _ in range(5):
        assert client.post("/auth/login", data=form, follow_redirects=False).status_code == 303
    blocked = client.post("/auth/login", data=form, follow_redirects=False)
    assert blocked.status_code == 429
    assert blocked.headers["retry-after"]
