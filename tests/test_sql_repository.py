"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from homeservice.db import get_session
from homeservice.db.models import Booking


def _booking(repo, service_id, name="Asha", user_id=None):
    return repo.create_booking(
        service_id=service_id,
        customer_name=name,
        date=datetime(2024, 5, 1),
        contact_method="phone",
        phone="9876543210",
        time_slot="morning",
        user_id=user_id,
    )


def _set_created_at(booking_id, when):
    with get_session() as session:
        session.execute(update(Booking).where(Booking.id == booking_id).values(created_at=when))
        session.commit()


def test_service_catalog_flow(repo):
    plumbing = repo.create_service("Plumbing", 1500, "Fix leaks")
    cleaning = repo.create_service("Cleaning", 2500)
    assert [s.name for s in repo.list_services()] == ["Plumbing", "Cleaning"]
    assert repo.get_service(plumbing.id).price == 1500
    assert cleaning.description == ""
    assert set(repo.get_services({plumbing.id, "missing"})) == {plumbing.id}
    repo.delete_service(plumbing.id)
    assert repo.get_service(plumbing.id) is None
    assert repo.delete_all_services() == 1


def test_user_email_is_stored_lowercase_and_unique(repo):
    user = repo.create_user("Asha", "Asha@Example.com", "hash")
    assert user.email == "asha@example.com"
    assert repo.get_user_by_email("  ASHA@example.COM ").id == user.id
    with pytest.raises(IntegrityError):
        repo.create_user("Other", "asha@example.com", "hash")


def test_user_session_roundtrip(repo):
    user = repo.create_user("Asha", "asha@example.com", "hash")
    token = repo.create_user_session(user.id, datetime.now(timezone.utc) + timedelta(hours=1))
    assert repo.get_user_session(token).user_id == user.id
    repo.delete_user_session(token)
    assert repo.get_user_session(token) is None


def test_list_bookings_filters_and_sorts_newest_first(repo):
    svc_a = repo.create_service("Plumbing", 1500)
    svc_b = repo.create_service("Cleaning", 2500)
    old = _booking(repo, svc_a.id, "Asha Rao", user_id="u1")
    mid = _booking(repo, svc_b.id, "Ravi", user_id="u1")
    new = _booking(repo, svc_a.id, "ASHA K", user_id="u2")
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    _set_created_at(old.id, base)
    _set_created_at(mid.id, base + timedelta(minutes=1))
    _set_created_at(new.id, base + timedelta(minutes=2))

    assert [b.id for b in repo.list_bookings()] == [new.id, mid.id, old.id]
    assert [b.id for b in repo.list_bookings(user_id="u1")] == [mid.id, old.id]
    assert [b.id for b in repo.list_bookings(customer_name="asha")] == [new.id, old.id]
    assert [b.id for b in repo.list_bookings(service_id=svc_a.id, user_id="u1")] == [old.id]
    assert repo.list_bookings(customer_name="%") == []


def test_update_and_delete_booking(repo):
    svc = repo.create_service("Plumbing", 1500)
    booking = _booking(repo, svc.id)
    updated = repo.update_booking(booking.id, {"customer_name": "Asha R", "time_slot": "evening"})
    assert updated.customer_name == "Asha R"
    assert updated.time_slot == "evening"
    assert repo.update_booking("missing", {"customer_name": "x"}) is None
    assert repo.delete_booking(booking.id) is True
    assert repo.delete_booking(booking.id) is False
    assert repo.get_booking(booking.id) is None
