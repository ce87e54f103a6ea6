"""Ownership rule shared by booking read, update and delete."""
from __future__ import annotations


def can_access_booking(owner_id: str | None, requester_id: str | None) -> bool:
    """Return True when ``requester_id`` may act on a booking owned by ``owner_id``.

    Anonymous callers see everything (public mode) and bookings created
    without an owner stay open to everyone.
    """
    if not requester_id:
        return True
    if not owner_id:
        return True
    return owner_id == requester_id
