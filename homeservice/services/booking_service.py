"""
Booking use cases: list, read, create, update and delete.

The requester identity is passed to every operation (``None`` means an
anonymous caller in public mode). Validation and ownership failures raise
``ServiceError`` subclasses; storage failures are logged here with the
operation name and surface as ``InternalFailureError``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date as date_cls, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from homeservice.db.models import Booking, Service
from homeservice.domain.authorization import can_access_booking
from homeservice.domain.contact import CONTACT_METHODS, TIME_SLOTS, contact_fields, validate_contact
from homeservice.domain.identity import Identity
from homeservice.repositories.sql_repository import SQLRepository
from homeservice.services.errors import (
    InternalFailureError,
    InvalidContactError,
    InvalidFieldError,
    InvalidReferenceError,
    MissingFieldError,
    NotFoundError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again."


@dataclass
class BookingCommand:
    """Fields submitted to create or update a booking."""

    service_id: Optional[str] = None
    customer_name: Optional[str] = None
    date: Optional[str | datetime | date_cls] = None
    contact_method: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    time_slot: Optional[str] = None


@dataclass
class BookingFilters:
    customer_name: Optional[str] = None
    service_id: Optional[str] = None


@dataclass
class BookingDetails:
    """A booking joined with its service (``None`` for an orphan)."""

    booking: Booking
    service: Optional[Service]

    def to_dict(self) -> dict:
        b = self.booking
        return {
            "id": b.id,
            "service": service_to_dict(self.service) if self.service else None,
            "serviceId": b.service_id,
            "user": b.user_id,
            "customerName": b.customer_name,
            "date": _iso(b.date),
            "contactMethod": b.contact_method,
            "email": b.email,
            "phone": b.phone,
            "timeSlot": b.time_slot,
            "createdAt": _iso(b.created_at),
            "updatedAt": _iso(b.updated_at),
        }


def service_to_dict(service: Service) -> dict:
    return {
        "id": service.id,
        "name": service.name,
        "description": service.description or "",
        "price": service.price,
        "createdAt": _iso(service.created_at),
        "updatedAt": _iso(service.updated_at),
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _present(value) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def parse_booking_date(value) -> datetime:
    """Accept ``YYYY-MM-DD`` or an ISO 8601 date-time (``Z`` suffix allowed)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date_cls):
        return datetime(value.year, value.month, value.day)
    raw = _clean(value)
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidFieldError("date must be a valid date (YYYY-MM-DD or ISO 8601).")


def _who(requester: Optional[Identity]) -> str:
    return requester.label if requester else "public"


@contextmanager
def _storage_guard(operation: str, ref: str | None = None):
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("%s failed (id=%s)", operation, ref or "-")
        raise InternalFailureError(INTERNAL_ERROR_MESSAGE) from exc


class BookingService:
    """Orchestrates contact validation, ownership checks and persistence."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    # -------------------------------------- helpers --------------------------------------
    def _check_required(self, command: BookingCommand, *, require_service: bool) -> None:
        required = [
            ("customerName", command.customer_name),
            ("date", command.date),
            ("contactMethod", command.contact_method),
            ("timeSlot", command.time_slot),
        ]
        if require_service:
            required.insert(0, ("service", command.service_id))
        if any(not _present(value) for _, value in required):
            names = ", ".join(name for name, _ in required)
            raise MissingFieldError(f"Required fields: {names}")

    def _check_fields(self, command: BookingCommand) -> datetime:
        if command.contact_method not in CONTACT_METHODS:
            raise InvalidFieldError(f"contactMethod must be one of: {', '.join(CONTACT_METHODS)}")
        if command.time_slot not in TIME_SLOTS:
            raise InvalidFieldError(f"timeSlot must be one of: {', '.join(TIME_SLOTS)}")
        return parse_booking_date(command.date)

    def _check_contact(self, command: BookingCommand) -> dict:
        result = validate_contact(command.contact_method, command.email, command.phone)
        if not result.valid:
            raise InvalidContactError(result.error or "Invalid contact details.")
        return contact_fields(result.contact)

    def _join(self, booking: Booking) -> BookingDetails:
        service = self.repository.get_service(booking.service_id)
        if service is None:
            logger.warning("Booking %s: service %s not found. Possible orphan.", booking.id, booking.service_id)
        return BookingDetails(booking=booking, service=service)

    def _load_authorized(self, booking_id: str, requester: Optional[Identity], action: str) -> Booking:
        booking = self.repository.get_booking(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if not can_access_booking(booking.user_id, requester.id if requester else None):
            logger.info("Denied %s of booking %s for %s", action, booking_id, _who(requester))
            raise UnauthorizedError(f"Unauthorized to {action} this booking")
        return booking

    # -------------------------------------- queries --------------------------------------
    def list_bookings(self, filters: BookingFilters | None, requester: Optional[Identity]) -> list[BookingDetails]:
        filters = filters or BookingFilters()
        if requester:
            logger.info("Fetching bookings for user: %s", requester.label)
        else:
            logger.info("Fetching all bookings (public access)")
        with _storage_guard("list_bookings"):
            bookings = self.repository.list_bookings(
                user_id=requester.id if requester else None,
                customer_name=_clean(filters.customer_name) or None,
                service_id=_clean(filters.service_id) or None,
            )
            services = self.repository.get_services({b.service_id for b in bookings})
        results = []
        for booking in bookings:
            service = services.get(booking.service_id)
            if service is None:
                logger.warning("Booking %s: service %s not found. Possible orphan.", booking.id, booking.service_id)
            results.append(BookingDetails(booking=booking, service=service))
        logger.info("Fetched %d bookings", len(results))
        return results

    def get_booking(self, booking_id: str, requester: Optional[Identity]) -> BookingDetails:
        with _storage_guard("get_booking", booking_id):
            booking = self._load_authorized(booking_id, requester, "view")
            details = self._join(booking)
        logger.info("Viewed booking %s by %s", booking_id, _who(requester))
        return details

    # -------------------------------------- commands --------------------------------------
    def create_booking(self, command: BookingCommand, requester: Optional[Identity]) -> BookingDetails:
        self._check_required(command, require_service=True)
        when = self._check_fields(command)
        service_id = _clean(command.service_id)
        with _storage_guard("create_booking", service_id):
            service = self.repository.get_service(service_id)
            if not service:
                raise InvalidReferenceError("Invalid service ID")
            contact = self._check_contact(command)
            booking = self.repository.create_booking(
                service_id=service_id,
                customer_name=_clean(command.customer_name),
                date=when,
                time_slot=command.time_slot,
                user_id=requester.id if requester else None,
                **contact,
            )
        logger.info("Created booking %s for %s", booking.id, requester.label if requester else booking.customer_name)
        return BookingDetails(booking=booking, service=service)

    def update_booking(self, booking_id: str, command: BookingCommand, requester: Optional[Identity]) -> BookingDetails:
        self._check_required(command, require_service=False)
        when = self._check_fields(command)
        contact = self._check_contact(command)
        with _storage_guard("update_booking", booking_id):
            self._load_authorized(booking_id, requester, "update")
            values = {
                "customer_name": _clean(command.customer_name),
                "date": when,
                "time_slot": command.time_slot,
                **contact,
            }
            service_id = _clean(command.service_id)
            if service_id:
                if not self.repository.get_service(service_id):
                    raise InvalidReferenceError("Invalid service ID")
                values["service_id"] = service_id
            booking = self.repository.update_booking(booking_id, values)
            if booking is None:
                raise NotFoundError("Booking not found")
            details = self._join(booking)
        logger.info("Updated booking %s by %s", booking_id, _who(requester))
        return details

    def delete_booking(self, booking_id: str, requester: Optional[Identity]) -> dict:
        with _storage_guard("delete_booking", booking_id):
            self._load_authorized(booking_id, requester, "delete")
            if not self.repository.delete_booking(booking_id):
                raise NotFoundError("Booking not found")
        logger.info("Deleted booking %s by %s", booking_id, _who(requester))
        return {"message": "Booking deleted successfully", "id": booking_id}
