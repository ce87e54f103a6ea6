from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from homeservice.core import csrf
from homeservice.domain.identity import Identity
from homeservice.schemas import BookingPayload
from homeservice.services.booking_service import BookingFilters, BookingService
from homeservice.services.errors import ServiceError
from homeservice.services.session_service import current_identity

router = APIRouter(prefix="/api/bookings", tags=["bookings"])
service = BookingService()


def _error_response(err: ServiceError) -> JSONResponse:
    return JSONResponse({"error": err.message, "code": err.code}, status_code=err.status_code)


def _writer(request: Request) -> Optional[Identity]:
    who = current_identity(request)
    csrf.guard_session_write(request, who)
    return who


@router.get("")
def list_bookings(
    request: Request,
    customer_name: str = Query("", alias="customerName"),
    service_id: str = Query("", alias="serviceId"),
):
    who = current_identity(request)
    try:
        items = service.list_bookings(BookingFilters(customer_name=customer_name, service_id=service_id), who)
    except ServiceError as exc:
        return _error_response(exc)
    return [item.to_dict() for item in items]


@router.get("/{booking_id}")
def get_booking(booking_id: str, request: Request):
    try:
        details = service.get_booking(booking_id, current_identity(request))
    except ServiceError as exc:
        return _error_response(exc)
    return details.to_dict()


@router.post("", status_code=201)
def create_booking(payload: BookingPayload, request: Request):
    who = _writer(request)
    try:
        details = service.create_booking(payload.to_command(), who)
    except ServiceError as exc:
        return _error_response(exc)
    return JSONResponse(details.to_dict(), status_code=201)


@router.put("/{booking_id}")
def update_booking(booking_id: str, payload: BookingPayload, request: Request):
    who = _writer(request)
    try:
        details = service.update_booking(booking_id, payload.to_command(), who)
    except ServiceError as exc:
        return _error_response(exc)
    return details.to_dict()


@router.delete("/{booking_id}")
def delete_booking(booking_id: str, request: Request):
    who = _writer(request)
    try:
        return service.delete_booking(booking_id, who)
    except ServiceError as exc:
        return _error_response(exc)
