from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse

from homeservice.core import csrf
from homeservice.domain.contact import CONTACT_EMAIL, CONTACT_PHONE, TIME_SLOTS
from homeservice.services.booking_service import BookingCommand, BookingService
from homeservice.services.catalog_service import CatalogService
from homeservice.services.errors import InternalFailureError, NotFoundError, ServiceError
from homeservice.services.session_service import current_identity

router = APIRouter(prefix="", tags=["pages"])
bookings = BookingService()
catalog = CatalogService()


def _templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _render(request: Request, name: str, context: dict, status_code: int = 200):
    token = csrf.ensure_csrf_token(request)
    base = {"csrf_token": token, "identity": current_identity(request)}
    base.update(context)
    response = _templates(request).TemplateResponse(request, name, base, status_code=status_code)
    csrf.set_csrf_cookie(response, token)
    return response


def _lookup_service(service_id: str | None):
    if not service_id:
        return None
    try:
        return catalog.get_service(service_id)
    except NotFoundError:
        return None


def _booking_form(request: Request, service_id: str, *, error: str | None = None, values: dict | None = None, status_code: int = 200):
    context = {
        "service_id": service_id,
        "service": _lookup_service(service_id),
        "error": error,
        "time_slots": TIME_SLOTS,
        "contact_methods": (CONTACT_EMAIL, CONTACT_PHONE),
        "values": values or {},
    }
    return _render(request, "booking.html", context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    return _render(request, "index.html", {})


@router.get("/services", response_class=HTMLResponse)
def services_page(request: Request):
    try:
        services = catalog.list_services()
    except InternalFailureError:
        return HTMLResponse("Error loading services", status_code=500)
    return _render(request, "services.html", {"services": services})


@router.get("/booking", response_class=HTMLResponse)
def booking_form(request: Request, serviceId: str = ""):
    try:
        return _booking_form(request, serviceId)
    except InternalFailureError:
        return HTMLResponse("Error loading form", status_code=500)


@router.post("/booking", response_class=HTMLResponse)
def booking_submit(
    request: Request,
    serviceId: str = Form(""),
    customerName: str = Form(""),
    date: str = Form(""),
    contactMethod: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    timeSlot: str = Form(""),
    csrf_token: str = Form(""),
):
    csrf.validate_csrf(request, csrf_token)
    command = BookingCommand(
        service_id=serviceId,
        customer_name=customerName,
        date=date,
        contact_method=contactMethod,
        email=email if contactMethod == CONTACT_EMAIL else None,
        phone=phone if contactMethod == CONTACT_PHONE else None,
        time_slot=timeSlot,
    )
    try:
        details = bookings.create_booking(command, current_identity(request))
    except ServiceError as exc:
        values = {
            "customerName": customerName,
            "date": date,
            "contactMethod": contactMethod,
            "email": command.email or "",
            "phone": command.phone or "",
            "timeSlot": timeSlot,
        }
        return _booking_form(request, serviceId, error=exc.message, values=values, status_code=exc.status_code)
    return _render(request, "confirmation.html", {"booking": details.booking, "service": details.service})


@router.get("/bookings", response_class=HTMLResponse)
def bookings_page(request: Request):
    try:
        items = bookings.list_bookings(None, current_identity(request))
    except InternalFailureError:
        return HTMLResponse("Error loading bookings", status_code=500)
    return _render(request, "bookings.html", {"items": items})


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, error: str = "", email: str = "", next: str = ""):
    return _render(request, "login.html", {"error": error, "email": email, "next": next})


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request, error: str = "", name: str = "", email: str = "", next: str = ""):
    return _render(request, "signup.html", {"error": error, "name": name, "email": email, "next": next})
