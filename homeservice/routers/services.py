from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from homeservice.core import csrf
from homeservice.schemas import ServicePayload
from homeservice.services.booking_service import service_to_dict
from homeservice.services.catalog_service import CatalogService
from homeservice.services.errors import ServiceError
from homeservice.services.session_service import current_identity

router = APIRouter(prefix="/api/services", tags=["services"])
catalog = CatalogService()


def _error_response(err: ServiceError) -> JSONResponse:
    return JSONResponse({"error": err.message, "code": err.code}, status_code=err.status_code)


@router.get("")
def list_services():
    try:
        services = catalog.list_services()
    except ServiceError as exc:
        return _error_response(exc)
    return [service_to_dict(svc) for svc in services]


@router.post("", status_code=201)
def create_service(payload: ServicePayload, request: Request):
    csrf.guard_session_write(request, current_identity(request))
    try:
        created = catalog.create_service(payload.name, payload.price, payload.description)
    except ServiceError as exc:
        return _error_response(exc)
    return JSONResponse(service_to_dict(created), status_code=201)
