"""
FastAPI application for the home service booking site.

Serve with::

    uvicorn homeservice.app:app --reload
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from homeservice.core.config import get_settings
from homeservice.core.logging_config import setup_logging
from homeservice.db.create_tables import create_all
from homeservice.routers import auth as auth_router
from homeservice.routers import bookings as bookings_router
from homeservice.routers import pages as pages_router
from homeservice.routers import services as services_router
from homeservice.services.booking_service import INTERNAL_ERROR_MESSAGE
from homeservice.services.errors import ServiceError

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(BASE, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self' 'unsafe-inline'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    create_all()
    logger.info("Database schema ready")
    yield


def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse({"error": exc.message, "code": exc.code}, status_code=exc.status_code)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Wrong JSON types or an unreadable body get the same shape as service rejections.
    first = exc.errors()[0] if exc.errors() else {}
    loc = first.get("loc", ())
    field = str(loc[1]) if len(loc) > 1 and first.get("type") != "json_invalid" else "body"
    return JSONResponse({"error": f"{field} has an invalid value", "code": "invalid_field"}, status_code=400)


def _storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Unhandled storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": INTERNAL_ERROR_MESSAGE, "code": "internal_error"}, status_code=500)


def create_app() -> FastAPI:
    """Build the application (logging, middleware, templates, routers)."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title="Home Service Booking API", lifespan=_lifespan)
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:8000", "http://127.0.0.1:8000"})
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, _storage_error_handler)

    app.include_router(auth_router.router)
    app.include_router(bookings_router.router)
    app.include_router(services_router.router)
    app.include_router(pages_router.router)
    return app


app = create_app()
