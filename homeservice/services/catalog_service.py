"""Service catalog use cases (list, lookup, create)."""

from __future__ import annotations

import logging
import math

from sqlalchemy.exc import SQLAlchemyError

from homeservice.db.models import Service
from homeservice.repositories.sql_repository import SQLRepository
from homeservice.services.errors import (
    InternalFailureError,
    InvalidFieldError,
    MissingFieldError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

CREATE_HINT = "Required: name (string), price (non-negative number), description (optional)"


def _parse_price(value) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(CREATE_HINT)
    if isinstance(value, bool):
        raise InvalidFieldError(CREATE_HINT)
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise InvalidFieldError(CREATE_HINT)
    if math.isnan(price) or math.isinf(price) or price < 0:
        raise InvalidFieldError(CREATE_HINT)
    return price


class CatalogService:
    """Read-mostly access to the services customers can book."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def list_services(self) -> list[Service]:
        try:
            services = self.repository.list_services()
        except SQLAlchemyError as exc:
            logger.exception("list_services failed")
            raise InternalFailureError("Failed to fetch services") from exc
        logger.info("Fetched %d services", len(services))
        return services

    def get_service(self, service_id: str) -> Service:
        try:
            service = self.repository.get_service((service_id or "").strip())
        except SQLAlchemyError as exc:
            logger.exception("get_service failed (id=%s)", service_id)
            raise InternalFailureError("Failed to fetch service") from exc
        if not service:
            raise NotFoundError("Service not found")
        return service

    def create_service(self, name: str | None, price, description: str | None = None) -> Service:
        clean_name = (name or "").strip()
        if not clean_name:
            raise MissingFieldError(CREATE_HINT)
        amount = _parse_price(price)
        try:
            service = self.repository.create_service(clean_name, amount, (description or "").strip())
        except SQLAlchemyError as exc:
            logger.exception("create_service failed (name=%s)", clean_name)
            raise InternalFailureError("Failed to create service") from exc
        logger.info("Created service %s (%s)", service.id, service.name)
        return service
