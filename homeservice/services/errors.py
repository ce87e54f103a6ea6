"""Exceptions raised by the service layer.

Each error carries a short ``code`` and the HTTP status the routers answer
with, so routers can turn any of them into a structured rejection.
"""
from __future__ import annotations


class ServiceError(Exception):
    code = "invalid"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingFieldError(ServiceError):
    code = "missing_field"


class InvalidFieldError(ServiceError):
    code = "invalid_field"


class InvalidReferenceError(ServiceError):
    code = "invalid_reference"


class InvalidContactError(ServiceError):
    code = "invalid_contact"


class NotFoundError(ServiceError):
    code = "not_found"
    status_code = 404


class UnauthorizedError(ServiceError):
    code = "unauthorized"
    status_code = 403


class InternalFailureError(ServiceError):
    code = "internal_error"
    status_code = 500
