"""
Double-submit CSRF protection.

Pages set a readable ``csrf_token`` cookie; writes echo it back in a form
field or in the ``x-csrf-token`` header. HTML forms always go through
``validate_csrf``. JSON API writes go through ``guard_session_write``, which
only demands the token when a session cookie identifies the caller.
"""
from __future__ import annotations

import secrets
from typing import Optional
from urllib.parse import urlsplit

from fastapi import HTTPException, Request, Response

from homeservice.core.config import get_settings
from homeservice.domain.identity import Identity

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "x-csrf-token"
CSRF_COOKIE_MAX_AGE = 7 * 24 * 60 * 60
MIN_TOKEN_LENGTH = 16


def ensure_csrf_token(request: Request) -> str:
    """Reuse the caller's cookie token, or mint one when it is absent or too short."""
    current = request.cookies.get(CSRF_COOKIE_NAME) or ""
    if len(current) >= MIN_TOKEN_LENGTH:
        return current
    return secrets.token_urlsafe(32)


def set_csrf_cookie(response: Response, token: str) -> None:
    # Readable by page scripts so they can copy it into the header.
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        max_age=CSRF_COOKIE_MAX_AGE,
        httponly=False,
        secure=get_settings().app_env == "prod",
        samesite="strict",
        path="/",
    )


def _submitted_token(request: Request, form_token: str | None) -> str:
    for candidate in (form_token, request.headers.get(CSRF_HEADER_NAME)):
        if candidate and candidate.strip():
            return candidate.strip()
    return ""


def _same_origin(request: Request) -> bool:
    source = request.headers.get("origin") or request.headers.get("referer")
    if not source:
        return True
    try:
        parts = urlsplit(source)
    except ValueError:
        return False
    own_host = (request.headers.get("host") or "").partition(":")[0].lower()
    their_host = (parts.hostname or "").lower()
    if own_host and their_host and own_host != their_host:
        return False
    return not parts.scheme or parts.scheme == request.url.scheme


def validate_csrf(request: Request, supplied_token: str | None = None) -> None:
    """Reject the request (403) unless the submitted token matches the cookie."""
    expected = request.cookies.get(CSRF_COOKIE_NAME)
    submitted = _submitted_token(request, supplied_token)
    if not expected or not submitted:
        raise HTTPException(403, "Missing CSRF token.")
    if not secrets.compare_digest(expected, submitted):
        raise HTTPException(403, "Invalid CSRF token.")
    if not _same_origin(request):
        raise HTTPException(403, "Invalid origin.")


def guard_session_write(request: Request, requester: Optional[Identity]) -> None:
    """CSRF rule for JSON API writes: logged-in callers must send the token."""
    if requester is not None:
        validate_csrf(request)
