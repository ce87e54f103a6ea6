"""Session helpers (issue tokens, cookies, identity lookup)."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import Request, Response

from homeservice.core.config import get_settings
from homeservice.domain.identity import Identity
from homeservice.repositories.sql_repository import SQLRepository

SESSION_COOKIE_NAME = "session"

_repo = SQLRepository()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_session(user_id: str) -> str:
    """Create a new session token for ``user_id`` and persist it."""
    settings = get_settings()
    ttl = max(60, settings.session_ttl_seconds)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
    return _repo.create_user_session(user_id, expires_at)


def identity_for_token(token: str | None) -> Identity | None:
    if not token:
        return None
    entry = _repo.get_user_session(token)
    if not entry:
        return None
    if entry.expires_at and _as_utc(entry.expires_at) < datetime.now(timezone.utc):
        _repo.delete_user_session(token)
        return None
    user = _repo.get_user(entry.user_id)
    if not user:
        _repo.delete_user_session(token)
        return None
    return Identity(id=user.id, name=user.name)


def current_identity(request: Request) -> Identity | None:
    """Return the identity bound to the session cookie, if any."""
    return identity_for_token(request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.app_env == "prod",
        samesite="strict",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def delete_session(token: str | None) -> None:
    if not token:
        return
    _repo.delete_user_session(token)
