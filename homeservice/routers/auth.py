from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Form, Request
from fastapi.responses import RedirectResponse

from homeservice.core import csrf
from homeservice.core.rate_limiter import LOGIN_POLICY, SIGNUP_POLICY, enforce as enforce_rate_limit
from homeservice.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)
from homeservice.services.session_service import (
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    set_session_cookie,
)

router = APIRouter(prefix="/auth", tags=["auth"])
auth_service = AuthService()


def _encode(value: str) -> str:
    return quote(value or "", safe="")


def _safe_next(value: str | None, default: str = "/bookings") -> str:
    dest = (value or "").strip()
    if not dest.startswith("/") or dest.startswith("//"):
        return default
    return dest


def _signed_in(dest: str, token: str, request: Request) -> RedirectResponse:
    resp = RedirectResponse(dest, status_code=303)
    set_session_cookie(resp, token)
    csrf.set_csrf_cookie(resp, csrf.ensure_csrf_token(request))
    return resp


@router.post("/signup")
def signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form(""),
    csrf_token: str = Form(""),
):
    enforce_rate_limit(request, SIGNUP_POLICY)
    csrf.validate_csrf(request, csrf_token)
    try:
        result = auth_service.signup(name, email, password)
    except AccountExistsError as exc:
        return RedirectResponse(f"/login?error={_encode(exc.message)}&email={_encode(email)}", status_code=303)
    except RegistrationError as exc:
        return RedirectResponse(
            f"/signup?error={_encode(exc.message)}&name={_encode(name)}&email={_encode(email)}",
            status_code=303,
        )
    return _signed_in(_safe_next(next), result.session_token, request)


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form(""),
    csrf_token: str = Form(""),
):
    enforce_rate_limit(request, LOGIN_POLICY)
    csrf.validate_csrf(request, csrf_token)
    try:
        result = auth_service.login(email, password)
    except InvalidCredentialsError as exc:
        return RedirectResponse(f"/login?error={_encode(exc.message)}&email={_encode(email)}", status_code=303)
    return _signed_in(_safe_next(next), result.session_token, request)


@router.post("/logout")
def logout(request: Request, csrf_token: str = Form("")):
    csrf.validate_csrf(request, csrf_token)
    auth_service.logout(request.cookies.get(SESSION_COOKIE_NAME))
    resp = RedirectResponse("/login", status_code=303)
    clear_session_cookie(resp)
    return resp
