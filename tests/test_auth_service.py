from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from homeservice.core.security import hash_password, verify_password
from homeservice.services import session_service
from homeservice.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    RegistrationError,
)


@pytest.fixture()
def auth(repo) -> AuthService:
    return AuthService(repository=repo)


def test_password_hash_roundtrip():
    stored = hash_password("secret1")
    assert stored.startswith("argon2$")
    assert verify_password("secret1", stored) is True
    assert verify_password("wrong", stored) is False
    assert verify_password("secret1", "") is False
    assert verify_password("secret1", "argon2$garbage") is False


def test_signup_creates_user_and_session(auth, repo):
    result = auth.signup(" Asha ", "Asha@Example.com", "secret1")

    user = repo.get_user(result.user_id)
    assert user.name == "Asha"
    assert user.email == "asha@example.com"
    assert user.password_hash != "secret1"
    who = session_service.identity_for_token(result.session_token)
    assert who.id == result.user_id
    assert who.name == "Asha"


def test_signup_rejects_duplicate_email_case_insensitively(auth):
    auth.signup("Asha", "asha@example.com", "secret1")
    with pytest.raises(AccountExistsError):
        auth.signup("Asha again", "ASHA@example.com", "another1")


@pytest.mark.parametrize(
    "name, email, password",
    [("", "a@b.co", "secret1"), ("Asha", "", "secret1"), ("Asha", "nope", "secret1"), ("Asha", "a@b.co", "12345")],
)
def test_signup_validation(auth, name, email, password):
    with pytest.raises(RegistrationError):
        auth.signup(name, email, password)


def test_login_and_logout(auth):
    auth.signup("Asha", "asha@example.com", "secret1")

    result = auth.login("  ASHA@example.com", "secret1")
    assert session_service.identity_for_token(result.session_token).name == "Asha"

    auth.logout(result.session_token)
    assert session_service.identity_for_token(result.session_token) is None
    auth.logout(None)


@pytest.mark.parametrize("email, password", [("asha@example.com", "wrong"), ("nobody@example.com", "secret1"), ("", "x")])
def test_login_rejects_bad_credentials(auth, email, password):
    auth.signup("Asha", "asha@example.com", "secret1")
    with pytest.raises(InvalidCredentialsError):
        auth.login(email, password)


def test_expired_session_is_dropped(auth, repo):
    user = repo.create_user("Asha", "asha@example.com", hash_password("secret1"))
    token = repo.create_user_session(user.id, datetime.now(timezone.utc) - timedelta(minutes=1))

    assert session_service.identity_for_token(token) is None
    assert repo.get_user_session(token) is None
