"""
Signup, login and logout use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import IntegrityError

from homeservice.core.security import hash_password, needs_rehash, verify_password
from homeservice.domain.contact import is_valid_email
from homeservice.repositories.sql_repository import SQLRepository
from homeservice.services.session_service import delete_session, issue_session

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    """Base class for authentication-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistrationError(AuthError):
    pass


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


@dataclass
class AuthSuccess:
    user_id: str
    name: str
    email: str
    session_token: str


@dataclass
class AuthService:
    """Handles signup, login and logout flows."""

    repository: SQLRepository = field(default_factory=SQLRepository)

    def signup(self, name: str, email: str, password: str) -> AuthSuccess:
        clean_name = (name or "").strip()
        if not clean_name:
            raise RegistrationError("Name is required.")
        raw_email = (email or "").strip().lower()
        if not raw_email:
            raise RegistrationError("Email is required.")
        if not is_valid_email(raw_email):
            raise RegistrationError("Please enter a valid email address.")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        if self.repository.get_user_by_email(raw_email):
            raise AccountExistsError("An account with this email already exists.")
        try:
            user = self.repository.create_user(clean_name, raw_email, hash_password(password))
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email.
            raise AccountExistsError("An account with this email already exists.")
        logger.info("New user registered: %s", user.id)
        token = issue_session(user.id)
        return AuthSuccess(user_id=user.id, name=user.name, email=user.email, session_token=token)

    def login(self, email: str, password: str) -> AuthSuccess:
        raw_email = (email or "").strip().lower()
        if not raw_email:
            raise InvalidCredentialsError("Invalid email or password.")
        user = self.repository.get_user_by_email(raw_email)
        if not user or not verify_password(password or "", user.password_hash):
            logger.info("Failed login for %s", raw_email)
            raise InvalidCredentialsError("Invalid email or password.")
        if needs_rehash(user.password_hash):
            self.repository.update_user_password(user.id, hash_password(password))
        token = issue_session(user.id)
        logger.info("User logged in: %s", user.id)
        return AuthSuccess(user_id=user.id, name=user.name, email=user.email, session_token=token)

    def logout(self, session_token: Optional[str]) -> None:
        if not session_token:
            return
        delete_session(session_token)
