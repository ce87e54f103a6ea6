"""Password hashing helpers (argon2)."""

from __future__ import annotations

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    return f"{_PREFIX}{_ph.hash(password)}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return False
    try:
        return _ph.verify(stored[len(_PREFIX) :], password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def needs_rehash(stored_hash: str | None) -> bool:
    """True when the stored hash was produced with outdated argon2 parameters."""
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return True
    try:
        return _ph.check_needs_rehash(stored[len(_PREFIX) :])
    except argon_exc.InvalidHashError:
        return True
