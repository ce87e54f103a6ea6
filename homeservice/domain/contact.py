"""Contact method rules for bookings.

A booking is reached through exactly one channel. ``validate_contact`` checks
the field required by the chosen method and, on success, returns the channel
as a tagged value so callers never have to juggle both fields.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

CONTACT_EMAIL = "email"
CONTACT_PHONE = "phone"
CONTACT_METHODS = (CONTACT_EMAIL, CONTACT_PHONE)

TIME_SLOTS = ("morning", "afternoon", "evening")

# Both patterns must cover the whole value (fullmatch) and only ASCII digits count.
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+", re.ASCII)
# Indian mobile: optional +91 prefix, optional 0 / 91 trunk digits, then 6-9 and nine digits.
PHONE_PATTERN = re.compile(r"(\+91[\-\s]?)?0?(91)?[6789]\d{9}", re.ASCII)

EMAIL_REQUIRED = "Email is required for email contact."
EMAIL_INVALID = "Please enter a valid email address."
PHONE_REQUIRED = "Phone is required for phone contact."
PHONE_INVALID = "Please enter a valid Indian phone number (10 digits, starting with 6-9)."


@dataclass(frozen=True)
class EmailContact:
    address: str

    method = CONTACT_EMAIL


@dataclass(frozen=True)
class PhoneContact:
    number: str

    method = CONTACT_PHONE


Contact = Union[EmailContact, PhoneContact]


@dataclass(frozen=True)
class ContactResult:
    valid: bool
    error: Optional[str] = None
    contact: Optional[Contact] = None


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.fullmatch(value))


def is_valid_phone(value: str | None) -> bool:
    return bool(value) and bool(PHONE_PATTERN.fullmatch(value))


def validate_contact(method: str | None, email: str | None, phone: str | None) -> ContactResult:
    """Check the contact field selected by ``method``.

    Methods other than email/phone are accepted without a contact value;
    the booking service rejects them before calling this.
    """
    if method == CONTACT_EMAIL:
        if not email:
            return ContactResult(False, EMAIL_REQUIRED)
        if not is_valid_email(email):
            return ContactResult(False, EMAIL_INVALID)
        return ContactResult(True, contact=EmailContact(email))
    if method == CONTACT_PHONE:
        if not phone:
            return ContactResult(False, PHONE_REQUIRED)
        if not is_valid_phone(phone):
            return ContactResult(False, PHONE_INVALID)
        return ContactResult(True, contact=PhoneContact(phone))
    return ContactResult(True)


def contact_fields(contact: Contact) -> dict:
    """Column values for a contact; the unused channel is always cleared."""
    if isinstance(contact, EmailContact):
        return {"contact_method": CONTACT_EMAIL, "email": contact.address.strip().lower(), "phone": None}
    if isinstance(contact, PhoneContact):
        return {"contact_method": CONTACT_PHONE, "email": None, "phone": contact.number.strip()}
    raise TypeError(f"Unsupported contact: {contact!r}")
