"""Phone, email and identifier helpers shared by guests, users and SMS."""

import re
import uuid
from typing import Optional

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


def is_valid_phone_number(phone: str) -> bool:
    """US numbers only: 10 digits, or 11 digits with a leading 1."""
    digits = digits_only(phone)
    if len(digits) == 10:
        return True
    return len(digits) == 11 and digits.startswith("1")


def normalize_phone_number(phone: str) -> str:
    """
    Convert a US phone number to E.164 for storage.

    Unrecognized formats are returned unchanged so the caller can decide
    whether to reject them.
    """
    digits = digits_only(phone)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return phone


def format_phone_for_sms(phone: Optional[str]) -> Optional[str]:
    """
    Format a phone number for Twilio (E.164).

    Accepts US numbers and numbers that already carry a non-US country code.
    Returns None when the number cannot be sent to.
    """
    digits = digits_only(phone or "")
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if len(digits) > 10 and not digits.startswith("1"):
        return f"+{digits}"
    return None


def mask_phone(phone: Optional[str]) -> str:
    if not phone:
        return "<none>"
    return f"***-***-{digits_only(phone)[-4:]}"


def is_valid_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False
