"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CLOCK_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

MIN_PASSWORD_LENGTH = 8


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if email is None:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def validate_password(password: Optional[str]) -> Optional[str]:
    if password is None:
        return password
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return password


def validate_choice(value: Optional[str], choices: tuple[str, ...], field: str) -> Optional[str]:
    """Upper-case an enum-like value and check it against the allowed choices"""
    if value is None:
        return value
    normalized = value.strip().upper()
    if normalized not in choices:
        raise ValueError(f"Invalid {field}: must be one of {', '.join(choices)}")
    return normalized


def validate_clock_time(value: str) -> str:
    """Validate a 24h "HH:MM" clock time"""
    if not CLOCK_TIME_PATTERN.match(value or ""):
        raise ValueError("Time must use the HH:MM format")
    return value


def validate_iso_date(value: str) -> str:
    """Validate a "YYYY-MM-DD" calendar date"""
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValueError("Date must use the YYYY-MM-DD format") from e
    if len(value) != 10:
        raise ValueError("Date must use the YYYY-MM-DD format")
    return value


def require_text(value: Optional[str], field: str) -> Optional[str]:
    """Reject blank strings for required text fields"""
    if value is not None and not value.strip():
        raise ValueError(f"{field} cannot be empty")
    return value


def reject_null(value, field: str):
    """Refuse an explicit null for a field that may be left out but never cleared"""
    if value is None:
        raise ValueError(f"{field} cannot be null")
    return value
