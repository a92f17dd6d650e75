"""Timestamp helpers for the ISO-8601 strings stored in the collections"""

from datetime import datetime, timedelta, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format as e.g. 2024-05-01T09:30:00.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso(utc_now())


def is_date_only(value: str) -> bool:
    return isinstance(value, str) and len(value) == 10 and value[4] == "-" and value[7] == "-"


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returns None when missing or malformed

    A trailing "Z" is read as UTC; the offset (if any) is kept so callers can
    work with the wall-clock time that was submitted.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def end_of_day(date_value: str) -> str:
    """Turn a date-only value into the last second of that day"""
    return f"{date_value}T23:59:59Z"


def days_from_now(days: int) -> str:
    return to_iso(utc_now() + timedelta(days=days))


def sort_key(value: Optional[str]) -> datetime:
    """Chronological sort key; missing or malformed timestamps sort first"""
    parsed = parse_iso(value)
    return as_utc(parsed) if parsed else EPOCH


def newest_first(records: list[dict], field: str = "createdAt") -> list[dict]:
    return sorted(records, key=lambda r: sort_key(r.get(field)), reverse=True)


def oldest_first(records: list[dict], field: str = "createdAt") -> list[dict]:
    return sorted(records, key=lambda r: sort_key(r.get(field)))
