"""
Host availability rules

A host publishes a weekly schedule of "HH:MM" slots plus dated exceptions.
An appointment fits when it lies inside one slot of its weekday, the date is
not blocked by an exception, and it does not overlap another live booking of
the same host. Weekday, date and minutes are read from the wall-clock of the
submitted timestamps.
"""

from datetime import datetime
from typing import Any, Optional

from ...shared.dates import as_utc, parse_iso
from ...shared.validators import CLOCK_TIME_PATTERN

WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")

# Appointments in these states no longer hold their slot
RELEASED_STATUSES = ("CANCELLED", "REJECTED")


def weekday_name(value: datetime) -> str:
    return WEEKDAYS[value.weekday()]


def clock_to_minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def find_exception(availability: dict, date_string: str) -> Optional[dict]:
    return next(
        (e for e in availability.get("exceptions") or [] if e.get("date") == date_string), None
    )


def is_valid_slot(slot) -> bool:
    if not isinstance(slot, dict):
        return False
    return all(
        isinstance(slot.get(key), str) and CLOCK_TIME_PATTERN.match(slot[key])
        for key in ("startTime", "endTime")
    )


def slots_for_day(availability: dict, day: str) -> list[dict]:
    """Well-formed slots of one weekday, legacy or hand-edited entries are skipped"""
    schedule = next(
        (
            d
            for d in availability.get("weeklySchedule") or []
            if isinstance(d, dict) and d.get("day") == day
        ),
        None,
    )
    if not schedule:
        return []
    return [slot for slot in schedule.get("slots") or [] if is_valid_slot(slot)]


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open interval overlap, touching intervals do not overlap"""
    return as_utc(start) < as_utc(other_end) and as_utc(end) > as_utc(other_start)


def check_slot_available(
    host_id: str,
    start_time: str,
    end_time: str,
    appointments: list[dict],
    availability_list: list[dict],
) -> tuple[bool, Optional[str]]:
    """
    Check whether a host can take an appointment in the requested window.

    Returns:
        (available, reason) where reason explains why the slot is refused
    """
    start = parse_iso(start_time)
    end = parse_iso(end_time)
    if start is None or end is None:
        return False, "Start and end time must be valid ISO-8601 timestamps"

    host_availability = next((a for a in availability_list if a.get("userId") == host_id), None)
    if not host_availability:
        return False, "Host has not published any availability"

    date_string = start.date().isoformat()
    exception = find_exception(host_availability, date_string)
    if exception and not exception.get("available", False):
        reason = exception.get("reason") or "no reason given"
        return False, f"Host is not available on this date: {reason}"

    slots = slots_for_day(host_availability, weekday_name(start))
    if not slots:
        return False, "Host has no available time slots on this day"

    if end.date() != start.date():
        return False, "Appointment must start and end on the same day"

    requested_start = minutes_of_day(start)
    requested_end = minutes_of_day(end)
    fits = any(
        requested_start >= clock_to_minutes(slot.get("startTime"))
        and requested_end <= clock_to_minutes(slot.get("endTime"))
        for slot in slots
    )
    if not fits:
        return False, "Appointment falls outside the host's available time slots"

    for appointment in appointments:
        if appointment.get("hostId") != host_id or appointment.get("status") in RELEASED_STATUSES:
            continue
        existing_start = parse_iso(appointment.get("startTime"))
        existing_end = parse_iso(appointment.get("endTime"))
        if existing_start is None or existing_end is None:
            continue
        if overlaps(start, end, existing_start, existing_end):
            return False, (
                f"An appointment is already scheduled in this time slot: {appointment.get('title', '')}"
            )

    return True, None


def availability_for_date(person: dict[str, Any], date_string: str) -> dict[str, Any]:
    """Slots a person offers on one calendar date"""
    day = weekday_name(datetime.fromisoformat(date_string))
    summary = {
        "id": person.get("id"),
        "userId": person.get("userId"),
        "userName": person.get("userName"),
        "role": person.get("role"),
        "date": date_string,
    }

    exception = find_exception(person, date_string)
    if exception and not exception.get("available", False):
        return {**summary, "availableSlots": [], "unavailableReason": exception.get("reason", "")}

    return {**summary, "availableSlots": slots_for_day(person, day)}
