import pytest

from resident_portal.domain.scheduling.availability import (
    availability_for_date,
    check_slot_available,
)

HOST = {
    "id": "av1",
    "userId": "coach-1",
    "userName": "Chris Coach",
    "role": "COACH",
    "weeklySchedule": [
        {"day": "MONDAY", "slots": [{"startTime": "09:00", "endTime": "12:00"}]},
        {"day": "WEDNESDAY", "slots": [{"startTime": "13:00", "endTime": "17:00"}]},
        {"day": "FRIDAY", "slots": []},
    ],
    "exceptions": [
        {"date": "2030-01-14", "available": False, "reason": "Training day"},
        {"date": "2030-01-21", "available": True, "reason": "Back early"},
    ],
}

# 2030-01-07 is a Monday
MONDAY = "2030-01-07"


def check(start, end, appointments=(), availability=(HOST,)):
    return check_slot_available("coach-1", start, end, list(appointments), list(availability))


def booking(start, end, status="CONFIRMED", host="coach-1"):
    return {"id": "x", "title": "Intake", "hostId": host, "startTime": start, "endTime": end, "status": status}


def test_slot_inside_schedule_is_available():
    assert check(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z") == (True, None)


def test_slot_may_end_exactly_when_schedule_ends():
    assert check(f"{MONDAY}T11:00:00Z", f"{MONDAY}T12:00:00Z")[0] is True


def test_host_without_availability_is_refused():
    available, reason = check(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", availability=[])
    assert available is False
    assert "availability" in reason


def test_blocking_exception_wins_over_schedule():
    available, reason = check("2030-01-14T09:00:00Z", "2030-01-14T10:00:00Z")
    assert available is False
    assert reason.endswith("Training day")


def test_exception_marked_available_does_not_block():
    assert check("2030-01-21T09:00:00Z", "2030-01-21T10:00:00Z")[0] is True


@pytest.mark.parametrize("day", ["2030-01-08", "2030-01-11"])  # Tuesday (absent), Friday (no slots)
def test_day_without_slots_is_refused(day):
    available, reason = check(f"{day}T09:00:00Z", f"{day}T10:00:00Z")
    assert available is False
    assert "no available time slots" in reason


def test_slot_running_past_schedule_is_refused():
    available, reason = check(f"{MONDAY}T11:30:00Z", f"{MONDAY}T12:30:00Z")
    assert available is False
    assert "outside" in reason


def test_overlapping_booking_is_refused():
    existing = booking(f"{MONDAY}T09:30:00Z", f"{MONDAY}T10:30:00Z")
    available, reason = check(f"{MONDAY}T10:00:00Z", f"{MONDAY}T11:00:00Z", [existing])
    assert available is False
    assert reason.endswith("Intake")


def test_enclosing_booking_is_refused():
    existing = booking(f"{MONDAY}T10:00:00Z", f"{MONDAY}T10:15:00Z")
    assert check(f"{MONDAY}T09:00:00Z", f"{MONDAY}T11:00:00Z", [existing])[0] is False


def test_back_to_back_bookings_are_allowed():
    existing = booking(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z")
    assert check(f"{MONDAY}T10:00:00Z", f"{MONDAY}T11:00:00Z", [existing])[0] is True


@pytest.mark.parametrize("status", ["CANCELLED", "REJECTED"])
def test_released_bookings_free_their_slot(status):
    existing = booking(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", status=status)
    assert check(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", [existing])[0] is True


def test_bookings_of_other_hosts_are_ignored():
    existing = booking(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", host="coach-2")
    assert check(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", [existing])[0] is True


def test_wall_clock_of_offset_timestamps_is_used():
    # 09:00 local time in UTC+01:00 is 08:00Z, still inside the 09:00-12:00 slot locally
    assert check(f"{MONDAY}T09:00:00+01:00", f"{MONDAY}T10:00:00+01:00")[0] is True


def test_availability_for_date_lists_weekday_slots():
    summary = availability_for_date(HOST, "2030-01-09")

    assert summary["availableSlots"] == [{"startTime": "13:00", "endTime": "17:00"}]
    assert summary["date"] == "2030-01-09"
    assert "unavailableReason" not in summary


def test_availability_for_blocked_date_gives_reason():
    summary = availability_for_date(HOST, "2030-01-14")

    assert summary["availableSlots"] == []
    assert summary["unavailableReason"] == "Training day"


LEGACY_HOST = {
    **HOST,
    "weeklySchedule": [
        {"day": "MONDAY", "slots": [{"start": "09:00", "end": "12:00"}, {"startTime": "9am", "endTime": None}]},
        {"day": "WEDNESDAY", "slots": [{"start": "08:00"}, {"startTime": "13:00", "endTime": "17:00"}]},
    ],
}


def test_malformed_slots_are_skipped_instead_of_failing():
    available, reason = check(f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", availability=[LEGACY_HOST])
    assert available is False
    assert reason == "Host has no available time slots on this day"

    assert check("2030-01-09T13:00:00Z", "2030-01-09T14:00:00Z", availability=[LEGACY_HOST]) == (True, None)


def test_availability_for_date_leaves_out_malformed_slots():
    summary = availability_for_date(LEGACY_HOST, "2030-01-09")
    assert summary["availableSlots"] == [{"startTime": "13:00", "endTime": "17:00"}]
