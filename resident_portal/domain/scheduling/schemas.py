"""Scheduling domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.dates import as_utc, parse_iso
from ...shared.validators import (
    require_text,
    validate_choice,
    validate_clock_time,
    validate_iso_date,
)
from .availability import WEEKDAYS, clock_to_minutes

APPOINTMENT_TYPES = ("MEETING", "ACTIVITY", "CONSULTATION")
APPOINTMENT_STATUSES = ("PENDING", "CONFIRMED", "REJECTED", "CANCELLED")
HOST_ROLES = ("ADMIN", "COACH")


class TimeSlot(BaseModel):
    startTime: str
    endTime: str

    @field_validator("startTime", "endTime")
    @classmethod
    def check_clock(cls, v):
        return validate_clock_time(v)

    @model_validator(mode="after")
    def check_order(self):
        if clock_to_minutes(self.startTime) >= clock_to_minutes(self.endTime):
            raise ValueError("Slot start time must be before its end time")
        return self


class DaySchedule(BaseModel):
    day: str
    slots: list[TimeSlot] = []

    @field_validator("day")
    @classmethod
    def check_day(cls, v):
        return validate_choice(v, WEEKDAYS, "day")


class AvailabilityException(BaseModel):
    date: str
    available: bool = False
    reason: str = ""

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return validate_iso_date(v)


class AvailabilityUpsert(BaseModel):
    """Schema for publishing (or replacing) a host's availability"""

    userId: str
    userName: str
    role: str
    weeklySchedule: list[DaySchedule]
    exceptions: list[AvailabilityException] = []

    @field_validator("userId", "userName")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return validate_choice(v, HOST_ROLES, "role")


class AppointmentCreate(BaseModel):
    """Schema for requesting an appointment with a host"""

    title: str
    startTime: str
    endTime: str
    hostId: str
    type: str
    description: str = ""
    location: str = ""
    attendeeIds: list[str] = []
    status: str = "PENDING"

    @field_validator("title", "hostId")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("startTime", "endTime")
    @classmethod
    def check_timestamp(cls, v):
        if parse_iso(v) is None:
            raise ValueError("Must be an ISO-8601 timestamp")
        return v

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, APPOINTMENT_TYPES, "type")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, APPOINTMENT_STATUSES, "status")

    @model_validator(mode="after")
    def check_order(self):
        if as_utc(parse_iso(self.endTime)) <= as_utc(parse_iso(self.startTime)):
            raise ValueError("endTime must be after startTime")
        return self


class AppointmentStatusUpdate(BaseModel):
    status: str
    rejectionReason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, APPOINTMENT_STATUSES, "status")
