"""Scheduling service - appointments booked against host availability"""

import logging
from typing import Any, Optional

from fastapi import HTTPException

from ...json_store import JsonStore
from ...repository import Record
from ...shared.dates import as_utc, end_of_day, is_date_only, parse_iso, sort_key, utc_now_iso
from ...shared.validators import validate_iso_date
from ..users.repository import UserRepository
from .availability import availability_for_date, check_slot_available
from .repository import AppointmentRepository, AvailabilityRepository
from .schemas import AppointmentCreate, AppointmentStatusUpdate, AvailabilityUpsert

logger = logging.getLogger(__name__)


class SchedulingService:
    """Service layer for appointments and availability"""

    def __init__(self, store: JsonStore):
        self.store = store
        self.appointments = AppointmentRepository(store)
        self.availability = AvailabilityRepository(store)
        self.users = UserRepository(store)

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def list_availability(
        self, user_id: Optional[str] = None, role: Optional[str] = None, date: Optional[str] = None
    ) -> list[dict[str, Any]]:
        records = self.availability.all()

        if user_id:
            records = [a for a in records if a.get("userId") == user_id]
        if role:
            records = [a for a in records if a.get("role") == role.upper()]

        if date:
            try:
                validate_iso_date(date)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e
            return [availability_for_date(person, date) for person in records]

        return records

    def upsert_availability(self, data: AvailabilityUpsert) -> tuple[Record, bool]:
        """Create or replace the availability of one host, keyed by userId"""
        record = {
            "id": self.availability.new_id(),
            "userId": data.userId,
            "userName": data.userName,
            "role": data.role,
            "weeklySchedule": [d.model_dump() for d in data.weeklySchedule],
            "exceptions": [e.model_dump() for e in data.exceptions],
        }
        saved, created = self.availability.upsert(lambda a: a.get("userId") == data.userId, record)
        action = "Created" if created else "Updated"
        logger.info(f"✅ {action} availability for user {data.userId}")
        return saved, created

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    def list_appointments(
        self,
        host_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Record]:
        appointments = self.appointments.all()

        if host_id:
            appointments = [a for a in appointments if a.get("hostId") == host_id]

        if start_date and end_date:
            range_start = parse_iso(start_date)
            # A date-only upper bound includes that whole day
            range_end = parse_iso(end_of_day(end_date) if is_date_only(end_date) else end_date)
            if range_start is None or range_end is None:
                raise HTTPException(status_code=400, detail="startDate and endDate must be ISO-8601 dates")
            range_start, range_end = as_utc(range_start), as_utc(range_end)
            appointments = [
                a
                for a in appointments
                if range_start <= sort_key(a.get("startTime")) <= range_end
            ]

        return sorted(appointments, key=lambda a: sort_key(a.get("startTime")))

    def get_appointment(self, appointment_id: str) -> Record:
        appointment = self.appointments.get(appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def create_appointment(self, data: AppointmentCreate) -> Record:
        """Book an appointment after checking the host's availability"""
        logger.info(f"📥 Appointment request for host {data.hostId}: {data.startTime} - {data.endTime}")

        with self.store.lock(self.appointments.collection):
            available, reason = check_slot_available(
                data.hostId,
                data.startTime,
                data.endTime,
                self.appointments.for_host(data.hostId),
                self.availability.all(),
            )
            if not available:
                logger.warning(f"⚠️ Slot refused for host {data.hostId}: {reason}")
                raise HTTPException(status_code=409, detail=reason)

            host = self.users.get(data.hostId)
            if not host:
                raise HTTPException(status_code=404, detail="Host not found")

            now = utc_now_iso()
            appointment = {
                "id": self.appointments.new_id(),
                "title": data.title,
                "description": data.description,
                "location": data.location,
                "startTime": data.startTime,
                "endTime": data.endTime,
                "createdAt": now,
                "updatedAt": now,
                "type": data.type,
                "hostId": data.hostId,
                "hostName": host.get("name") or host.get("email", ""),
                "attendeeIds": data.attendeeIds,
                "status": data.status,
            }
            self.appointments.add(appointment)

        logger.info(f"✅ Appointment {appointment['id']} booked with {appointment['hostName']}")
        return appointment

    def update_status(self, appointment_id: str, data: AppointmentStatusUpdate) -> Record:
        changes: dict[str, Any] = {"status": data.status, "updatedAt": utc_now_iso()}
        drop: tuple[str, ...] = ()
        if data.status == "REJECTED":
            changes["rejectionReason"] = data.rejectionReason or ""
        else:
            drop = ("rejectionReason",)

        appointment = self.appointments.update(appointment_id, changes, drop=drop)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        logger.info(f"✅ Appointment {appointment_id} is now {data.status}")
        return appointment
