"""Scheduling routers - appointment booking and host availability endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ...json_store import JsonStore, get_store
from .schemas import AppointmentCreate, AppointmentStatusUpdate, AvailabilityUpsert
from .service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])
availability_router = APIRouter(prefix="/availability", tags=["Availability"])


def get_scheduling_service(store: JsonStore = Depends(get_store)) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(store)


@router.get("")
async def list_appointments(
    hostId: Optional[str] = Query(None),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """List appointments, optionally for one host and within a date range"""
    return service.list_appointments(hostId, startDate, endDate)


@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: str, service: SchedulingService = Depends(get_scheduling_service)
):
    return service.get_appointment(appointment_id)


@router.post("", status_code=201)
async def create_appointment(
    data: AppointmentCreate, service: SchedulingService = Depends(get_scheduling_service)
):
    """Book an appointment; 409 when the host is not available"""
    return service.create_appointment(data)


@router.patch("/{appointment_id}")
async def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Confirm, reject or cancel an appointment"""
    return service.update_status(appointment_id, data)


@availability_router.get("")
async def list_availability(
    userId: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Availability records, or the slots per person on a given date"""
    return service.list_availability(userId, role, date)


@availability_router.post("")
async def upsert_availability(
    data: AvailabilityUpsert,
    response: Response,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Publish or replace a host's weekly schedule"""
    record, created = service.upsert_availability(data)
    response.status_code = 201 if created else 200
    return record
