"""Report routers - reports and report update endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from ...auth import require_roles
from ...email_service import send_chat_notification
from ...json_store import JsonStore, get_store
from ...repository import Record
from .schemas import ReportChanges, ReportCreate, ReportUpdateCreate
from .service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])
# Registered before `router` so /reports/updates is not taken for a report id
updates_router = APIRouter(prefix="/reports/updates", tags=["Reports"])


def get_report_service(store: JsonStore = Depends(get_store)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(store)


# ============================================================================
# REPORT UPDATES
# ============================================================================


@updates_router.get("")
async def list_report_updates(
    reportId: str = Query(...),
    service: ReportService = Depends(get_report_service),
):
    """Updates on one report, oldest first"""
    return service.list_updates(reportId)


@updates_router.get("/{update_id}")
async def get_report_update(update_id: str, service: ReportService = Depends(get_report_service)):
    return service.get_update(update_id)


@updates_router.post("", status_code=201)
async def create_report_update(
    data: ReportUpdateCreate, service: ReportService = Depends(get_report_service)
):
    return service.add_update(data)


@updates_router.delete("/{update_id}")
async def delete_report_update(
    update_id: str, service: ReportService = Depends(get_report_service)
):
    return service.delete_update(update_id)


# ============================================================================
# REPORTS
# ============================================================================


@router.get("")
async def list_reports(
    reporterId: Optional[str] = Query(None),
    assignedToId: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    service: ReportService = Depends(get_report_service),
):
    """Reports, newest first"""
    return service.list_reports(reporterId, assignedToId, status)


@router.get("/{report_id}")
async def get_report(report_id: str, service: ReportService = Depends(get_report_service)):
    return service.get_report(report_id)


@router.post("", status_code=201)
async def create_report(data: ReportCreate, service: ReportService = Depends(get_report_service)):
    return service.create_report(data)


@router.put("/{report_id}")
async def update_report(
    report_id: str, data: ReportChanges, service: ReportService = Depends(get_report_service)
):
    return service.update_report(report_id, data)


@router.delete("/{report_id}")
async def delete_report(report_id: str, service: ReportService = Depends(get_report_service)):
    return service.delete_report(report_id)


@router.post("/{report_id}/conversation")
async def start_report_conversation(
    report_id: str,
    background_tasks: BackgroundTasks,
    staff: Record = Depends(require_roles("ADMIN", "COACH")),
    service: ReportService = Depends(get_report_service),
):
    """Open (or reuse) a chat with the reporter, staff only"""
    report, notification = service.start_conversation(report_id, staff)
    if notification:
        background_tasks.add_task(send_chat_notification, **notification)
    return report
