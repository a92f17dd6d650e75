"""Report service - residents' reports and the staff follow-up on them"""

import logging
from typing import Any, Optional

from fastapi import HTTPException

from ...json_store import JsonStore
from ...repository import Record
from ...shared.dates import newest_first, oldest_first, utc_now_iso
from ..messages.schemas import MessageCreate
from ..messages.service import MessageService
from .repository import ReportRepository, ReportUpdateRepository
from .schemas import ReportChanges, ReportCreate, ReportUpdateCreate

logger = logging.getLogger(__name__)


def normalize_report(report: Record) -> Record:
    """Fill fields missing on reports stored by older versions"""
    now = utc_now_iso()
    return {
        **report,
        "reporterId": report.get("reporterId") or "system",
        "reporterName": report.get("reporterName") or "System",
        "status": report.get("status") or "NEW",
        "priority": report.get("priority") or "MEDIUM",
        "category": report.get("category") or "OTHER",
        "images": report.get("images") or [],
        "createdAt": report.get("createdAt") or now,
        "updatedAt": report.get("updatedAt") or report.get("createdAt") or now,
    }


def normalize_update(update: Record) -> Record:
    return {
        **update,
        "authorId": update.get("authorId") or "system",
        "authorName": update.get("authorName") or "System",
        "isPublic": update.get("isPublic", True),
    }


class ReportService:
    """Service layer for reports and report updates"""

    def __init__(self, store: JsonStore):
        self.store = store
        self.repo = ReportRepository(store)
        self.updates = ReportUpdateRepository(store)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def list_reports(
        self,
        reporter_id: Optional[str] = None,
        assigned_to_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Record]:
        reports = [normalize_report(r) for r in self.repo.all()]
        if reporter_id:
            reports = [r for r in reports if r["reporterId"] == reporter_id]
        if assigned_to_id:
            reports = [r for r in reports if r.get("assignedToId") == assigned_to_id]
        if status:
            reports = [r for r in reports if r["status"] == status.upper()]
        return newest_first(reports)

    def get_report(self, report_id: str) -> Record:
        report = self.repo.get(report_id)
        if not report:
            raise HTTPException(status_code=404, detail="Report not found")
        return normalize_report(report)

    def create_report(self, data: ReportCreate) -> Record:
        now = utc_now_iso()
        report = {
            "id": self.repo.new_id(),
            "title": data.title,
            "description": data.description,
            "category": data.category,
            "status": "NEW",
            "priority": data.priority,
            "reporterId": data.reporterId,
            "reporterName": data.reporterName,
            "location": data.location,
            "assignedToId": data.assignedToId,
            "assignedToName": data.assignedToName,
            "images": data.images,
            "createdAt": now,
            "updatedAt": now,
        }
        self.repo.add(report)
        logger.info(f"📥 New {data.category} report {report['id']} from {data.reporterId}")
        return report

    def update_report(self, report_id: str, data: ReportChanges) -> Record:
        """Merge the supplied fields and stamp status transitions"""
        with self.store.lock(self.repo.collection):
            current = self.get_report(report_id)
            changes: dict[str, Any] = data.model_dump(exclude_unset=True)
            now = utc_now_iso()
            changes["updatedAt"] = now

            new_status = changes.get("status")
            if new_status and new_status != current["status"]:
                if new_status == "RESOLVED":
                    changes["resolvedAt"] = now
                elif new_status == "CLOSED":
                    changes["closedAt"] = now
                logger.info(f"🔄 Report {report_id}: {current['status']} -> {new_status}")

            report = self.repo.update(report_id, changes)
        return normalize_report(report)

    def delete_report(self, report_id: str) -> dict[str, Any]:
        if not self.repo.delete(report_id):
            raise HTTPException(status_code=404, detail="Report not found")
        removed = self.updates.delete_for_report(report_id)
        logger.info(f"🗑️ Deleted report {report_id} and {removed} updates")
        return {"success": True}

    def start_conversation(self, report_id: str, staff: Record) -> tuple[Record, Optional[dict]]:
        """
        Open a chat between a staff member and the reporter.

        Returns the report and, when a conversation was created, the e-mail
        notification for the welcome message. Existing conversations are reused.
        """
        report = self.get_report(report_id)
        if report.get("conversationId"):
            return report, None

        messages = MessageService(self.store)
        conversation_id = messages.repo.new_id()
        welcome = (
            f"Hello {report['reporterName']}, I'm following up on your report "
            f"\"{report['title']}\". You can reply to me here."
        )
        _, notification = messages.send_message(
            MessageCreate(
                senderId=staff["id"],
                senderName=staff.get("name"),
                recipientId=report["reporterId"],
                content=welcome,
                type="private",
                conversationId=conversation_id,
            )
        )

        report = self.repo.update(
            report_id, {"conversationId": conversation_id, "updatedAt": utc_now_iso()}
        )
        logger.info(f"💬 Conversation {conversation_id} opened on report {report_id} by {staff['id']}")
        return normalize_report(report), notification

    # ------------------------------------------------------------------
    # Report updates
    # ------------------------------------------------------------------

    def list_updates(self, report_id: str) -> list[Record]:
        return oldest_first([normalize_update(u) for u in self.updates.for_report(report_id)])

    def get_update(self, update_id: str) -> Record:
        update = self.updates.get(update_id)
        if not update:
            raise HTTPException(status_code=404, detail="Report update not found")
        return normalize_update(update)

    def add_update(self, data: ReportUpdateCreate) -> Record:
        """Post an update; the first one moves a NEW report into progress"""
        report = self.get_report(data.reportId)

        update = {
            "id": self.updates.new_id(),
            "reportId": data.reportId,
            "content": data.content,
            "authorId": data.authorId,
            "authorName": data.authorName,
            "createdAt": utc_now_iso(),
            "isPublic": data.isPublic,
        }
        self.updates.add(update)

        if report["status"] == "NEW":
            changes: dict[str, Any] = {"status": "IN_PROGRESS", "updatedAt": utc_now_iso()}
            if not report.get("assignedToId"):
                changes["assignedToId"] = data.authorId
                changes["assignedToName"] = data.authorName
            self.repo.update(data.reportId, changes)
            logger.info(f"🔄 Report {data.reportId} picked up by {data.authorId}")

        return update

    def delete_update(self, update_id: str) -> dict[str, Any]:
        if not self.updates.delete(update_id):
            raise HTTPException(status_code=404, detail="Report update not found")
        return {"success": True}
