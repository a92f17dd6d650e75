"""Report domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import reject_null, require_text, validate_choice

REPORT_CATEGORIES = ("MAINTENANCE", "COMPLAINT", "SUGGESTION", "OTHER")
REPORT_STATUSES = ("NEW", "IN_PROGRESS", "RESOLVED", "CLOSED")
REPORT_PRIORITIES = ("LOW", "MEDIUM", "HIGH")


class ReportCreate(BaseModel):
    """Schema for filing a new report"""

    title: str
    description: str
    reporterId: str
    reporterName: str
    category: str = "OTHER"
    priority: str = "MEDIUM"
    location: Optional[str] = None
    assignedToId: Optional[str] = None
    assignedToName: Optional[str] = None
    images: list[str] = []

    @field_validator("title", "description", "reporterId", "reporterName")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return validate_choice(v, REPORT_CATEGORIES, "category")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, REPORT_PRIORITIES, "priority")


class ReportChanges(BaseModel):
    """Schema for editing a report, only the supplied fields change"""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    assignedToId: Optional[str] = None
    assignedToName: Optional[str] = None
    images: Optional[list[str]] = None

    @field_validator("title", "description", "category", "priority", "status", mode="before")
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info.field_name)

    @field_validator("title", "description")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return validate_choice(v, REPORT_CATEGORIES, "category")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, REPORT_PRIORITIES, "priority")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, REPORT_STATUSES, "status")


class ReportUpdateCreate(BaseModel):
    """Schema for posting progress on a report"""

    reportId: str
    content: str
    authorId: str
    authorName: str
    isPublic: bool = True

    @field_validator("reportId", "content", "authorId", "authorName")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)
