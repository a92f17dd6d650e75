"""Message domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import require_text

MESSAGE_TYPES = ("private", "group")


def _null_to_none(v: Optional[str]) -> Optional[str]:
    # The chat client sends the literal string "null" for group messages
    if v is None or v.strip() in ("", "null"):
        return None
    return v


class MessageCreate(BaseModel):
    """Schema for sending a chat message"""

    senderId: str
    content: str
    recipientId: Optional[str] = None
    senderName: Optional[str] = None
    type: Optional[str] = None
    conversationId: Optional[str] = None

    @field_validator("senderId", "content")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("recipientId", "conversationId")
    @classmethod
    def check_optional_id(cls, v):
        return _null_to_none(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        if v is None:
            return v
        normalized = v.strip().lower()
        if normalized not in MESSAGE_TYPES:
            raise ValueError("Invalid type: must be private or group")
        return normalized


class MarkReadRequest(BaseModel):
    """Mark every unread message from senderId to userId as read"""

    userId: str
    senderId: str


class MarkReadResponse(BaseModel):
    success: bool
    updatedCount: int
