"""Message service - Business logic for private and group chat"""

import logging
from typing import Any, Optional

from fastapi import HTTPException

from ...json_store import JsonStore
from ...repository import Record
from ...shared.dates import oldest_first, utc_now_iso
from ..users.repository import UserRepository
from .repository import MessageRepository
from .schemas import MessageCreate

logger = logging.getLogger(__name__)

GUEST_PREFIX = "temp-"
GUEST_NAME = "Guest User"


class MessageService:
    """Service layer for chat messages"""

    def __init__(self, store: JsonStore):
        self.store = store
        self.repo = MessageRepository(store)
        self.users = UserRepository(store)

    def list_messages(
        self,
        conversation_id: Optional[str] = None,
        message_type: Optional[str] = None,
        recipient_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[Record]:
        """Messages for one view of the chat, oldest first

        Filters apply in order of precedence: conversation, group chat,
        private thread between two users, everything involving one user.
        """
        if conversation_id:
            messages = self.repo.in_conversation(conversation_id)
        elif message_type == "group" or recipient_id == "null":
            messages = self.repo.group_messages()
        elif user_id and recipient_id:
            messages = self.repo.between(user_id, recipient_id)
        elif user_id:
            messages = self.repo.involving(user_id)
        else:
            messages = self.repo.all()
        return oldest_first(messages)

    def _sender_name(self, data: MessageCreate) -> str:
        if data.senderId.startswith(GUEST_PREFIX):
            return data.senderName or GUEST_NAME

        sender = self.users.get(data.senderId)
        if not sender:
            logger.warning(f"⚠️ Message rejected, unknown sender {data.senderId}")
            raise HTTPException(status_code=404, detail="Sender not found")
        return sender.get("name") or data.senderName or sender.get("email", "")

    def send_message(self, data: MessageCreate) -> tuple[Record, Optional[dict[str, Any]]]:
        """
        Store a chat message.

        Returns:
            (message, notification) where notification holds the arguments for
            the e-mail that tells a private recipient about the message, or None
        """
        sender_name = self._sender_name(data)
        kind = data.type or ("private" if data.recipientId else "group")
        if kind == "private" and not data.recipientId:
            raise HTTPException(status_code=400, detail="recipientId is required for private messages")

        message = {
            "id": self.repo.new_id(),
            "senderId": data.senderId,
            "senderName": sender_name,
            "recipientId": data.recipientId if kind == "private" else None,
            "content": data.content,
            "createdAt": utc_now_iso(),
            "isRead": False,
            "type": kind,
        }
        if data.conversationId:
            message["conversationId"] = data.conversationId

        self.repo.add(message)
        logger.info(f"💬 Stored {kind} message {message['id']} from {data.senderId}")

        return message, self._notification_for(message)

    def _notification_for(self, message: Record) -> Optional[dict[str, Any]]:
        if message["type"] != "private":
            return None

        recipient = self.users.get(message["recipientId"])
        if not recipient or not recipient.get("email"):
            logger.info(f"ℹ️ No e-mail notification, recipient {message['recipientId']} has no address")
            return None

        return {
            "to": recipient["email"],
            "recipient_name": recipient.get("name", ""),
            "sender_id": message["senderId"],
            "sender_name": message["senderName"],
            "message": message["content"],
        }

    def mark_read(self, user_id: str, sender_id: str) -> dict[str, Any]:
        updated = self.repo.mark_read(recipient_id=user_id, sender_id=sender_id)
        logger.info(f"✅ Marked {updated} messages from {sender_id} to {user_id} as read")
        return {"success": True, "updatedCount": updated}
