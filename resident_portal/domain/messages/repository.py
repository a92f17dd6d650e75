"""Message repository - chat message collection access"""

from ...repository import CollectionRepository, Record


def message_type(message: Record) -> str:
    """Messages stored before the type field existed are private"""
    return message.get("type") or "private"


class MessageRepository(CollectionRepository):
    collection = "messages"

    def in_conversation(self, conversation_id: str) -> list[Record]:
        return self.find(lambda m: m.get("conversationId") == conversation_id)

    def group_messages(self) -> list[Record]:
        return self.find(lambda m: m.get("recipientId") is None and message_type(m) == "group")

    def between(self, user_id: str, other_id: str) -> list[Record]:
        return self.find(
            lambda m: message_type(m) == "private"
            and (
                (m.get("senderId") == user_id and m.get("recipientId") == other_id)
                or (m.get("senderId") == other_id and m.get("recipientId") == user_id)
            )
        )

    def involving(self, user_id: str) -> list[Record]:
        return self.find(
            lambda m: message_type(m) == "private"
            and (m.get("senderId") == user_id or m.get("recipientId") == user_id)
        )

    def mark_read(self, recipient_id: str, sender_id: str) -> int:
        return self.update_where(
            lambda m: m.get("senderId") == sender_id
            and m.get("recipientId") == recipient_id
            and not m.get("isRead", False),
            {"isRead": True},
        )
