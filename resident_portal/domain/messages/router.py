"""Message router - chat endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from ...email_service import send_chat_notification
from ...json_store import JsonStore, get_store
from .schemas import MarkReadRequest, MarkReadResponse, MessageCreate
from .service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


def get_message_service(store: JsonStore = Depends(get_store)) -> MessageService:
    """Dependency injection for MessageService"""
    return MessageService(store)


@router.get("")
async def list_messages(
    conversationId: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    recipientId: Optional[str] = Query(None),
    userId: Optional[str] = Query(None),
    service: MessageService = Depends(get_message_service),
):
    return service.list_messages(conversationId, type, recipientId, userId)


@router.post("", status_code=201)
async def send_message(
    data: MessageCreate,
    background_tasks: BackgroundTasks,
    service: MessageService = Depends(get_message_service),
):
    """Send a private or group message; private recipients get an e-mail"""
    message, notification = service.send_message(data)
    if notification:
        background_tasks.add_task(send_chat_notification, **notification)
        logger.info(f"📧 Chat notification queued for message {message['id']}")
    return message


@router.put("/read", response_model=MarkReadResponse)
async def mark_messages_read(
    data: MarkReadRequest, service: MessageService = Depends(get_message_service)
):
    return service.mark_read(data.userId, data.senderId)
