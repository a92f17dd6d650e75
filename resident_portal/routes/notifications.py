import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from ..json_store import JsonStore, get_store
from ..repository import CollectionRepository, Record
from ..shared.dates import newest_first, utc_now_iso
from ..shared.validators import require_text, validate_choice

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])

NOTIFICATION_TYPES = ("INFO", "WARNING", "MESSAGE", "BOARD", "EVENT", "REPORT")

# Notifications addressed to this id are shown to every user
BROADCAST = "all"


class NotificationCreate(BaseModel):
    userId: str
    title: str
    message: str
    type: str
    link: Optional[str] = None

    @field_validator("userId", "title", "message")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, NOTIFICATION_TYPES, "type")


class NotificationChange(BaseModel):
    userId: str
    isRead: bool = True


class MarkAllReadRequest(BaseModel):
    userId: str


def notifications_repo(store: JsonStore = Depends(get_store)) -> CollectionRepository:
    return CollectionRepository(store, "notifications")


def visible_to(notification: Record, user_id: str) -> bool:
    return notification.get("userId") in (user_id, BROADCAST)


@router.get("")
async def list_notifications(
    userId: str = Query(...),
    unreadOnly: bool = Query(False),
    repo: CollectionRepository = Depends(notifications_repo),
):
    """A user's notifications plus broadcasts, newest first"""
    notifications = repo.find(lambda n: visible_to(n, userId))
    if unreadOnly:
        notifications = [n for n in notifications if not n.get("isRead", False)]
    return newest_first(notifications)


@router.post("", status_code=201)
async def create_notification(
    data: NotificationCreate, repo: CollectionRepository = Depends(notifications_repo)
):
    notification = {
        "id": repo.new_id(),
        "userId": data.userId,
        "title": data.title,
        "message": data.message,
        "type": data.type,
        "isRead": False,
        "link": data.link,
        "createdAt": utc_now_iso(),
    }
    repo.add(notification)
    logger.info(f"🔔 {data.type} notification {notification['id']} for {data.userId}")
    return notification


# Declared before /{notification_id} so "read-all" is not taken for an id
@router.post("/read-all")
async def mark_all_read(
    data: MarkAllReadRequest, repo: CollectionRepository = Depends(notifications_repo)
):
    updated = repo.update_where(
        lambda n: visible_to(n, data.userId) and not n.get("isRead", False), {"isRead": True}
    )
    logger.info(f"✅ Marked {updated} notifications read for {data.userId}")
    return {"success": True, "updatedCount": updated}


@router.put("/{notification_id}")
async def update_notification(
    notification_id: str,
    data: NotificationChange,
    repo: CollectionRepository = Depends(notifications_repo),
):
    with repo.store.lock(repo.collection):
        notification = repo.get(notification_id)
        if not notification or not visible_to(notification, data.userId):
            raise HTTPException(status_code=404, detail="Notification not found")
        return repo.update(notification_id, {"isRead": data.isRead})


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    userId: str = Query(...),
    repo: CollectionRepository = Depends(notifications_repo),
):
    with repo.store.lock(repo.collection):
        notification = repo.get(notification_id)
        if not notification or not visible_to(notification, userId):
            raise HTTPException(status_code=404, detail="Notification not found")
        repo.delete(notification_id)
    return {"success": True}
