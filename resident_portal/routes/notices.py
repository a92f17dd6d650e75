import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from ..auth import ensure_owner_or_admin, get_optional_user
from ..json_store import JsonStore, get_store
from ..repository import CollectionRepository, Record
from ..shared.dates import (
    as_utc,
    days_from_now,
    end_of_day,
    is_date_only,
    newest_first,
    parse_iso,
    utc_now,
    utc_now_iso,
)
from ..shared.validators import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notices", tags=["Notices"])

DEFAULT_LIFETIME_DAYS = 30


class NoticeCreate(BaseModel):
    title: str
    content: str
    important: bool = False
    expiresAt: Optional[str] = None
    userId: Optional[str] = None
    userName: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("expiresAt")
    @classmethod
    def check_expiry(cls, v):
        if not v:
            return None
        if is_date_only(v):
            v = end_of_day(v)
        if parse_iso(v) is None:
            raise ValueError("expiresAt must be a date or ISO-8601 timestamp")
        return v


def notices_repo(store: JsonStore = Depends(get_store)) -> CollectionRepository:
    return CollectionRepository(store, "notices")


def is_active(notice: Record) -> bool:
    """Notices without a readable expiry stay visible"""
    expires_at = notice.get("expiresAt")
    if expires_at and is_date_only(expires_at):
        expires_at = end_of_day(expires_at)
    parsed = parse_iso(expires_at)
    return parsed is None or as_utc(parsed) > utc_now()


@router.get("")
async def list_notices(repo: CollectionRepository = Depends(notices_repo)):
    """Active notices, newest first"""
    notices = [
        {**n, "userId": n.get("userId") or "system", "userName": n.get("userName") or "System"}
        for n in repo.all()
        if is_active(n)
    ]
    return newest_first(notices)


@router.post("", status_code=201)
async def create_notice(data: NoticeCreate, repo: CollectionRepository = Depends(notices_repo)):
    now = utc_now_iso()
    notice = {
        "id": repo.new_id(),
        "title": data.title,
        "content": data.content,
        "important": data.important,
        "createdAt": now,
        "updatedAt": now,
        "expiresAt": data.expiresAt or days_from_now(DEFAULT_LIFETIME_DAYS),
        "userId": data.userId or "anonymous",
        "userName": data.userName or "Anonymous",
    }
    repo.add(notice)
    logger.info(f"📢 Notice {notice['id']} posted by {notice['userId']}, expires {notice['expiresAt']}")
    return notice


@router.delete("/{notice_id}")
async def delete_notice(
    notice_id: str,
    userId: Optional[str] = Query(None),
    current_user: Optional[Record] = Depends(get_optional_user),
    repo: CollectionRepository = Depends(notices_repo),
):
    notice = repo.get(notice_id)
    if not notice:
        raise HTTPException(status_code=404, detail="Notice not found")

    ensure_owner_or_admin(notice.get("userId"), userId, current_user, repo.store, "notice")

    repo.delete(notice_id)
    logger.info(f"🗑️ Notice {notice_id} deleted")
    return {"success": True}
