import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from ..auth import ensure_owner_or_admin, get_optional_user
from ..json_store import JsonStore, get_store
from ..repository import CollectionRepository, Record
from ..shared.dates import newest_first, utc_now_iso
from ..shared.validators import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulletin", tags=["Bulletin"])


class BulletinPostCreate(BaseModel):
    title: str
    content: str
    userId: str
    userName: str
    important: bool = False

    @field_validator("title", "content", "userId", "userName")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)


def bulletin_repo(store: JsonStore = Depends(get_store)) -> CollectionRepository:
    return CollectionRepository(store, "bulletin")


@router.get("")
async def list_bulletin_posts(repo: CollectionRepository = Depends(bulletin_repo)):
    now = utc_now_iso()
    posts = [
        {
            **p,
            "important": p.get("important", False),
            "userId": p.get("userId") or "system",
            "userName": p.get("userName") or "System",
            "createdAt": p.get("createdAt") or now,
            "updatedAt": p.get("updatedAt") or p.get("createdAt") or now,
        }
        for p in repo.all()
    ]
    return newest_first(posts)


@router.post("", status_code=201)
async def create_bulletin_post(
    data: BulletinPostCreate, repo: CollectionRepository = Depends(bulletin_repo)
):
    now = utc_now_iso()
    post = {
        "id": repo.new_id(),
        "title": data.title,
        "content": data.content,
        "important": data.important,
        "createdAt": now,
        "updatedAt": now,
        "userId": data.userId,
        "userName": data.userName,
    }
    repo.add(post)
    logger.info(f"📌 Bulletin post {post['id']} by {data.userId}")
    return post


@router.delete("/{post_id}")
async def delete_bulletin_post(
    post_id: str,
    userId: Optional[str] = Query(None),
    current_user: Optional[Record] = Depends(get_optional_user),
    repo: CollectionRepository = Depends(bulletin_repo),
):
    post = repo.get(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Bulletin post not found")

    ensure_owner_or_admin(post.get("userId"), userId, current_user, repo.store, "bulletin post")

    repo.delete(post_id)
    return {"success": True}
