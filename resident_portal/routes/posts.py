import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from ..json_store import JsonStore, get_store
from ..repository import CollectionRepository, Record
from ..shared.dates import newest_first, utc_now_iso
from ..shared.validators import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])


class CommentCreate(BaseModel):
    content: str
    authorId: str
    authorName: str

    @field_validator("content", "authorId", "authorName")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)


class PostCreate(CommentCreate):
    title: str

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return require_text(v, "title")


def posts_repo(store: JsonStore = Depends(get_store)) -> CollectionRepository:
    return CollectionRepository(store, "posts")


def normalize_post(post: Record) -> Record:
    return {
        **post,
        "authorId": post.get("authorId") or "system",
        "authorName": post.get("authorName") or "System",
        "comments": post.get("comments") or [],
    }


@router.get("")
async def list_posts(repo: CollectionRepository = Depends(posts_repo)):
    return newest_first([normalize_post(p) for p in repo.all()])


@router.post("", status_code=201)
async def create_post(data: PostCreate, repo: CollectionRepository = Depends(posts_repo)):
    now = utc_now_iso()
    post = {
        "id": repo.new_id(),
        "title": data.title,
        "content": data.content,
        "authorId": data.authorId,
        "authorName": data.authorName,
        "createdAt": now,
        "updatedAt": now,
        "comments": [],
    }
    repo.add(post)
    logger.info(f"📝 Post {post['id']} by {data.authorId}")
    return post


@router.post("/{post_id}/comments", status_code=201)
async def add_comment(
    post_id: str, data: CommentCreate, repo: CollectionRepository = Depends(posts_repo)
):
    now = utc_now_iso()
    comment = {
        "id": repo.new_id(),
        "content": data.content,
        "authorId": data.authorId,
        "authorName": data.authorName,
        "postId": post_id,
        "createdAt": now,
        "updatedAt": now,
    }

    with repo.store.lock(repo.collection):
        post = repo.get(post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        repo.update(
            post_id, {"comments": [*(post.get("comments") or []), comment], "updatedAt": now}
        )

    logger.info(f"💬 Comment {comment['id']} on post {post_id}")
    return comment
