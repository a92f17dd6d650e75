"""Marketplace board - residents offering, selling and asking for things"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from ..auth import ensure_owner_or_admin, get_optional_user
from ..json_store import JsonStore, get_store
from ..repository import CollectionRepository, Record
from ..shared.dates import newest_first, utc_now_iso
from ..shared.validators import reject_null, require_text, validate_choice

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/board", tags=["Board"])

CATEGORIES = ("FOR_SALE", "OFFERED", "WANTED", "SERVICES")
CONDITIONS = ("NEW", "LIKE_NEW", "GOOD", "USED", "DAMAGED")

# Category codes written by the first, Dutch-language release
LEGACY_CATEGORIES = {
    "TE_KOOP": "FOR_SALE",
    "AANGEBODEN": "OFFERED",
    "GEZOCHT": "WANTED",
    "DIENSTEN": "SERVICES",
}


def normalize_category(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    upper = value.strip().upper()
    return LEGACY_CATEGORIES.get(upper, upper)


class BoardItemChanges(BaseModel):
    """Fields of a listing; on edits only the supplied ones change"""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    condition: Optional[str] = None
    images: Optional[list[str]] = None
    contactInfo: Optional[str] = None

    @field_validator("title", "description", "category", mode="before")
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
        return validate_choice(normalize_category(v), CATEGORIES, "category")

    @field_validator("condition")
    @classmethod
    def check_condition(cls, v):
        return validate_choice(v, CONDITIONS, "condition")

    @field_validator("price")
    @classmethod
    def check_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v


class BoardItemCreate(BoardItemChanges):
    title: str
    description: str
    category: str
    images: list[str] = []
    userId: str
    userName: str

    @field_validator("userId", "userName")
    @classmethod
    def check_owner(cls, v, info):
        return require_text(v, info.field_name)


def board_repo(store: JsonStore = Depends(get_store)) -> CollectionRepository:
    return CollectionRepository(store, "board")


def normalize_item(item: Record) -> Record:
    return {
        **item,
        "category": normalize_category(item.get("category")) or "OFFERED",
        "price": item.get("price"),
        "images": item.get("images") or [],
    }


@router.get("")
async def list_board_items(
    userId: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    repo: CollectionRepository = Depends(board_repo),
):
    items = [normalize_item(i) for i in repo.all()]
    if userId:
        items = [i for i in items if i.get("userId") == userId]
    if category:
        wanted = normalize_category(category)
        items = [i for i in items if i["category"] == wanted]
    return newest_first(items)


@router.post("", status_code=201)
async def create_board_item(data: BoardItemCreate, repo: CollectionRepository = Depends(board_repo)):
    now = utc_now_iso()
    item = {
        "id": repo.new_id(),
        **data.model_dump(),
        "createdAt": now,
        "updatedAt": now,
    }
    repo.add(item)
    logger.info(f"🛒 Board item {item['id']} ({data.category}) listed by {data.userId}")
    return item


@router.put("/{item_id}")
async def update_board_item(
    item_id: str,
    data: BoardItemChanges,
    userId: Optional[str] = Query(None),
    current_user: Optional[Record] = Depends(get_optional_user),
    repo: CollectionRepository = Depends(board_repo),
):
    """Edit a listing; optional fields that are left out keep their value"""
    item = repo.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Board item not found")

    ensure_owner_or_admin(item.get("userId"), userId, current_user, repo.store, "board item")

    changes = data.model_dump(exclude_unset=True)
    changes["updatedAt"] = utc_now_iso()
    return normalize_item(repo.update(item_id, changes))


@router.delete("/{item_id}")
async def delete_board_item(
    item_id: str,
    userId: Optional[str] = Query(None),
    current_user: Optional[Record] = Depends(get_optional_user),
    repo: CollectionRepository = Depends(board_repo),
):
    item = repo.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Board item not found")

    ensure_owner_or_admin(item.get("userId"), userId, current_user, repo.store, "board item")

    repo.delete(item_id)
    logger.info(f"🗑️ Board item {item_id} removed")
    return {"success": True}
