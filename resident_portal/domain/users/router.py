"""User router - FastAPI endpoints for user administration"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import require_roles
from ...json_store import JsonStore, get_store
from .schemas import (
    DeleteUserResponse,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from .service import UserService, public_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

require_admin = require_roles("ADMIN")


def get_user_service(store: JsonStore = Depends(get_store)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(store)


@router.get("", response_model=UserListResponse)
async def list_users(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    sortBy: str = Query("createdAt"),
    sortOrder: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: UserService = Depends(get_user_service),
):
    """List users with search, role filter, sorting and pagination"""
    return service.list_users(search, role, sortBy, sortOrder, page, limit)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return public_user(service.get_user(user_id))


@router.post("", response_model=UserResponse, status_code=201, dependencies=[Depends(require_admin)])
async def create_user(data: UserCreate, service: UserService = Depends(get_user_service)):
    """Create a user (admin only)"""
    return public_user(service.create_user(data))


@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
async def update_user(
    user_id: str, data: UserUpdate, service: UserService = Depends(get_user_service)
):
    """Partially update a user (admin only)"""
    return public_user(service.update_user(user_id, data))


@router.delete("/{user_id}", response_model=DeleteUserResponse, dependencies=[Depends(require_admin)])
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    return service.delete_user(user_id)
