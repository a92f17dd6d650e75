"""User service - Business logic for user accounts"""

import logging
import math
from typing import Any, Optional

from fastapi import HTTPException

from ...json_store import JsonStore
from ...repository import Record
from ...security_utils import hash_password, mask_email, verify_password
from ...shared.dates import sort_key, utc_now_iso
from .repository import UserRepository
from .schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

DATE_FIELDS = ("createdAt", "updatedAt")


def public_user(user: Record) -> dict[str, Any]:
    """Strip the password hash and fill fields missing on legacy records"""
    now = utc_now_iso()
    return {
        "id": user.get("id"),
        "email": user.get("email", ""),
        "name": user.get("name") or "",
        "role": user.get("role") or "USER",
        "createdAt": user.get("createdAt") or now,
        "updatedAt": user.get("updatedAt") or user.get("createdAt") or now,
    }


class UserService:
    """Service layer for user accounts"""

    def __init__(self, store: JsonStore):
        self.store = store
        self.repo = UserRepository(store)

    def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        """Search, filter, sort and paginate users"""
        users = [public_user(u) for u in self.repo.all()]

        if search:
            needle = search.lower()
            users = [
                u for u in users if needle in u["name"].lower() or needle in u["email"].lower()
            ]

        if role:
            users = [u for u in users if u["role"] == role.upper()]

        if sort_by in DATE_FIELDS:
            users.sort(key=lambda u: sort_key(u.get(sort_by)), reverse=sort_order == "desc")
        else:
            users.sort(key=lambda u: str(u.get(sort_by) or "").lower(), reverse=sort_order == "desc")

        total = len(users)
        start = (page - 1) * limit
        return {
            "users": users[start : start + limit],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit) if total else 0,
            },
        }

    def get_user(self, user_id: str) -> Record:
        user = self.repo.get(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def get_user_by_email(self, email: str) -> Record:
        user = self.repo.get_by_email(email)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def create_user(self, data: UserCreate) -> Record:
        """Create a user with a hashed password"""
        if self.repo.email_taken(data.email):
            logger.warning(f"⚠️ Registration rejected, e-mail already in use: {mask_email(data.email)}")
            raise HTTPException(status_code=400, detail="A user with this email already exists")

        now = utc_now_iso()
        user = {
            "id": self.repo.new_id(),
            "email": data.email,
            "password": hash_password(data.password),
            "name": data.name.strip(),
            "role": data.role,
            "createdAt": now,
            "updatedAt": now,
        }
        self.repo.add(user)
        logger.info(f"✅ Created user {user['id']} ({data.role})")
        return user

    def register(self, data: UserCreate) -> Record:
        """Self-service sign up always yields a regular USER account"""
        return self.create_user(data.model_copy(update={"role": "USER"}))

    def authenticate(self, email: str, password: str) -> Record:
        user = self.repo.get_by_email(email)
        if not user or not verify_password(password, user.get("password")):
            logger.warning(f"⚠️ Failed login attempt for {mask_email(email)}")
            raise HTTPException(status_code=401, detail="Invalid credentials")
        logger.info(f"✅ User {user['id']} logged in")
        return user

    def update_user(self, user_id: str, data: UserUpdate) -> Record:
        self.get_user(user_id)

        changes: dict[str, Any] = {}
        if data.email is not None:
            if self.repo.email_taken(data.email, exclude_id=user_id):
                raise HTTPException(status_code=400, detail="A user with this email already exists")
            changes["email"] = data.email
        if data.name is not None:
            changes["name"] = data.name.strip()
        if data.role is not None:
            changes["role"] = data.role
        if data.password is not None:
            changes["password"] = hash_password(data.password)
        changes["updatedAt"] = utc_now_iso()

        user = self.repo.update(user_id, changes)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"✅ Updated user {user_id}: {sorted(k for k in changes if k != 'password')}")
        return user

    def delete_user(self, user_id: str) -> dict[str, Any]:
        if not self.repo.delete(user_id):
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"🗑️ Deleted user {user_id}")
        return {"success": True, "id": user_id}
