"""User domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import require_text, validate_choice, validate_email, validate_password

ROLES = ("ADMIN", "COACH", "USER")


class UserCreate(BaseModel):
    """Schema for creating a user from the admin screen"""

    email: str
    password: str
    name: str
    role: str = "USER"

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return require_text(v, "Name")

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return validate_choice(v, ROLES, "role")


class UserUpdate(BaseModel):
    """Schema for a partial user update"""

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return require_text(v, "Name")

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return validate_choice(v, ROLES, "role")


class UserResponse(BaseModel):
    """Public view of a user, never includes the password hash"""

    id: str
    email: str
    name: str = ""
    role: str = "USER"
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class DeleteUserResponse(BaseModel):
    success: bool
    id: str
