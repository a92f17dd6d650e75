import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator

from ..auth import get_current_user
from ..config import AUTH_RATE_LIMIT, AUTH_RATE_WINDOW_SECONDS
from ..domain.users.schemas import UserCreate, UserResponse
from ..domain.users.service import UserService, public_user
from ..json_store import JsonStore, get_store
from ..rate_limiter import create_rate_limiter
from ..repository import Record
from ..security_utils import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

register_rate_limit = create_rate_limiter(
    limit=AUTH_RATE_LIMIT, window_seconds=AUTH_RATE_WINDOW_SECONDS, key_prefix="register"
)
login_rate_limit = create_rate_limiter(
    limit=AUTH_RATE_LIMIT, window_seconds=AUTH_RATE_WINDOW_SECONDS, key_prefix="login"
)


class RegisterRequest(UserCreate):
    """Self-service sign up, any submitted role is ignored"""

    @field_validator("role", mode="before")
    @classmethod
    def check_role(cls, v):
        return "USER"


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class LoginResponse(BaseModel):
    user: UserResponse
    token: str


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: RegisterRequest,
    store: JsonStore = Depends(get_store),
    _: None = Depends(register_rate_limit),
):
    """Create a regular USER account"""
    user = UserService(store).register(data)
    return public_user(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    store: JsonStore = Depends(get_store),
    _: None = Depends(login_rate_limit),
):
    """Exchange e-mail and password for a session token"""
    user = UserService(store).authenticate(data.email, data.password)
    return {"user": public_user(user), "token": create_access_token(user)}


@router.get("/user", response_model=UserResponse)
async def get_user_by_email(email: str = Query(...), store: JsonStore = Depends(get_store)):
    return public_user(UserService(store).get_user_by_email(email))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: Record = Depends(get_current_user)):
    return public_user(current_user)
