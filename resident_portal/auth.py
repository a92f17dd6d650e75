import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .domain.users.repository import UserRepository
from .json_store import JsonStore, get_store
from .repository import Record
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Id used by early seed data for the built-in administrator
LEGACY_ADMIN_ID = "admin"


def _user_from_credentials(
    credentials: HTTPAuthorizationCredentials, store: JsonStore
) -> Record:
    payload = verify_jwt_token(credentials.credentials)
    if not payload or not payload.get("userId"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = UserRepository(store).get(payload["userId"])
    if not user:
        logger.warning(f"⚠️ Token references unknown user {payload['userId']}")
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: JsonStore = Depends(get_store),
) -> Record:
    """Resolve the bearer token to a user record, 401 when absent or invalid"""
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )
    return _user_from_credentials(credentials, store)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: JsonStore = Depends(get_store),
) -> Optional[Record]:
    """Like get_current_user but anonymous requests resolve to None"""
    if credentials is None:
        return None
    return _user_from_credentials(credentials, store)


def require_roles(*roles: str):
    """
    Create a dependency that only lets users with one of the given roles through

    Example usage:
        @router.post("", dependencies=[Depends(require_roles("ADMIN"))])
    """

    async def role_checker(current_user: Record = Depends(get_current_user)) -> Record:
        if current_user.get("role") not in roles:
            logger.warning(
                f"🚫 User {current_user.get('id')} with role {current_user.get('role')} "
                f"denied, requires one of {roles}"
            )
            raise HTTPException(status_code=403, detail="You do not have permission to do this")
        return current_user

    return role_checker


def ensure_owner_or_admin(
    owner_id: Optional[str],
    acting_user_id: Optional[str],
    current_user: Optional[Record],
    store: JsonStore,
    resource: str = "item",
) -> None:
    """
    Ownership check shared by notices, bulletin posts and marketplace items.

    The acting user comes from the bearer token when present, otherwise from
    the userId the client sent along. Without either the action is allowed.
    """
    if current_user:
        actor_id = current_user.get("id")
        actor_role = current_user.get("role")
    elif acting_user_id:
        actor_id = acting_user_id
        actor = UserRepository(store).get(acting_user_id)
        actor_role = actor.get("role") if actor else None
    else:
        return

    if actor_id == owner_id or actor_id == LEGACY_ADMIN_ID or actor_role == "ADMIN":
        return

    logger.warning(f"🚫 User {actor_id} tried to modify {resource} owned by {owner_id}")
    raise HTTPException(status_code=403, detail=f"You are not allowed to modify this {resource}")
