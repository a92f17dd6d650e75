"""
Rate limiting for the authentication endpoints

Counters are kept per process. When REDIS_URL is set each counter is seeded
from and periodically pushed to Redis, so several workers end up enforcing
roughly the same limit.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request

from .config import REDIS_URL

logger = logging.getLogger(__name__)

REDIS_SYNC_SECONDS = 10
SWEEP_SECONDS = 60

_redis: Optional[redis.Redis] = None
_redis_resolved = False

# key -> {"count": int, "resets_at": int, "synced_at": int}
_windows: dict[str, dict[str, int]] = {}
_windows_lock = Lock()
_last_sweep = 0


def get_redis_client() -> Optional[redis.Redis]:
    """Shared Redis client; None when REDIS_URL is unset or the server is unreachable"""
    global _redis, _redis_resolved

    if _redis_resolved:
        return _redis
    _redis_resolved = True

    if not REDIS_URL:
        logger.info("ℹ️ REDIS_URL not set, auth rate limits are per process")
        return None

    host = REDIS_URL.rsplit("@", 1)[-1]
    try:
        client = redis.from_url(REDIS_URL, decode_responses=True, socket_connect_timeout=5, socket_timeout=5)
        client.ping()
    except redis.RedisError as e:
        logger.error(f"❌ Redis at {host} unavailable, falling back to per-process limits: {e}")
        return None

    logger.info(f"✅ Rate limiter connected to Redis at {host}")
    _redis = client
    return _redis


def reset_rate_limits() -> None:
    """Forget every in-process counter"""
    global _last_sweep
    with _windows_lock:
        _windows.clear()
    _last_sweep = 0


def _sweep(now: int) -> None:
    global _last_sweep
    if now - _last_sweep < SWEEP_SECONDS:
        return
    _last_sweep = now
    expired = [key for key, window in _windows.items() if now >= window["resets_at"]]
    for key in expired:
        del _windows[key]
    if expired:
        logger.debug(f"🧹 Dropped {len(expired)} expired rate limit windows")


def _open_window(key: str, window_seconds: int, now: int, client: Optional[redis.Redis]) -> dict[str, int]:
    """Start a window, continuing the one another worker stored in Redis"""
    if client is not None:
        try:
            stored, ttl = client.get(key), client.ttl(key)
            if stored and ttl > 0:
                return {"count": int(stored), "resets_at": now + ttl, "synced_at": now}
        except redis.RedisError as e:
            logger.warning(f"⚠️ Could not read {key} from Redis: {e}")
    return {"count": 0, "resets_at": now + window_seconds, "synced_at": now}


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis] = None
) -> tuple[bool, int, int]:
    """Count one attempt against key

    Returns:
        (allowed, attempts in the current window, seconds until it resets)
    """
    now = int(time.time())

    with _windows_lock:
        _sweep(now)
        window = _windows.get(key)
        if window is None:
            window = _windows[key] = _open_window(key, window_seconds, now, client)
        elif now >= window["resets_at"]:
            window.update(count=0, resets_at=now + window_seconds, synced_at=0)

        allowed = window["count"] < limit
        if allowed:
            window["count"] += 1

        if client is not None and now - window["synced_at"] >= REDIS_SYNC_SECONDS:
            try:
                client.set(key, window["count"], ex=window_seconds)
                window["synced_at"] = now
            except redis.RedisError as e:
                logger.warning(f"⚠️ Could not push {key} to Redis: {e}")

        return allowed, window["count"], max(0, window["resets_at"] - now)


def client_ip(request: Request) -> str:
    """First address of X-Forwarded-For when behind a proxy"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Build a per-IP rate limit dependency

    Example usage:
        login_rate_limit = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")

        @router.post("/login")
        async def login(data: LoginRequest, _: None = Depends(login_rate_limit)):
            ...
    """

    async def rate_limiter(request: Request) -> None:
        key = f"{key_prefix}:{client_ip(request)}"
        allowed, attempts, retry_after = check_rate_limit(key, limit, window_seconds, get_redis_client())
        if not allowed:
            logger.warning(f"🚫 Rate limit hit for {key} ({attempts}/{limit} in {window_seconds}s)")
            raise HTTPException(
                status_code=429,
                detail=f"Too many attempts. Try again in {retry_after} seconds.",
                headers={"Retry-After": str(retry_after)},
            )

    return rate_limiter
