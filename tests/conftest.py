"""Shared fixtures: a throwaway JSON store, an API client bound to it and seeded users"""

import os

# Keep the test run independent from any local .env
os.environ["SECRET_KEY"] = "test-secret-key"
for _name in ("REDIS_URL", "SMTP_HOST", "RESEND_API_KEY", "SECURITY_HEADERS_ENABLED"):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient

from resident_portal import rate_limiter
from resident_portal.json_store import JsonStore, get_store
from resident_portal.main import app
from resident_portal.security_utils import create_access_token, hash_password
from resident_portal.shared.dates import utc_now_iso

DEFAULT_PASSWORD = "correct-horse-1"
_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data")


@pytest.fixture(autouse=True)
def clean_rate_limits():
    rate_limiter.reset_rate_limits()
    yield
    rate_limiter.reset_rate_limits()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture chat notification e-mails instead of sending them"""
    sent = []

    async def fake_send_chat_notification(**kwargs):
        sent.append(kwargs)
        return {"success": True}

    monkeypatch.setattr(
        "resident_portal.domain.messages.router.send_chat_notification", fake_send_chat_notification
    )
    monkeypatch.setattr(
        "resident_portal.domain.reports.router.send_chat_notification", fake_send_chat_notification
    )
    return sent


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(store):
    """Insert a user straight into the store"""

    def _make_user(email, role="USER", name=None, user_id=None):
        now = utc_now_iso()
        user = {
            "id": user_id or f"user-{email.split('@')[0]}",
            "email": email,
            "password": _PASSWORD_HASH,
            "name": name or email.split("@")[0].title(),
            "role": role,
            "createdAt": now,
            "updatedAt": now,
        }
        users = store.read("users")
        users.append(user)
        store.write("users", users)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _auth_headers


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role="ADMIN", name="Alice Admin")


@pytest.fixture
def coach(make_user):
    return make_user("coach@example.com", role="COACH", name="Chris Coach")


@pytest.fixture
def resident(make_user):
    return make_user("resident@example.com", name="Rita Resident")
