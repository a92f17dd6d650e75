import pytest
from jose import jwt

from resident_portal import rate_limiter
from resident_portal.config import AUTH_RATE_LIMIT, JWT_ALGORITHM, SECRET_KEY

from conftest import DEFAULT_PASSWORD


def register(client, **overrides):
    payload = {"email": "New.Neighbour@Example.com", "password": "longenough", "name": "Nina"}
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


def test_register_creates_regular_user_without_exposing_password(client, store):
    response = register(client, role="ADMIN")

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new.neighbour@example.com"
    assert body["role"] == "USER"
    assert "password" not in body

    stored = store.read("users")[0]
    assert stored["password"].startswith("$2")
    assert stored["password"] != "longenough"


@pytest.mark.parametrize("role", ["SUPERUSER", "", 7])
def test_register_ignores_unknown_roles(client, role):
    response = register(client, role=role)

    assert response.status_code == 201
    assert response.json()["role"] == "USER"


def test_register_rejects_duplicate_email(client):
    register(client)
    response = register(client, email="new.neighbour@example.com")

    assert response.status_code == 400


def test_register_validates_input(client):
    assert register(client, email="not-an-email").status_code == 422
    assert register(client, password="short").status_code == 422
    assert client.post("/auth/register", json={"email": "a@b.co"}).status_code == 422


def test_login_returns_token_with_user_claims(client, resident):
    response = client.post(
        "/auth/login", json={"email": "RESIDENT@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == resident["id"]
    assert "password" not in body["user"]

    claims = jwt.decode(body["token"], SECRET_KEY, algorithms=[JWT_ALGORITHM])
    assert claims["userId"] == resident["id"]
    assert claims["email"] == resident["email"]
    assert claims["role"] == "USER"
    assert "exp" in claims


def test_login_with_wrong_password_or_unknown_email_is_401(client, resident):
    wrong = client.post("/auth/login", json={"email": resident["email"], "password": "nope-nope"})
    unknown = client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever1"})

    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"] == "Invalid credentials"


def test_login_is_rate_limited(client, resident):
    for _ in range(AUTH_RATE_LIMIT):
        client.post("/auth/login", json={"email": resident["email"], "password": "wrong-pass"})

    response = client.post("/auth/login", json={"email": resident["email"], "password": DEFAULT_PASSWORD})

    assert response.status_code == 429
    assert "Retry-After" in response.headers


def test_rate_limit_counts_per_client_ip(client, resident):
    key = "login:203.0.113.9"
    for _ in range(AUTH_RATE_LIMIT):
        rate_limiter.check_rate_limit(key, AUTH_RATE_LIMIT, 60)

    blocked = client.post(
        "/auth/login",
        json={"email": resident["email"], "password": DEFAULT_PASSWORD},
        headers={"X-Forwarded-For": "203.0.113.9"},
    )
    allowed = client.post("/auth/login", json={"email": resident["email"], "password": DEFAULT_PASSWORD})

    assert blocked.status_code == 429
    assert allowed.status_code == 200


def test_lookup_user_by_email(client, resident):
    found = client.get("/auth/user", params={"email": resident["email"]})
    missing = client.get("/auth/user", params={"email": "ghost@example.com"})

    assert found.status_code == 200
    assert found.json()["name"] == "Rita Resident"
    assert "password" not in found.json()
    assert missing.status_code == 404


def test_me_requires_valid_token(client, resident, auth_headers):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

    response = client.get("/auth/me", headers=auth_headers(resident))
    assert response.status_code == 200
    assert response.json()["email"] == resident["email"]


def test_token_of_deleted_user_is_rejected(client, store, resident, auth_headers):
    headers = auth_headers(resident)
    store.write("users", [])

    assert client.get("/auth/me", headers=headers).status_code == 401
