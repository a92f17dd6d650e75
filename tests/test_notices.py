from datetime import datetime, timedelta, timezone

from resident_portal.shared.dates import parse_iso


def test_create_notice_applies_defaults(client):
    response = client.post("/notices", json={"title": "Lift maintenance", "content": "Tuesday morning"})

    assert response.status_code == 201
    notice = response.json()
    assert notice["important"] is False
    assert notice["userId"] == "anonymous"
    assert notice["userName"] == "Anonymous"
    expires = parse_iso(notice["expiresAt"])
    expected = datetime.now(timezone.utc) + timedelta(days=30)
    assert abs((expires - expected).total_seconds()) < 60


def test_date_only_expiry_lasts_until_end_of_day(client):
    notice = client.post(
        "/notices", json={"title": "Fair", "content": "Square", "expiresAt": "2099-05-01", "important": True}
    ).json()

    assert notice["expiresAt"] == "2099-05-01T23:59:59Z"
    assert notice["important"] is True


def test_invalid_expiry_is_rejected(client):
    response = client.post("/notices", json={"title": "T", "content": "C", "expiresAt": "next week"})

    assert response.status_code == 422


def test_list_hides_expired_notices_and_fills_owner(client, store):
    store.write(
        "notices",
        [
            {"id": "old", "title": "Old", "content": "-", "expiresAt": "2000-01-01", "createdAt": "2000-01-01T00:00:00Z"},
            {"id": "legacy", "title": "Legacy", "content": "-", "expiresAt": "2099-01-01", "createdAt": "2024-01-01T00:00:00Z"},
            {"id": "new", "title": "New", "content": "-", "expiresAt": "2099-01-01T10:00:00Z",
             "createdAt": "2024-06-01T00:00:00Z", "userId": "u1", "userName": "Una"},
        ],
    )

    notices = client.get("/notices").json()

    assert [n["id"] for n in notices] == ["new", "legacy"]
    assert notices[1]["userId"] == "system"
    assert notices[1]["userName"] == "System"


def test_delete_notice_ownership(client, resident, admin, auth_headers):
    notice = client.post(
        "/notices", json={"title": "Mine", "content": "-", "userId": resident["id"], "userName": "Rita"}
    ).json()

    forbidden = client.delete(f"/notices/{notice['id']}", params={"userId": "someone-else"})
    assert forbidden.status_code == 403

    allowed = client.delete(f"/notices/{notice['id']}", headers=auth_headers(admin))
    assert allowed.json() == {"success": True}
    assert client.delete(f"/notices/{notice['id']}").status_code == 404


def test_owner_and_legacy_admin_id_may_delete(client, resident):
    first = client.post("/notices", json={"title": "A", "content": "-", "userId": resident["id"]}).json()
    second = client.post("/notices", json={"title": "B", "content": "-", "userId": resident["id"]}).json()

    assert client.delete(f"/notices/{first['id']}", params={"userId": resident["id"]}).status_code == 200
    assert client.delete(f"/notices/{second['id']}", params={"userId": "admin"}).status_code == 200
