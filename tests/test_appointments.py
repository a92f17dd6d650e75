import pytest

MONDAY = "2030-01-07"


@pytest.fixture
def schedule(client, coach):
    response = client.post(
        "/availability",
        json={
            "userId": coach["id"],
            "userName": coach["name"],
            "role": "coach",
            "weeklySchedule": [
                {"day": "monday", "slots": [{"startTime": "09:00", "endTime": "12:00"}]},
            ],
            "exceptions": [{"date": "2030-01-14", "available": False, "reason": "Holiday"}],
        },
    )
    assert response.status_code == 201
    return response.json()


def book(client, host_id, start, end, **extra):
    payload = {
        "title": "Intake",
        "startTime": start,
        "endTime": end,
        "hostId": host_id,
        "type": "consultation",
    }
    payload.update(extra)
    return client.post("/appointments", json=payload)


def test_book_appointment_within_availability(client, coach, schedule):
    response = book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", attendeeIds=["r1"])

    assert response.status_code == 201
    appointment = response.json()
    assert appointment["hostName"] == "Chris Coach"
    assert appointment["status"] == "PENDING"
    assert appointment["type"] == "CONSULTATION"
    assert appointment["attendeeIds"] == ["r1"]
    assert client.get(f"/appointments/{appointment['id']}").json() == appointment


def test_double_booking_is_a_conflict(client, coach, schedule):
    book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z")

    response = book(client, coach["id"], f"{MONDAY}T09:30:00Z", f"{MONDAY}T10:30:00Z", title="Second")

    assert response.status_code == 409
    assert "already scheduled" in response.json()["detail"]


def test_booking_on_blocked_date_is_a_conflict(client, coach, schedule):
    response = book(client, coach["id"], "2030-01-14T09:00:00Z", "2030-01-14T10:00:00Z")

    assert response.status_code == 409
    assert "Holiday" in response.json()["detail"]


def test_host_without_availability_is_a_conflict(client, coach):
    response = book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z")

    assert response.status_code == 409


def test_unknown_host_with_availability_is_404(client):
    client.post(
        "/availability",
        json={
            "userId": "ghost",
            "userName": "Ghost",
            "role": "COACH",
            "weeklySchedule": [{"day": "MONDAY", "slots": [{"startTime": "09:00", "endTime": "12:00"}]}],
        },
    )

    response = book(client, "ghost", f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z")

    assert response.status_code == 404


@pytest.mark.parametrize(
    "changes",
    [
        {"endTime": f"{MONDAY}T08:00:00Z"},
        {"startTime": "tomorrow"},
        {"type": "PARTY"},
        {"title": "  "},
    ],
)
def test_invalid_booking_requests(client, coach, schedule, changes):
    payload = {"startTime": f"{MONDAY}T09:00:00Z", "endTime": f"{MONDAY}T10:00:00Z", **changes}

    start, end = payload.pop("startTime"), payload.pop("endTime")

    assert book(client, coach["id"], start, end, **payload).status_code == 422


def test_rejected_appointment_frees_the_slot(client, coach, schedule):
    first = book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z").json()

    rejected = client.patch(
        f"/appointments/{first['id']}", json={"status": "rejected", "rejectionReason": "Double shift"}
    ).json()
    assert rejected["status"] == "REJECTED"
    assert rejected["rejectionReason"] == "Double shift"

    assert book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z").status_code == 201


def test_rejection_reason_is_cleared_when_status_moves_on(client, store, coach, schedule):
    appointment = book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z").json()
    client.patch(f"/appointments/{appointment['id']}", json={"status": "REJECTED", "rejectionReason": "Double shift"})

    confirmed = client.patch(f"/appointments/{appointment['id']}", json={"status": "CONFIRMED"})
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "CONFIRMED"
    assert "rejectionReason" not in confirmed.json()
    stored = next(a for a in store.read("appointments") if a["id"] == appointment["id"])
    assert "rejectionReason" not in stored


def test_rejection_without_reason_stores_empty_reason(client, coach, schedule):
    appointment = book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z").json()
    rejected = client.patch(f"/appointments/{appointment['id']}", json={"status": "REJECTED"}).json()
    assert rejected["rejectionReason"] == ""


def test_booking_against_legacy_slot_format_is_refused_not_crashed(client, store, coach):
    store.write(
        "availability",
        [
            {
                "id": "legacy",
                "userId": coach["id"],
                "weeklySchedule": [{"day": "MONDAY", "slots": [{"start": "09:00", "end": "12:00"}]}],
            }
        ],
    )

    response = book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z")
    assert response.status_code == 409
    assert "no available time slots" in response.json()["detail"]


def test_status_update_validation(client):
    assert client.patch("/appointments/missing", json={"status": "CONFIRMED"}).status_code == 404
    assert client.patch("/appointments/missing", json={"status": "DONE"}).status_code == 422


def test_list_appointments_by_host_and_range(client, coach, schedule):
    book(client, coach["id"], f"{MONDAY}T11:00:00Z", f"{MONDAY}T12:00:00Z", title="Late")
    book(client, coach["id"], f"{MONDAY}T09:00:00Z", f"{MONDAY}T10:00:00Z", title="Early")
    book(client, coach["id"], "2030-01-21T09:00:00Z", "2030-01-21T10:00:00Z", title="Next week")

    listed = client.get("/appointments", params={"hostId": coach["id"]}).json()
    assert [a["title"] for a in listed] == ["Early", "Late", "Next week"]

    in_range = client.get("/appointments", params={"startDate": MONDAY, "endDate": MONDAY}).json()
    assert [a["title"] for a in in_range] == ["Early", "Late"]

    assert client.get("/appointments", params={"hostId": "someone-else"}).json() == []
    assert client.get("/appointments", params={"startDate": "soon", "endDate": MONDAY}).status_code == 400


def test_publishing_availability_again_replaces_it(client, coach, schedule):
    response = client.post(
        "/availability",
        json={
            "userId": coach["id"],
            "userName": coach["name"],
            "role": "COACH",
            "weeklySchedule": [{"day": "TUESDAY", "slots": [{"startTime": "10:00", "endTime": "11:00"}]}],
        },
    )

    assert response.status_code == 200
    record = response.json()
    assert record["id"] == schedule["id"]
    assert record["weeklySchedule"][0]["day"] == "TUESDAY"
    assert record["exceptions"] == []
    assert len(client.get("/availability").json()) == 1


@pytest.mark.parametrize(
    "slot",
    [
        {"startTime": "9:00", "endTime": "10:00"},
        {"startTime": "11:00", "endTime": "10:00"},
    ],
)
def test_availability_slots_are_validated(client, coach, slot):
    response = client.post(
        "/availability",
        json={
            "userId": coach["id"],
            "userName": coach["name"],
            "role": "COACH",
            "weeklySchedule": [{"day": "MONDAY", "slots": [slot]}],
        },
    )

    assert response.status_code == 422


def test_availability_filters_and_date_view(client, coach, schedule):
    assert client.get("/availability", params={"role": "admin"}).json() == []
    assert len(client.get("/availability", params={"userId": coach["id"]}).json()) == 1

    monday = client.get("/availability", params={"date": MONDAY}).json()
    assert monday[0]["userId"] == coach["id"]
    assert monday[0]["availableSlots"] == [{"startTime": "09:00", "endTime": "12:00"}]

    holiday = client.get("/availability", params={"date": "2030-01-14"}).json()
    assert holiday[0]["availableSlots"] == []
    assert holiday[0]["unavailableReason"] == "Holiday"

    assert client.get("/availability", params={"date": "14-01-2030"}).status_code == 400
