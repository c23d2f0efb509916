from datetime import date, timedelta

from unveil.tests.helpers import (
    EVENT_ID, GUEST_TOKEN, GUEST_USER_ID, HOST_ID, HOST_TOKEN, OTHER_TOKEN, auth_header
)

EVENTS_URL = "/api/events"
NEXT_YEAR = (date.today() + timedelta(days=365)).isoformat()


def test_create_event_makes_caller_host(client, fake_db):
    response = client.post(EVENTS_URL, headers=auth_header(OTHER_TOKEN), json={
        "title": "  Rehearsal Dinner ",
        "event_date": NEXT_YEAR,
        "location": "Sonoma",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Rehearsal Dinner"
    assert body["event_date"] == NEXT_YEAR
    stored = fake_db.rows("events")[-1]
    assert stored["host_user_id"] == body["host_user_id"]
    assert stored["host_user_id"] != HOST_ID


def test_create_event_rejects_past_date(client):
    response = client.post(EVENTS_URL, headers=auth_header(HOST_TOKEN), json={
        "title": "Too late", "event_date": "2001-01-01"
    })

    assert response.status_code == 400
    assert "Event date must be in the future" in response.json()["detail"]


def test_create_event_requires_title(client):
    response = client.post(EVENTS_URL, headers=auth_header(HOST_TOKEN), json={"title": "", "event_date": NEXT_YEAR})

    assert response.status_code == 400


def test_create_event_requires_login(client):
    assert client.post(EVENTS_URL, json={"title": "x", "event_date": NEXT_YEAR}).status_code == 401


def test_hosted_events(client, fake_db):
    fake_db.seed("events", {"id": "other", "title": "Not mine", "event_date": NEXT_YEAR, "host_user_id": "someone"})

    response = client.get(f"{EVENTS_URL}/hosted", headers=auth_header(HOST_TOKEN))

    assert [e["id"] for e in response.json()] == [EVENT_ID]


def test_joined_events(client, fake_db):
    fake_db.seed("event_guests", {"event_id": EVENT_ID, "user_id": GUEST_USER_ID, "created_at": "2026-02-01T00:00:00+00:00"})

    joined = client.get(f"{EVENTS_URL}/joined", headers=auth_header(GUEST_TOKEN))
    nothing = client.get(f"{EVENTS_URL}/joined", headers=auth_header(OTHER_TOKEN))

    assert [e["title"] for e in joined.json()] == ["Sam & Alex's Wedding"]
    assert nothing.json() == []


def test_host_sees_details(client):
    response = client.get(f"{EVENTS_URL}/{EVENT_ID}", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "host"
    assert body["host"]["full_name"] == "Sam Host"
    assert body["guest"] is None


def test_guest_sees_own_rsvp(client, fake_db):
    fake_db.seed("event_guests", {"id": "g1", "event_id": EVENT_ID, "user_id": GUEST_USER_ID, "rsvp_status": "Maybe"})

    body = client.get(f"{EVENTS_URL}/{EVENT_ID}", headers=auth_header(GUEST_TOKEN)).json()

    assert body["role"] == "guest"
    assert body["guest"]["rsvp_status"] == "Maybe"


def test_stranger_cannot_see_event(client):
    response = client.get(f"{EVENTS_URL}/{EVENT_ID}", headers=auth_header(OTHER_TOKEN))

    assert response.status_code == 404


def test_unknown_event(client):
    assert client.get(f"{EVENTS_URL}/missing", headers=auth_header(HOST_TOKEN)).status_code == 404


def test_update_event(client, fake_db):
    response = client.put(f"{EVENTS_URL}/{EVENT_ID}", headers=auth_header(HOST_TOKEN), json={"location": "Sonoma, CA"})

    assert response.status_code == 200
    assert response.json()["location"] == "Sonoma, CA"
    assert response.json()["title"] == "Sam & Alex's Wedding"
    assert fake_db.rows("events")[0]["updated_at"]


def test_only_host_updates(client, fake_db):
    fake_db.seed("event_guests", {"event_id": EVENT_ID, "user_id": GUEST_USER_ID})

    response = client.put(f"{EVENTS_URL}/{EVENT_ID}", headers=auth_header(GUEST_TOKEN), json={"title": "Mine now"})

    assert response.status_code == 404
    assert fake_db.rows("events")[0]["title"] == "Sam & Alex's Wedding"


def test_delete_event(client, fake_db):
    response = client.delete(f"{EVENTS_URL}/{EVENT_ID}", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 204
    assert fake_db.rows("events") == []


def test_analytics(client, fake_db):
    fake_db.seed(
        "event_guests",
        {"event_id": EVENT_ID, "rsvp_status": "Attending"},
        {"event_id": EVENT_ID, "rsvp_status": "Attending"},
        {"event_id": EVENT_ID, "rsvp_status": "Declined"},
        {"event_id": EVENT_ID, "rsvp_status": None},
    )
    fake_db.seed("messages", {"event_id": EVENT_ID}, {"event_id": EVENT_ID})
    fake_db.seed("media", {"event_id": EVENT_ID})

    response = client.get(f"{EVENTS_URL}/{EVENT_ID}/analytics", headers=auth_header(HOST_TOKEN))

    assert response.json() == {
        "event_id": EVENT_ID,
        "total_guests": 4,
        "attending": 2,
        "declined": 1,
        "maybe": 0,
        "pending": 1,
        "response_rate": 0.75,
        "message_count": 2,
        "media_count": 1,
    }


def test_analytics_host_only(client):
    response = client.get(f"{EVENTS_URL}/{EVENT_ID}/analytics", headers=auth_header(GUEST_TOKEN))

    assert response.status_code == 404
