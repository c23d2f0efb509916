import pytest

from unveil.tests.helpers import GUEST_USER_ID, HOST_ID, HOST_TOKEN, auth_header


@pytest.fixture
def profiles(fake_db):
    fake_db.seed(
        "users",
        {"id": HOST_ID, "email": "host@example.com", "full_name": "Sam Host", "phone": "+15551110000", "role": "host"},
        {"id": GUEST_USER_ID, "email": "riley@example.com", "full_name": "Riley Guest", "phone": "+15552220000"},
    )


def test_get_my_profile(client, profiles):
    response = client.get("/api/users/me", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 200
    assert response.json()["full_name"] == "Sam Host"


def test_profile_missing(client):
    response = client.get("/api/users/me", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_update_profile_normalizes_phone(client, fake_db, profiles):
    response = client.put("/api/users/me", headers=auth_header(HOST_TOKEN), json={
        "full_name": " Samantha ", "phone": "555.333.4444"
    })

    assert response.status_code == 200
    assert response.json()["full_name"] == "Samantha"
    assert response.json()["phone"] == "+15553334444"
    assert fake_db.rows("users")[0]["updated_at"]


@pytest.mark.parametrize("payload", [
    {"phone": "123"},
    {"avatar_url": "ftp://example.com/me.png"},
    {"full_name": "x" * 101},
])
def test_update_profile_validation(client, profiles, payload):
    response = client.put("/api/users/me", headers=auth_header(HOST_TOKEN), json=payload)

    assert response.status_code == 400


def test_search(client, profiles):
    by_name = client.get("/api/users/search", params={"q": "riley"}, headers=auth_header(HOST_TOKEN)).json()
    by_phone = client.get("/api/users/search", params={"q": "555111"}, headers=auth_header(HOST_TOKEN)).json()
    stripped = client.get("/api/users/search", params={"q": "%,()"}, headers=auth_header(HOST_TOKEN)).json()

    assert [u["id"] for u in by_name] == [GUEST_USER_ID]
    assert [u["id"] for u in by_phone] == [HOST_ID]
    assert stripped == []


def test_search_limit_bounds(client):
    response = client.get("/api/users/search", params={"q": "a", "limit": 51}, headers=auth_header(HOST_TOKEN))

    assert response.status_code == 400


def test_public_profile(client):
    response = client.get(f"/api/users/{HOST_ID}/public", headers=auth_header(HOST_TOKEN))

    assert response.json() == {"id": HOST_ID, "full_name": "Sam Host", "avatar_url": None}


def test_public_profile_missing(client):
    response = client.get("/api/users/unknown/public", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 404
