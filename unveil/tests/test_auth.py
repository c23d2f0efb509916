from unveil.modules.auth import service as auth_service
from unveil.modules.auth.service import AuthService
from unveil.tests.fakes import FakeAPIError
from unveil.tests.helpers import GUEST_TOKEN, HOST_ID, HOST_TOKEN, auth_header


def test_me_returns_token_user(client):
    response = client.get("/api/auth/me", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 200
    assert response.json()["id"] == HOST_ID
    assert response.json()["email"] == "host@example.com"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Authorization required"


def test_invalid_token(client):
    response = client.get("/api/auth/me", headers=auth_header("forged"))

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid authentication"


def test_token_lookups_are_cached(client, fake_db):
    client.get("/api/auth/me", headers=auth_header(HOST_TOKEN))
    client.get("/api/auth/me", headers=auth_header(HOST_TOKEN))

    assert fake_db.auth.get_user_calls == 1


def test_expired_entries_make_room_in_a_full_cache(fake_db, monkeypatch):
    monkeypatch.setattr(auth_service, "_AUTH_CACHE_MAX_SIZE", 2)
    auth_service._AUTH_USER_CACHE.update({"stale-1": ({}, 0.0), "stale-2": ({}, 0.0)})
    service = AuthService(fake_db, fake_db.session_client)

    service.get_current_user(HOST_TOKEN)
    service.get_current_user(HOST_TOKEN)

    assert fake_db.auth.get_user_calls == 1
    assert list(auth_service._AUTH_USER_CACHE) == [auth_service._cache_key(HOST_TOKEN)]


def test_logout_drops_cached_token(client, fake_db):
    client.get("/api/auth/me", headers=auth_header(HOST_TOKEN))

    response = client.post("/api/auth/logout", headers=auth_header(HOST_TOKEN))
    client.get("/api/auth/me", headers=auth_header(HOST_TOKEN))

    assert response.json() == {"message": "Logged out successfully"}
    assert fake_db.auth.get_user_calls == 2
    assert fake_db.auth.admin.signed_out == [(HOST_TOKEN, "local")]


def test_logout_requires_token(client):
    assert client.post("/api/auth/logout").status_code == 401


def test_login(client):
    response = client.post("/api/auth/login", json={"email": "host@example.com", "password": "pw"})

    assert response.json() == {
        "access_token": HOST_TOKEN,
        "token_type": "bearer",
        "user_id": HOST_ID,
        "email": "host@example.com",
    }


def test_login_leaves_shared_client_anonymous(client, fake_db):
    client.post("/api/auth/login", json={"email": "host@example.com", "password": "pw"})
    client.post("/api/auth/login", json={"email": "guest@example.com", "password": "pw"})

    assert fake_db.auth.session_token is None
    assert [c.auth.session_token for c in fake_db.session_clients] == [HOST_TOKEN, GUEST_TOKEN]


def test_login_with_bad_credentials(client):
    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "pw"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_register(client, fake_db):
    response = client.post("/api/auth/register", json={
        "email": "new@example.com", "password": "longenough", "phone": "(555) 123-4567"
    })

    assert response.status_code == 201
    assert response.json()["email"] == "new@example.com"
    assert fake_db.auth.sign_ups[0]["options"] == {"data": {"phone": "+15551234567"}}


def test_register_rejects_bad_phone(client, fake_db):
    response = client.post("/api/auth/register", json={
        "email": "new@example.com", "password": "longenough", "phone": "12345"
    })

    assert response.status_code == 400
    assert fake_db.auth.sign_ups == []


def test_register_existing_user(client, fake_db):
    fake_db.auth.errors["sign_up"] = FakeAPIError("User already registered")

    response = client.post("/api/auth/register", json={"email": "host@example.com", "password": "longenough"})

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_register_short_password(client):
    response = client.post("/api/auth/register", json={"email": "new@example.com", "password": "short"})

    assert response.status_code == 400


def test_magic_link(client, fake_db):
    response = client.post("/api/auth/magic-link", json={
        "email": "guest@example.com", "redirect_to": "https://unveil.app/select-event"
    })

    assert response.status_code == 202
    assert fake_db.auth.otp_requests == [{
        "email": "guest@example.com",
        "options": {"should_create_user": True, "email_redirect_to": "https://unveil.app/select-event"},
    }]
