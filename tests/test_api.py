"""Auth and user API endpoint tests."""

import pytest

from src.config import get_settings
from src.database import engine
from src.exceptions import ConflictError
from src.repositories.users import UserRepository
from src.services.tokens import get_token_service
from tests.conftest import PNG_DATA_URI


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_engine_pool_follows_settings():
    """The application engine is sized from the settings."""
    assert engine.pool.size() == get_settings().db_pool_size


def test_unknown_route(client):
    """Unmatched routes report method and path."""
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"message": "request GET /api/nowhere not found"}


def test_wrong_method_on_known_path(client):
    """A path that exists under another method is reported like an unknown route."""
    response = client.patch("/api/posts/1")
    assert response.status_code == 404
    assert response.json() == {"message": "request PATCH /api/posts/1 not found"}

    response = client.get("/api/auth/login")
    assert response.status_code == 404
    assert response.json() == {"message": "request GET /api/auth/login not found"}


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/api/auth/register",
        json={"name": "New User", "email": "newuser@example.com", "password": "password123"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "New User"
    assert data["email"] == "newuser@example.com"
    assert isinstance(data["id"], int)
    assert "password" not in data
    assert "password_hash" not in data
    assert "token" not in data


def test_register_with_profile_picture(client, blob_store):
    """A profile picture given at registration is uploaded."""
    response = client.post(
        "/api/auth/register",
        json={
            "name": "Pic User",
            "email": "pic@example.com",
            "password": "password123",
            "profilePicture": PNG_DATA_URI,
        },
    )
    assert response.status_code == 201
    assert response.json()["profilePicture"].startswith("https://media.test/profiles/")
    assert len(blob_store.objects) == 1


def test_register_duplicate_email(client, auth_headers):
    """Registering the same email twice fails the second time."""
    response = client.post(
        "/api/auth/register",
        json={"name": "Duplicate", "email": auth_headers.email, "password": "password123"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "User with this email already exists"


def test_add_user_with_taken_email_conflicts(db):
    """Two sign-ups racing past the lookup are settled by the unique email index."""
    users = UserRepository(db)
    users.add("First", "race@example.com", "hash")

    with pytest.raises(ConflictError, match="User with this email already exists"):
        users.add("Second", "race@example.com", "hash")
    assert users.get_by_email("race@example.com").name == "First"


def test_email_is_kept_exactly_as_given(client):
    """Emails are stored and matched byte-for-byte, without normalization."""
    response = client.post(
        "/api/auth/register",
        json={"name": "Bob", "email": "Bob@Example.COM", "password": "password123"},
    )
    assert response.status_code == 201
    assert response.json()["email"] == "Bob@Example.COM"

    response = client.post(
        "/api/auth/login", json={"email": "Bob@Example.COM", "password": "password123"}
    )
    assert response.status_code == 200
    assert response.json()["email"] == "Bob@Example.COM"
    assert get_token_service().verify(response.json()["token"]).email == "Bob@Example.COM"

    response = client.post(
        "/api/auth/login", json={"email": "Bob@example.com", "password": "password123"}
    )
    assert response.status_code == 400

    response = client.post(
        "/api/auth/register",
        json={"name": "Other Bob", "email": "Bob@example.com", "password": "password123"},
    )
    assert response.status_code == 201
    assert response.json()["email"] == "Bob@example.com"


def test_register_validation(client):
    """Missing and malformed fields are rejected before touching the store."""
    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": ""})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation error"
    fields = {error["field"] for error in body["errors"]}
    assert {"name", "email", "password"} <= fields


def test_login(client, auth_headers):
    """Login returns the claims, a token and sets the cookie."""
    response = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == auth_headers.user_id
    assert data["name"] == "Test User"
    assert data["email"] == auth_headers.email
    assert data["token"]
    assert response.cookies.get("token") == data["token"]

    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie


def test_login_token_decodes_to_registered_identity(client, auth_headers):
    """The issued token verifies back to the registration identity."""
    response = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    claims = get_token_service().verify(response.json()["token"])
    assert claims.id == auth_headers.user_id
    assert claims.name == "Test User"
    assert claims.email == auth_headers.email


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Email or password wrong"}
    assert "token" not in response.cookies


def test_login_unknown_email(client):
    """Unknown emails get the same message as wrong passwords."""
    response = client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "whatever"}
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Email or password wrong"}


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/users/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "id": auth_headers.user_id,
        "name": "Test User",
        "email": auth_headers.email,
    }


def test_get_current_user_requires_token(client):
    """Protected endpoints reject missing and forged tokens."""
    assert client.get("/api/users/me").status_code == 401

    response = client.get("/api/users/me", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_logout(client, auth_headers):
    """Logout with the login cookie succeeds and clears it."""
    client.post("/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"})

    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_logout_invalid_cookie(client):
    """A bad cookie still gets cleared, but the request is unauthorized."""
    client.cookies.set("token", "garbage")

    response = client.post("/api/auth/logout")
    assert response.status_code == 401
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_logout_does_not_revoke_bearer_token(client, auth_headers):
    """Tokens stay valid for bearer use after logout."""
    client.post("/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"})
    client.post("/api/auth/logout")

    response = client.get("/api/users/me", headers=auth_headers)
    assert response.status_code == 200


def test_update_profile_name_keeps_picture(client, blob_store):
    """Changing only the name never clears an existing picture."""
    client.post(
        "/api/auth/register",
        json={
            "name": "Pic User",
            "email": "pic@example.com",
            "password": "password123",
            "profilePicture": PNG_DATA_URI,
        },
    )
    login = client.post("/api/auth/login", json={"email": "pic@example.com", "password": "password123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    response = client.put("/api/auth/profile", headers=headers, json={"name": "Renamed"})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["profilePicture"].startswith("https://media.test/profiles/")
    assert blob_store.deleted == []


def test_update_profile_picture_replaces_old_blob(client, blob_store):
    """A new picture is uploaded and the previous blob deleted."""
    client.post(
        "/api/auth/register",
        json={
            "name": "Pic User",
            "email": "pic@example.com",
            "password": "password123",
            "profilePicture": PNG_DATA_URI,
        },
    )
    old_ref = next(iter(blob_store.objects))
    login = client.post("/api/auth/login", json={"email": "pic@example.com", "password": "password123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    response = client.put(
        "/api/auth/profile", headers=headers, json={"profilePicture": PNG_DATA_URI}
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Pic User"
    assert blob_store.deleted == [old_ref]
    assert old_ref not in blob_store.objects


def test_update_profile_survives_blob_delete_failure(client, blob_store):
    """Failing to delete the old picture does not fail the update."""
    client.post(
        "/api/auth/register",
        json={
            "name": "Pic User",
            "email": "pic@example.com",
            "password": "password123",
            "profilePicture": PNG_DATA_URI,
        },
    )
    login = client.post("/api/auth/login", json={"email": "pic@example.com", "password": "password123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}
    blob_store.fail_deletes = True

    response = client.put(
        "/api/auth/profile", headers=headers, json={"profilePicture": PNG_DATA_URI}
    )
    assert response.status_code == 200


def test_claims_are_a_snapshot(client, auth_headers):
    """Profile edits are not visible through the old token until re-login."""
    client.put("/api/auth/profile", headers=auth_headers, json={"name": "Renamed"})

    stale = client.get("/api/users/me", headers=auth_headers)
    assert stale.json()["name"] == "Test User"

    stored = client.get("/api/users/me/profile", headers=auth_headers)
    assert stored.json()["name"] == "Renamed"

    login = client.post(
        "/api/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert login.json()["name"] == "Renamed"
