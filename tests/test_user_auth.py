# =============================================================================
# tests/test_user_auth.py - User registration, login and token lifecycle
# =============================================================================

import httpx

from conftest import login, register_guard, register_user
from config import settings
from models.users import User
from utils.cloudinary import media_client


class TestRegisterUser:
    def test_register_returns_envelope_without_secrets(self, client, fake_uploads):
        resp = register_user(client)

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["statusCode"] == 201
        assert body["message"] == "User registered successfully"

        data = body["data"]
        assert data["userName"] == "alice"
        assert data["email"] == "alice@example.com"
        assert data["role"] == "user"
        assert data["avatar"].startswith("http://res.cloudinary.com/test-cloud/")
        assert isinstance(data["_id"], int)
        assert "password" not in data and "passwordHash" not in data
        assert "refreshToken" not in data
        assert fake_uploads[0]["folder"] == "avatars"

    def test_duplicate_username_or_email_rejected(self, client):
        assert register_user(client).status_code == 201

        same_email = register_user(client, userName="other")
        same_name = register_user(client, email="other@example.com")

        for resp in (same_email, same_name):
            assert resp.status_code == 409
            assert resp.json() == {"status": 409, "message": "User already exists", "success": False}

    def test_missing_field_rejected(self, client):
        resp = register_user(client, fullName="")

        assert resp.status_code == 400
        assert resp.json()["message"] == "All fields are required"

    def test_missing_avatar_rejected(self, client):
        resp = client.post(
            "/api/v1/user/register",
            data={"userName": "a", "fullName": "A", "email": "a@example.com", "password": "x"},
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == "Avatar image is required"

    def test_invalid_email_rejected(self, client):
        resp = register_user(client, email="not-an-email")

        assert resp.status_code == 400
        assert "email" in resp.json()["message"]

    def test_upload_failure_reported_and_user_not_created(self, client, monkeypatch, db_session):
        async def _fail(local_path, folder=None):
            raise httpx.ConnectError("cloudinary down")

        monkeypatch.setattr(media_client, "upload_image", _fail)
        resp = register_user(client)

        assert resp.status_code == 500
        assert resp.json()["message"] == "Failed to upload avatar"
        assert db_session.query(User).count() == 0

    def test_upload_without_url_reported(self, client, monkeypatch, db_session):
        async def _no_url(local_path, folder=None):
            return {"public_id": "avatars/orphan"}

        monkeypatch.setattr(media_client, "upload_image", _no_url)
        resp = register_user(client)

        assert resp.status_code == 500
        assert resp.json()["message"] == "Failed to upload avatar"
        assert db_session.query(User).count() == 0

    def test_admin_signup_can_be_disabled(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_ADMIN_SIGNUP", False)

        admin = register_user(client, userName="mallory", email="mallory@example.com", role="admin")
        regular = register_user(client)

        assert admin.status_code == 403
        assert admin.json()["message"] == "Admin registration is disabled"
        assert regular.status_code == 201


class TestLoginUser:
    def test_wrong_password_rejected(self, client):
        register_user(client)
        resp = login(client, "user", "alice@example.com", "wrong")

        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid credentials"
        assert "accessToken" not in resp.cookies

    def test_unknown_account(self, client):
        resp = login(client, "user", "ghost@example.com", "whatever")

        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"

    def test_identifier_required(self, client):
        resp = client.post("/api/v1/user/login", json={"password": "secret123"})

        assert resp.status_code == 400
        assert resp.json()["message"] == "Provide either username or email"

    def test_login_by_username_sets_cookies(self, client, db_session):
        register_user(client)
        resp = login(client, "user", "ALICE", "secret123")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["user"]["userName"] == "alice"
        assert resp.cookies.get("accessToken") == data["accessToken"]
        assert resp.cookies.get("refreshToken") == data["refreshToken"]

        stored = db_session.query(User).filter_by(user_name="alice").one()
        assert stored.refresh_token == data["refreshToken"]

    def test_current_user_via_cookie_and_bearer(self, client, make_client):
        register_user(client)
        token = login(client, "user", "alice@example.com", "secret123").json()["data"]["accessToken"]

        via_cookie = client.get("/api/v1/user/current-user")
        assert via_cookie.status_code == 200
        assert via_cookie.json()["data"]["email"] == "alice@example.com"

        anonymous = make_client()
        via_header = anonymous.get("/api/v1/user/current-user", headers={"Authorization": f"Bearer {token}"})
        assert via_header.status_code == 200

    def test_current_user_requires_token(self, client):
        resp = client.get("/api/v1/user/current-user")

        assert resp.status_code == 401
        assert resp.json()["message"] == "Unauthorized request"

    def test_garbage_token_rejected(self, client):
        resp = client.get("/api/v1/user/current-user", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid access token"

    def test_guard_token_cannot_act_as_user(self, make_client):
        guard = make_client()
        register_guard(guard)
        login(guard, "guard", "gbob", "guardpass")

        resp = guard.get("/api/v1/user/current-user")
        assert resp.status_code == 401


class TestTokenLifecycle:
    def test_refresh_rotates_cookies(self, user_client, make_client, db_session):
        old_refresh = user_client.cookies.get("refreshToken")
        old_access = user_client.cookies.get("accessToken")

        resp = user_client.post("/api/v1/user/refresh-tokens")

        assert resp.status_code == 200
        assert resp.json()["message"] == "Access token refreshed successfully"
        new_refresh = resp.cookies.get("refreshToken")
        new_access = resp.cookies.get("accessToken")
        assert new_refresh and new_refresh != old_refresh
        assert new_access and new_access != old_access
        assert resp.json()["data"] == {"accessToken": new_access, "refreshToken": new_refresh}

        stored = db_session.query(User).filter_by(user_name="alice").one()
        assert stored.refresh_token == new_refresh

        # The rotated-away token is no longer accepted
        other = make_client()
        replay = other.post("/api/v1/user/refresh-tokens", json={"refreshToken": old_refresh})
        assert replay.status_code == 401
        assert replay.json()["message"] == "Invalid refresh token"

    def test_refresh_accepts_body_token(self, user_client, make_client):
        token = user_client.cookies.get("refreshToken")

        resp = make_client().post("/api/v1/user/refresh-tokens", json={"refreshToken": token})

        assert resp.status_code == 200

    def test_expired_refresh_token_rejected(self, make_client, monkeypatch):
        monkeypatch.setattr(settings, "REFRESH_TOKEN_EXPIRE_DAYS", -1)
        c = make_client()
        register_user(c)
        assert login(c, "user", "alice@example.com", "secret123").status_code == 200

        resp = c.post("/api/v1/user/refresh-tokens")

        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid refresh token"

    def test_refresh_without_token(self, client):
        resp = client.post("/api/v1/user/refresh-tokens")

        assert resp.status_code == 401
        assert resp.json()["message"] == "Unauthorized request"

    def test_refresh_with_access_token_rejected(self, user_client, make_client):
        access = user_client.cookies.get("accessToken")

        resp = make_client().post("/api/v1/user/refresh-tokens", json={"refreshToken": access})

        assert resp.status_code == 401

    def test_logout_clears_tokens(self, user_client, make_client, db_session):
        refresh = user_client.cookies.get("refreshToken")

        resp = user_client.post("/api/v1/user/logout")

        assert resp.status_code == 200
        assert resp.json()["message"] == "User logged out"
        assert user_client.cookies.get("accessToken") is None
        assert user_client.get("/api/v1/user/current-user").status_code == 401

        stored = db_session.query(User).filter_by(user_name="alice").one()
        assert stored.refresh_token is None

        replay = make_client().post("/api/v1/user/refresh-tokens", json={"refreshToken": refresh})
        assert replay.status_code == 401

    def test_check_refresh(self, client, user_client):
        missing = client.get("/api/v1/user/check-refresh")
        present = user_client.get("/api/v1/user/check-refresh")

        assert missing.status_code == 401
        assert missing.json() == {"status": 401}
        assert present.status_code == 200
        assert present.json() == {"status": 200}


class TestUserProfile:
    def test_get_user_by_username(self, client):
        register_user(client)

        resp = client.get("/api/v1/user/Alice")

        assert resp.status_code == 200
        assert resp.json()["data"]["fullName"] == "Alice Doe"

    def test_get_unknown_user(self, client):
        resp = client.get("/api/v1/user/nobody")

        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found"
