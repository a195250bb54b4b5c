"""
Tests for Authentication.

Covers:
- Password hashing
- JWT creation, decoding, expiry
- Email/Password registration and login
- Bearer token dependency (missing, invalid, unknown user, deactivated user)
- Security headers middleware
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import jwt
import pytest

from orgboard.core.auth import create_jwt, decode_jwt, hash_password, verify_password
from orgboard.core.middleware import SECURITY_HEADERS


# ---------------------------------------------------------------------------
# Unit Tests: Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("MySecureP@ssw0rd!")
        assert hashed != "MySecureP@ssw0rd!"
        assert verify_password("MySecureP@ssw0rd!", hashed)

    def test_wrong_password_fails(self):
        hashed = hash_password("correct-password")
        assert not verify_password("wrong-password", hashed)

    def test_different_hashes_for_same_password(self):
        """bcrypt uses random salt, so hashes differ."""
        h1 = hash_password("same")
        h2 = hash_password("same")
        assert h1 != h2


# ---------------------------------------------------------------------------
# Unit Tests: JWT
# ---------------------------------------------------------------------------

class TestJWT:
    def test_round_trip_claims(self):
        uid = uuid.uuid4()
        payload = decode_jwt(create_jwt(uid, "a@example.com"))
        assert payload["sub"] == str(uid)
        assert payload["email"] == "a@example.com"
        assert payload["exp"] > payload["iat"]

    def test_default_expiry_is_seven_days(self):
        payload = decode_jwt(create_jwt(uuid.uuid4(), "a@example.com"))
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired_token_rejected(self):
        token = create_jwt(uuid.uuid4(), "a@example.com", expires_delta=timedelta(seconds=-10))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_jwt(token)

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "email": "a@example.com"},
            "another-secret-key-0123456789abcdef-xyz",
        )
        with pytest.raises(jwt.InvalidSignatureError):
            decode_jwt(token)


# ---------------------------------------------------------------------------
# Integration Tests: register / login
# ---------------------------------------------------------------------------

class TestRegister:
    async def test_register_returns_token_and_user(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "New@Example.com", "password": "secret1", "name": "New"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["name"] == "New"
        assert decode_jwt(data["token"])["sub"] == data["user"]["id"]

    async def test_duplicate_email_conflicts(self, client, factory):
        await factory.user("Taken")
        resp = await client.post(
            "/api/auth/register",
            json={"email": "taken@example.com", "password": "secret1", "name": "Again"},
        )
        assert resp.status_code == 409
        assert resp.json() == {"error": "User already exists"}

    async def test_short_password_rejected(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "short@example.com", "password": "12345", "name": "Short"},
        )
        assert resp.status_code == 400
        assert "at least 6" in resp.json()["error"]

    async def test_invalid_email_is_validation_error(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "password": "secret1", "name": "X"},
        )
        assert resp.status_code == 400
        issues = resp.json()["error"]
        assert isinstance(issues, list)
        assert any("email" in issue["loc"] for issue in issues)


class TestLogin:
    async def test_login_success(self, client, factory, password):
        user = await factory.user("Lena")
        resp = await client.post(
            "/api/auth/login", json={"email": user.email, "password": password}
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == str(user.id)
        assert decode_jwt(resp.json()["token"])["email"] == user.email

    async def test_wrong_password(self, client, factory):
        user = await factory.user("Lena")
        resp = await client.post(
            "/api/auth/login", json={"email": user.email, "password": "nope-nope"}
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}

    async def test_unknown_email(self, client, password):
        resp = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": password}
        )
        assert resp.status_code == 401

    async def test_deactivated_user_cannot_login(self, client, factory, password):
        user = await factory.user("Dormant", is_active=False)
        resp = await client.post(
            "/api/auth/login", json={"email": user.email, "password": password}
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Account is deactivated"}


# ---------------------------------------------------------------------------
# Integration Tests: bearer dependency
# ---------------------------------------------------------------------------

class TestBearerAuth:
    async def test_missing_header(self, client):
        resp = await client.get("/api/users/me")
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    async def test_malformed_header(self, client):
        resp = await client.get("/api/users/me", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401

    async def test_garbage_token(self, client):
        resp = await client.get("/api/users/me", headers={"Authorization": "Bearer abc.def"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid or expired token"}

    async def test_token_for_deleted_user(self, client):
        token = create_jwt(uuid.uuid4(), "gone@example.com")
        resp = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    async def test_existing_token_stops_working_after_deactivation(self, client, factory, headers_for):
        user = await factory.user("Dormant", is_active=False)
        resp = await client.get("/api/users/me", headers=headers_for(user))
        assert resp.status_code == 401
        assert resp.json() == {"error": "Account is deactivated"}

    async def test_valid_token(self, client, factory, headers_for):
        user = await factory.user("Lena")
        resp = await client.get("/api/users/me", headers=headers_for(user))
        assert resp.status_code == 200


class TestSecurityHeaders:
    async def test_headers_present(self, client):
        resp = await client.get("/health")
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers[header] == value
        assert resp.headers["X-Request-ID"]

    async def test_request_id_echoed(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"
