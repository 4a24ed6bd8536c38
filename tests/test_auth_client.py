"""Tests for the auth client and error mapping."""

import json
import time
from datetime import datetime, timedelta, timezone

import httpx
import jwt
import pytest

from storefront.errors import AuthError
from storefront.services.auth_client import (
    GENERIC_AUTH_MESSAGE,
    AuthClient,
    AuthSession,
    AuthUser,
    friendly_auth_message,
)

BASE_URL = "https://project.backend.test"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"


def _client(handler=None, jwt_secret=None) -> AuthClient:
    handler = handler or (lambda request: httpx.Response(200, json={}))
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AuthClient(BASE_URL, "anon-key", jwt_secret=jwt_secret, http_client=http_client)


def _token(secret: str = JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    payload = {
        "sub": "user-1",
        "email": "asha@example.com",
        "user_metadata": {"full_name": "Asha Rao"},
        "exp": int(time.time()) + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def _session_payload() -> dict:
    return {
        "access_token": _token(),
        "refresh_token": "refresh",
        "expires_in": 3600,
        "user": {"id": "user-1", "email": "asha@example.com", "user_metadata": {"full_name": "Asha Rao"}},
    }


class TestFriendlyMessages:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Invalid login credentials", "Invalid email or password. Please check your credentials and try again."),
            ("email_not_confirmed", "Please verify your email address before signing in. Check your inbox for the verification link."),
            ("User already registered", "An account with this email already exists. Try signing in instead."),
            ("Password should be at least 6 characters", "Password must be at least 6 characters long."),
            ("Too many requests", "Too many attempts. Please wait a moment before trying again."),
        ],
    )
    def test_known_failures(self, raw, expected):
        assert friendly_auth_message(raw) == expected

    def test_unmapped_message_passes_through(self):
        assert friendly_auth_message("Signups not allowed for this instance") == "Signups not allowed for this instance"

    def test_empty_message_uses_generic_fallback(self):
        assert friendly_auth_message(None) == GENERIC_AUTH_MESSAGE
        assert friendly_auth_message("") == GENERIC_AUTH_MESSAGE


class TestAuthClient:
    @pytest.mark.asyncio
    async def test_sign_in(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["grant_type"] = request.url.params["grant_type"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_session_payload())

        session = await _client(handler).sign_in("asha@example.com", "secret123")

        assert seen["path"] == "/auth/v1/token"
        assert seen["grant_type"] == "password"
        assert seen["body"] == {"email": "asha@example.com", "password": "secret123"}
        assert session.user.id == "user-1"
        assert session.user.display_name == "Asha Rao"
        assert session.expires_at is not None

    @pytest.mark.asyncio
    async def test_sign_in_failure_is_mapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})

        with pytest.raises(AuthError) as exc_info:
            await _client(handler).sign_in("asha@example.com", "wrong")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message.startswith("Invalid email or password")

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(AuthError, match="Network error"):
            await _client(handler).sign_in("asha@example.com", "secret123")

    @pytest.mark.asyncio
    async def test_sign_up_pending_confirmation(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body["data"] == {"full_name": "Asha Rao"}
            return httpx.Response(200, json={"id": "user-1", "email": "asha@example.com"})

        assert await _client(handler).sign_up("asha@example.com", "secret123", full_name="Asha Rao") is None

    @pytest.mark.asyncio
    async def test_sign_up_with_session(self):
        client = _client(lambda request: httpx.Response(200, json=_session_payload()))

        session = await client.sign_up("asha@example.com", "secret123")

        assert session.refresh_token == "refresh"

    @pytest.mark.asyncio
    async def test_sign_out_sends_user_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(204)

        await _client(handler).sign_out("user-token")

        assert seen["auth"] == "Bearer user-token"

    @pytest.mark.asyncio
    async def test_reset_password(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["redirect_to"] = request.url.params.get("redirect_to")
            return httpx.Response(200, json={})

        await _client(handler).reset_password("asha@example.com", redirect_to="https://shop.test/auth?reset=true")

        assert seen == {"path": "/auth/v1/recover", "redirect_to": "https://shop.test/auth?reset=true"}

    @pytest.mark.asyncio
    async def test_get_user(self):
        client = _client(lambda request: httpx.Response(200, json={"id": "user-1", "email": "asha@example.com"}))

        user = await client.get_user("user-token")

        assert user == AuthUser(id="user-1", email="asha@example.com")
        assert user.display_name == "asha"

    def test_oauth_url(self):
        url = _client().oauth_url("google", redirect_to="https://shop.test/")

        assert url.startswith(f"{BASE_URL}/auth/v1/authorize?provider=google")
        assert "redirect_to=https%3A%2F%2Fshop.test%2F" in url


class TestUserFromToken:
    def test_verified_token(self):
        user = _client(jwt_secret=JWT_SECRET).user_from_token(_token())

        assert user.id == "user-1"
        assert user.full_name == "Asha Rao"

    def test_wrong_signature(self):
        assert _client(jwt_secret=JWT_SECRET).user_from_token(_token(secret="another-secret-of-sufficient-length")) is None

    def test_expired_token(self):
        assert _client(jwt_secret=JWT_SECRET).user_from_token(_token(expires_in=-60)) is None

    def test_unverified_claims_without_secret(self):
        user = _client().user_from_token(_token(secret="any-secret-of-sufficient-length-here"))

        assert user.email == "asha@example.com"

    def test_missing_token(self):
        assert _client().user_from_token(None) is None


class TestAuthSession:
    def test_expiry(self):
        now = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
        session = AuthSession(
            access_token="token",
            refresh_token=None,
            user=AuthUser(id="user-1"),
            expires_at=now + timedelta(minutes=5),
        )

        assert not session.expired(now)
        assert session.expired(now + timedelta(minutes=5))

    def test_no_expiry_never_expires(self):
        session = AuthSession(access_token="token", refresh_token=None, user=AuthUser(id="user-1"))

        assert not session.expired()
