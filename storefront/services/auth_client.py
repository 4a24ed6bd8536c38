"""
Authentication collaborator

HTTP client for the hosted backend's auth API (GoTrue-style REST).
Access tokens are JWTs; the current user is read from their claims.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
import jwt

from ..errors import AuthError

logger = logging.getLogger(__name__)

GENERIC_AUTH_MESSAGE = "An error occurred. Please try again."

# (raw fragments, friendly message), checked in order
AUTH_ERROR_MESSAGES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Invalid login credentials", "invalid_credentials"),
     "Invalid email or password. Please check your credentials and try again."),
    (("Email not confirmed", "email_not_confirmed"),
     "Please verify your email address before signing in. Check your inbox for the verification link."),
    (("User already registered", "user_already_exists"),
     "An account with this email already exists. Try signing in instead."),
    (("Password should be at least 6 characters", "password_too_short"),
     "Password must be at least 6 characters long."),
    (("Signup requires a valid password", "weak_password"),
     "Please enter a stronger password (at least 6 characters)."),
    (("Unable to validate email address", "invalid_email"),
     "Please enter a valid email address."),
    (("Too many requests", "rate_limit"),
     "Too many attempts. Please wait a moment before trying again."),
)


def friendly_auth_message(raw_message: Optional[str]) -> str:
    """Map a raw auth failure to a short user-facing message"""
    message = raw_message or ""
    for fragments, friendly in AUTH_ERROR_MESSAGES:
        if any(fragment in message for fragment in fragments):
            return friendly
    return message or GENERIC_AUTH_MESSAGE


@dataclass
class AuthUser:
    """Signed-in user identity"""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "AuthUser":
        metadata = payload.get("user_metadata") or {}
        return cls(
            id=str(payload.get("id") or payload.get("sub")),
            email=payload.get("email"),
            full_name=metadata.get("full_name") or metadata.get("name"),
            metadata=metadata,
        )

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        if self.email:
            return self.email.split("@")[0]
        return "User"


@dataclass
class AuthSession:
    """Tokens issued on sign-in"""
    access_token: str
    refresh_token: Optional[str]
    user: AuthUser
    expires_at: Optional[datetime] = None

    def expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(timezone.utc))


class AuthClient:
    """Client for the hosted auth API"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        jwt_secret: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize auth client.

        Args:
            base_url: Backend project URL
            api_key: Public (anon) API key
            jwt_secret: When set, access token signatures are verified
            http_client: Preconfigured client (tests inject a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.jwt_secret = jwt_secret
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
        access_token: Optional[str] = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}/auth/v1{path}"
        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                json=body,
                params=params,
                headers=self._headers(access_token),
            )
        except httpx.HTTPError as e:
            logger.error(f"Auth request failed: {method} {path} - {e}")
            raise AuthError("Network error. Please check your connection and try again.") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            raw = " ".join(
                str(part) for part in (
                    payload.get("error_code"),
                    payload.get("error"),
                    payload.get("error_description") or payload.get("msg") or payload.get("message"),
                ) if part
            )
            logger.error(f"Auth request failed: {response.status_code} - {raw or response.text}")
            raise AuthError(friendly_auth_message(raw), status_code=response.status_code)

        if not response.content:
            return {}
        return response.json()

    def _session_from_payload(self, payload: dict) -> AuthSession:
        expires_at = None
        if payload.get("expires_in"):
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(payload["expires_in"]))
        return AuthSession(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            user=AuthUser.from_payload(payload.get("user") or {}),
            expires_at=expires_at,
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password"""
        payload = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            body={"email": email, "password": password},
        )
        session = self._session_from_payload(payload)
        logger.info(f"User signed in: {session.user.email}")
        return session

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> Optional[AuthSession]:
        """
        Register a new account.

        Returns None when the backend requires email confirmation first.
        """
        body: dict[str, Any] = {"email": email, "password": password}
        if full_name:
            body["data"] = {"full_name": full_name}

        payload = await self._request("POST", "/signup", body=body)
        if payload.get("access_token"):
            return self._session_from_payload(payload)

        logger.info(f"Sign-up pending email confirmation: {email}")
        return None

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/logout", access_token=access_token)

    async def reset_password(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send a password reset email"""
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self._request("POST", "/recover", body={"email": email}, params=params)
        logger.info(f"Password reset requested for {email}")

    def oauth_url(self, provider: str, redirect_to: Optional[str] = None) -> str:
        """URL the browser should visit to start an OAuth sign-in"""
        params = {"provider": provider}
        if redirect_to:
            params["redirect_to"] = redirect_to
        return f"{self.base_url}/auth/v1/authorize?{urlencode(params)}"

    async def get_user(self, access_token: str) -> AuthUser:
        """Fetch the user behind an access token"""
        payload = await self._request("GET", "/user", access_token=access_token)
        return AuthUser.from_payload(payload)

    def user_from_token(self, access_token: Optional[str]) -> Optional[AuthUser]:
        """Read the user from JWT claims; None for missing, expired or invalid tokens"""
        if not access_token:
            return None

        try:
            if self.jwt_secret:
                claims = jwt.decode(
                    access_token,
                    self.jwt_secret,
                    algorithms=["HS256"],
                    options={"verify_aud": False},
                )
            else:
                claims = jwt.decode(
                    access_token,
                    options={"verify_signature": False, "verify_exp": True},
                    algorithms=["HS256", "RS256", "ES256"],
                )
        except jwt.ExpiredSignatureError:
            logger.info("Access token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid access token: {e}")
            return None

        if not claims.get("sub"):
            return None
        return AuthUser.from_payload(claims)
