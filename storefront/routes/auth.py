"""Account routes backed by the hosted auth API"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel

from ..core.readiness import Backend
from ..core.session import ShopperSession
from ..errors import AuthError
from ..services.auth_client import AuthClient, AuthUser
from ..services.validation import EMAIL_RE
from .deps import get_backend, get_current_user, get_shopper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

MIN_PASSWORD_LENGTH = 8


class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(BaseModel):
    full_name: str
    email: str
    password: str
    confirm_password: str


class ResetPasswordRequest(BaseModel):
    email: str
    redirect_to: Optional[str] = None


class UserInfo(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: str


class AuthResponse(BaseModel):
    success: bool
    message: str
    user: Optional[UserInfo] = None


def user_info(user: AuthUser) -> UserInfo:
    return UserInfo(id=user.id, email=user.email, display_name=user.display_name)


def require_auth(backend: Backend) -> AuthClient:
    if backend.auth is None:
        raise HTTPException(status_code=503, detail="Authentication is not configured")
    return backend.auth


def auth_http_error(error: AuthError) -> HTTPException:
    status_code = 429 if error.status_code == 429 else 401
    return HTTPException(status_code=status_code, detail=error.message)


@router.post("/{session_id}/sign-in", response_model=AuthResponse)
async def sign_in(
    body: SignInRequest,
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
):
    """Sign in with email and password"""
    auth = require_auth(backend)
    if not body.email.strip():
        raise HTTPException(status_code=400, detail="Please enter your email address")
    if not body.password:
        raise HTTPException(status_code=400, detail="Please enter your password")

    try:
        session.auth = await auth.sign_in(body.email.strip(), body.password)
    except AuthError as e:
        raise auth_http_error(e)

    return AuthResponse(success=True, message="Successfully signed in!", user=user_info(session.auth.user))


@router.post("/{session_id}/sign-up", response_model=AuthResponse)
async def sign_up(
    body: SignUpRequest,
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
):
    """Create an account"""
    auth = require_auth(backend)
    if not body.full_name.strip():
        raise HTTPException(status_code=400, detail="Please enter your full name")
    if not EMAIL_RE.match(body.email.strip()):
        raise HTTPException(status_code=400, detail="Please enter a valid email address")
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    if body.password != body.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    try:
        auth_session = await auth.sign_up(body.email.strip(), body.password, full_name=body.full_name.strip())
    except AuthError as e:
        raise HTTPException(status_code=400, detail=e.message)

    if auth_session is None:
        return AuthResponse(success=True, message="Account created successfully! You can now sign in.")

    session.auth = auth_session
    return AuthResponse(
        success=True,
        message="Account created and signed in successfully!",
        user=user_info(auth_session.user),
    )


@router.post("/{session_id}/sign-out", response_model=AuthResponse)
async def sign_out(
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
):
    """Sign out; the local session is cleared even if the remote call fails"""
    auth = require_auth(backend)
    access_token = session.access_token
    session.auth = None

    if access_token:
        try:
            await auth.sign_out(access_token)
        except AuthError as e:
            logger.warning(f"Remote sign-out failed: {e}")

    return AuthResponse(success=True, message="Signed out")


@router.post("/{session_id}/reset-password", response_model=AuthResponse)
async def reset_password(
    body: ResetPasswordRequest,
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
):
    """Send a password reset email"""
    auth = require_auth(backend)
    if not EMAIL_RE.match(body.email.strip()):
        raise HTTPException(status_code=400, detail="Please enter a valid email address")

    try:
        await auth.reset_password(body.email.strip(), redirect_to=body.redirect_to)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return AuthResponse(success=True, message="Password reset email sent! Check your inbox.")


@router.get("/oauth/{provider}")
async def oauth_start(
    provider: str,
    redirect_to: Optional[str] = Query(None, description="Where to land after sign-in"),
    backend: Backend = Depends(get_backend),
):
    """URL that starts an OAuth sign-in with the given provider"""
    auth = require_auth(backend)
    return {"provider": provider, "url": auth.oauth_url(provider, redirect_to=redirect_to)}


@router.get("/{session_id}/me", response_model=Optional[UserInfo])
async def current_user(user: Optional[AuthUser] = Depends(get_current_user)):
    """The signed-in user, or null for guests and expired sign-ins"""
    return user_info(user) if user else None
